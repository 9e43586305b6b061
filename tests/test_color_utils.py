"""Tests for color, id and media helpers."""

import math

import pytest


class TestHexNormalization:
    def test_normalize_six_digit(self):
        from brandlens.utils.color_utils import normalize_hex

        assert normalize_hex("#FF5733") == "#ff5733"
        assert normalize_hex("ff5733") == "#ff5733"

    def test_normalize_short_form(self):
        from brandlens.utils.color_utils import normalize_hex

        assert normalize_hex("#F53") == "#ff5533"

    def test_normalize_drops_alpha(self):
        from brandlens.utils.color_utils import normalize_hex

        assert normalize_hex("#FF573380") == "#ff5733"

    @pytest.mark.parametrize("value", ["red", "nope", "#12", "#GGGGGG", "", None, 42])
    def test_invalid_values(self, value):
        from brandlens.utils.color_utils import normalize_hex

        assert normalize_hex(value) is None

    def test_bare_hex_words_are_colors(self):
        from brandlens.utils.color_utils import normalize_hex

        # hex digits without "#" are accepted, so some words parse
        assert normalize_hex("bad") == "#bbaadd"
        assert normalize_hex("FACADE") == "#facade"

    @pytest.mark.parametrize("value", ["#F53", "f53", "#FF5733", "ff5733", "#FF573380", "ff573380", " #AbCdEf "])
    def test_normalize_is_idempotent(self, value):
        import re

        from brandlens.utils.color_utils import normalize_hex

        once = normalize_hex(value)
        assert re.fullmatch(r"#[0-9a-f]{6}", once)
        assert normalize_hex(once) == once

    def test_css_rgb(self):
        from brandlens.utils.color_utils import css_color_to_hex

        assert css_color_to_hex("rgb(255, 87, 51)") == "#ff5733"
        assert css_color_to_hex("rgba(0,0,0,0.5)") == "#000000"
        assert css_color_to_hex("hsl(10, 50%, 50%)") is None


class TestLuminanceAndHue:
    def test_luminance_extremes(self):
        from brandlens.utils.color_utils import luminance

        assert luminance("#000000") == 0
        assert luminance("#ffffff") == pytest.approx(255)
        assert luminance("nope") is None

    def test_structural_colors(self):
        from brandlens.utils.color_utils import is_near_white_or_black

        assert is_near_white_or_black("#ffffff")
        assert is_near_white_or_black("#0a0a0a")
        assert is_near_white_or_black("invalid")
        assert not is_near_white_or_black("#ff5733")

    def test_hue_primaries(self):
        from brandlens.utils.color_utils import hue

        assert hue("#ff0000") == 0
        assert hue("#00ff00") == 120
        assert hue("#0000ff") == 240
        assert hue("#808080") == 0

    def test_hue_distance_wraps(self):
        from brandlens.utils.color_utils import hue_distance

        assert hue_distance(350, 10) == 20
        assert hue_distance(0, 180) == 180

    def test_color_distance(self):
        from brandlens.utils.color_utils import color_distance

        assert color_distance("#000000", "#000000") == 0
        assert color_distance("#000000", "#030404") == pytest.approx(math.sqrt(41))
        assert color_distance("#000000", "nope") == math.inf
        assert color_distance("#000000", "#12") == math.inf


class TestRounding:
    def test_round_half_up(self):
        from brandlens.utils.color_utils import round_half_up

        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2

    def test_round_to_places(self):
        from brandlens.utils.color_utils import round_to_places

        assert round_to_places(0.125) == 0.13
        assert round_to_places(0.375) == 0.38
        assert round_to_places(0.6 + 3 * 0.1) == 0.9
        assert round_to_places(2.25, 1) == 2.3

    def test_round_to_step(self):
        from brandlens.utils.color_utils import round_to_step

        assert round_to_step(10, 4) == 12
        assert round_to_step(9, 4) == 8
        assert round_to_step(22, 8) == 24


class TestIds:
    def test_sequential_ids(self):
        from brandlens.utils.ids import SequentialIds

        ids = SequentialIds()
        assert [ids(), ids(), ids()] == ["rule-1", "rule-2", "rule-3"]

    def test_uuid_ids_are_unique(self):
        from brandlens.utils.ids import uuid_ids

        ids = uuid_ids()
        generated = {ids() for _ in range(50)}
        assert len(generated) == 50
        assert all(i.startswith("rule-") for i in generated)


class TestMediaUtils:
    def test_data_url(self):
        from brandlens.utils.media_utils import to_data_url

        assert to_data_url(b"abc", "png") == "data:image/png;base64,YWJj"

    def test_svg_dimensions_from_attributes(self):
        from brandlens.utils.media_utils import svg_dimensions

        svg = b'<svg xmlns="http://www.w3.org/2000/svg" width="120px" height="40"></svg>'
        assert svg_dimensions(svg) == (120, 40)

    def test_svg_dimensions_from_viewbox(self):
        from brandlens.utils.media_utils import svg_dimensions

        svg = b'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 300 150"></svg>'
        assert svg_dimensions(svg) == (300, 150)

    def test_svg_dimensions_default(self):
        from brandlens.utils.media_utils import svg_dimensions

        assert svg_dimensions(b"<svg></svg>") == (100, 100)

    def test_raster_dimensions(self):
        import io

        from PIL import Image

        from brandlens.utils.media_utils import raster_dimensions

        buf = io.BytesIO()
        Image.new("RGB", (64, 32), "red").save(buf, format="PNG")
        assert raster_dimensions(buf.getvalue()) == (64, 32)
        assert raster_dimensions(b"not an image") == (0, 0)
