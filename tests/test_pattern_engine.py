"""Tests for the pattern engine and its rule detectors."""

import pytest


def _tokens(source, **sections):
    from brandlens.schemas.analysis import TokensRecord

    return TokensRecord(source=source, **sections)


def _pptx(source="deck.pptx", **fields):
    from brandlens.schemas.analysis import PptxRecord

    return PptxRecord(source=source, **fields)


def _rules_named(result, name):
    return [r for r in result.all_rules if r.name == name]


class TestColorRules:
    def test_token_color_in_two_files(self):
        from brandlens.engine import analyze_patterns
        from brandlens.utils.ids import SequentialIds

        records = [
            _tokens("a.json", colors=[{"name": "brand", "value": "#FF5733"}]),
            _tokens("b.json", colors=[{"name": "brand", "value": "#FF5733"}]),
        ]
        result = analyze_patterns(records, id_provider=SequentialIds())

        primary = _rules_named(result, "Primary color")[0]
        assert primary.value.color == "#ff5733"
        assert primary.confidence == 1.0
        assert primary in result.rules
        assert {s.file for s in primary.sources} == {"a.json", "b.json"}

    def test_white_never_selected(self):
        from brandlens.engine.color_rules import detect_color_rules
        from brandlens.utils.ids import SequentialIds

        whites = [{"name": f"bg{i}", "value": "#ffffff"} for i in range(10)]
        records = [_tokens("t.json", colors=[*whites, {"name": "brand", "value": "#ff5733"}])]
        rules = detect_color_rules([], [], [], records, SequentialIds())

        assert [r.value.color for r in rules] == ["#ff5733"]

    def test_only_structural_colors_yield_no_rules(self):
        from brandlens.engine.color_rules import detect_color_rules
        from brandlens.utils.ids import SequentialIds

        records = [_tokens("t.json", colors=[
            {"name": "white", "value": "#ffffff"},
            {"name": "black", "value": "#000000"},
        ])]
        assert detect_color_rules([], [], [], records, SequentialIds()) == []

    def test_secondary_and_hue_distinct_accent(self):
        from brandlens.engine.color_rules import detect_color_rules
        from brandlens.utils.ids import SequentialIds

        records = [_tokens("t.json", colors=[
            {"name": "red", "value": "#ff0000"},
            {"name": "green", "value": "#00aa00"},
            {"name": "orange-red", "value": "#ff3300"},
            {"name": "blue", "value": "#3366ff"},
        ])]
        rules = detect_color_rules([], [], [], records, SequentialIds())

        assert [r.name for r in rules] == ["Primary color", "Secondary color", "Accent color"]
        assert rules[0].confidence == 0.9
        assert rules[1].value.color == "#00aa00"
        assert rules[1].confidence == 0.81
        assert rules[2].value.color == "#3366ff"
        assert rules[2].confidence == 0.72
        assert rules[2].value.usage == ("cta", "highlight")

    def test_theme_accent_usage(self):
        from brandlens.engine.color_rules import detect_color_rules
        from brandlens.utils.ids import SequentialIds

        pptx = _pptx(
            theme={"colors": [
                {"name": "accent1", "type": "accent", "label": "Accent 1", "value": "#1a73e8"},
                {"name": "dk2", "type": "dark", "label": "Dark 2", "value": "#44546a"},
            ]},
            patterns={"color_usage": {"#1a73e8": {"frequency": 3, "contexts": ["background"]}}},
        )
        rules = detect_color_rules([pptx], [], [], [], SequentialIds())

        primary = rules[0]
        assert primary.value.color == "#1a73e8"
        assert primary.value.usage == ("accent", "background")
        # weight 18 saturates frequency; one file in two locations
        assert primary.confidence == 1.0

    def test_invalid_tokens_are_ignored(self):
        from brandlens.engine.color_rules import detect_color_rules
        from brandlens.utils.ids import SequentialIds

        records = [_tokens("bad.json", valid=False, error="Invalid JSON",
                           colors=[{"name": "x", "value": "#ff5733"}])]
        assert detect_color_rules([], [], [], records, SequentialIds()) == []


class TestTypographyRules:
    def test_theme_fonts(self):
        from brandlens.engine.typography_rules import detect_typography_rules
        from brandlens.utils.ids import SequentialIds

        pptx = _pptx(theme={"fonts": {"major": "Montserrat", "minor": "Open Sans"}})
        rules = detect_typography_rules([pptx], [], [], SequentialIds())

        heading, body = rules
        assert heading.name == "Heading font"
        assert heading.value.font_family == "Montserrat"
        assert heading.confidence == 0.7
        assert body.name == "Body font"
        assert body.value.font_family == "Open Sans"

    def test_token_fonts_by_name(self):
        from brandlens.engine.typography_rules import detect_typography_rules
        from brandlens.utils.ids import SequentialIds

        tokens = _tokens("t.json", fonts=[
            {"name": "font.heading", "value": "Playfair Display"},
            {"name": "font.body", "value": ["Inter", "sans-serif"]},
        ])
        rules = detect_typography_rules([], [], [tokens], SequentialIds())

        assert [r.value.font_family for r in rules] == ["Playfair Display", "Inter, sans-serif"]

    def test_uploaded_font_is_not_a_role(self):
        from brandlens.engine.typography_rules import detect_typography_rules
        from brandlens.schemas.analysis import FontRecord
        from brandlens.utils.ids import SequentialIds

        font = FontRecord(source="brand.ttf", name="Brand Sans")
        assert detect_typography_rules([], [font], [], SequentialIds()) == []

    def test_uppercase_headlines(self):
        from brandlens.engine.typography_rules import detect_typography_rules
        from brandlens.utils.ids import SequentialIds

        upper = _pptx("a.pptx", patterns={"typography_patterns": {"uses_uppercase": True}})
        plain = _pptx("b.pptx")
        rules = detect_typography_rules([upper, plain], [], [], SequentialIds())

        rule = next(r for r in rules if r.name == "Headline style: uppercase")
        assert rule.confidence == 0.7
        assert rule.value.text_transform == "uppercase"
        assert [s.file for s in rule.sources] == ["a.pptx"]

    def test_letter_spacing(self):
        from brandlens.engine.typography_rules import detect_typography_rules
        from brandlens.utils.ids import SequentialIds

        pptx = _pptx(typography={
            "heading_styles": [{"letter_spacing": 2}],
            "body_styles": [{"letter_spacing": 2}, {"letter_spacing": 0.5}],
        })
        rules = detect_typography_rules([pptx], [], [], SequentialIds())

        rule = next(r for r in rules if r.name == "Letter spacing")
        assert rule.value.letter_spacing == "2%"
        assert rule.confidence == 0.7

    def test_letter_spacing_rounds_ties_up(self):
        from brandlens.engine.typography_rules import detect_typography_rules
        from brandlens.utils.ids import SequentialIds

        pptx = _pptx(typography={"heading_styles": [{"letter_spacing": 0.125}]})
        rules = detect_typography_rules([pptx], [], [], SequentialIds())

        rule = next(r for r in rules if r.name == "Letter spacing")
        assert rule.value.letter_spacing == "0.13em"


class TestFontSizeRules:
    def test_size_hierarchy(self):
        from brandlens.engine.typography_rules import detect_font_size_rules
        from brandlens.utils.ids import SequentialIds

        pptx = _pptx(typography={"font_sizes": [8, 10, 12, 18, 24]})
        rule, = detect_font_size_rules([pptx], SequentialIds())

        assert rule.value.heading == 24
        assert rule.value.body == 10
        assert rule.value.subheading == 12
        assert rule.value.scale == (8, 10, 12, 18, 24)
        assert rule.confidence == 0.7
        assert rule.description == "Headline: 24pt, Subheadline: 12pt, Body: 10pt"

    def test_body_falls_back_to_smallest(self):
        from brandlens.engine.typography_rules import detect_font_size_rules
        from brandlens.utils.ids import SequentialIds

        pptx = _pptx(typography={"font_sizes": [16, 20, 32]})
        rule, = detect_font_size_rules([pptx], SequentialIds())

        assert rule.value.body == 16
        assert rule.value.subheading == 20

    def test_too_few_sizes(self):
        from brandlens.engine.typography_rules import detect_font_size_rules
        from brandlens.utils.ids import SequentialIds

        pptx = _pptx(typography={"font_sizes": [12, 24]})
        assert detect_font_size_rules([pptx], SequentialIds()) == []


class TestSpacingAndLayoutRules:
    def test_parse_css_length(self):
        from brandlens.engine.layout_rules import parse_css_length

        assert parse_css_length("8px") == 8
        assert parse_css_length("1.5rem") == 24
        assert parse_css_length("2em") == 32
        assert parse_css_length("2em", allow_em=False) == 2
        assert parse_css_length(12) == 12
        assert parse_css_length("auto") == 0

    def test_grid_system_from_tokens(self):
        from brandlens.engine.layout_rules import detect_spacing_rules
        from brandlens.utils.ids import SequentialIds

        tokens = _tokens("t.json", spacing=[
            {"name": "s1", "value": "8px"},
            {"name": "s2", "value": "8px"},
            {"name": "m1", "value": "16px"},
            {"name": "m2", "value": "16px"},
            {"name": "m3", "value": "1rem"},
        ])
        rule, = detect_spacing_rules([], [tokens], SequentialIds())

        assert rule.name == "Grid system"
        assert rule.value.base_unit == 8
        assert rule.value.scale == (8, 16)
        assert rule.value.spacing_tokens.model_dump() == {"xs": 8, "sm": 16, "md": 24, "lg": 32, "xl": 48}
        assert rule.confidence == 0.7

    def test_spacing_tokens_are_frozen(self):
        from pydantic import ValidationError

        from brandlens.engine.layout_rules import detect_spacing_rules
        from brandlens.utils.ids import SequentialIds

        tokens = _tokens("t.json", spacing=[
            {"name": "a", "value": "8px"},
            {"name": "b", "value": "8px"},
        ])
        rule, = detect_spacing_rules([], [tokens], SequentialIds())

        with pytest.raises(ValidationError):
            rule.value.spacing_tokens.xs = 999
        assert rule.value.spacing_tokens.xs == 8
        assert rule.value.spacing_tokens.xl == 48

    def test_grid_needs_repeated_values(self):
        from brandlens.engine.layout_rules import detect_spacing_rules
        from brandlens.utils.ids import SequentialIds

        tokens = _tokens("t.json", spacing=[{"name": "s", "value": "8px"}])
        assert detect_spacing_rules([], [tokens], SequentialIds()) == []

    def test_presentation_format_and_margins(self):
        from brandlens.engine.layout_rules import detect_layout_rules
        from brandlens.schemas.rules import RuleCategory
        from brandlens.utils.ids import SequentialIds

        pptx = _pptx(
            layouts={"slide_size": {"width": 1280, "height": 720}},
            spacing={"margins": [48, 48, 50]},
        )
        fmt, margins = detect_layout_rules([pptx], SequentialIds())

        assert fmt.name == "Presentation format"
        assert fmt.category == RuleCategory.COMPONENT
        assert fmt.value.format == "16:9 Widescreen"
        assert fmt.value.aspect_ratio == "1.78"
        assert fmt.confidence == 0.95
        assert margins.value.margin == 48
        assert margins.confidence == 0.65

    @pytest.mark.parametrize("ratio,label", [
        (16 / 9, "16:9 Widescreen"),
        (4 / 3, "4:3 Standard"),
        (1.0, "1:1 Square"),
        (2.5, "Custom"),
    ])
    def test_classify_aspect_ratio(self, ratio, label):
        from brandlens.engine.layout_rules import classify_aspect_ratio

        assert classify_aspect_ratio(ratio) == label

    def test_logo_positioning(self):
        from brandlens.engine.layout_rules import detect_logo_rules
        from brandlens.utils.ids import SequentialIds

        pptx = _pptx(layouts={"logo_positions": [
            {"name": "logo", "position": "top-left", "x": 10, "y": 10},
            {"name": "logo", "position": "top-left", "x": 12, "y": 10},
            {"name": "logo", "position": "center", "x": 600, "y": 300},
        ]})
        rule, = detect_logo_rules([pptx], SequentialIds())

        assert rule.value.position == "top-left"
        assert rule.value.occurrences == 2
        assert rule.confidence == 0.7
        assert "top left" in rule.description


class TestComponentRules:
    def test_radius_shadow_and_button(self):
        from brandlens.engine.layout_rules import detect_component_style_rules
        from brandlens.utils.ids import SequentialIds

        tokens = _tokens(
            "t.json",
            radii=[
                {"name": "r.md", "value": "8px"},
                {"name": "r.md2", "value": "8px"},
                {"name": "r.sm", "value": "4px"},
            ],
            shadows=[{"name": "shadow.card", "value": "0 2px 4px rgba(0,0,0,0.2)"}],
        )
        pptx = _pptx(shapes={"buttons": [
            {"fill_color": "#ff5733"},
            {"fill_color": "#ff5733"},
        ]})
        shadow, radius, button = detect_component_style_rules([pptx], [tokens], SequentialIds())

        assert shadow.name == "shadow.card"
        assert shadow.confidence == 0.85
        assert radius.value.border_radius == 8
        assert radius.value.scale == (8, 4)
        assert radius.confidence == 0.75
        assert button.value.background_color == "#ff5733"
        assert button.value.border_radius == 8
        assert button.confidence == 0.7

    def test_shadow_value_detached_from_record(self):
        from brandlens.engine.layout_rules import detect_component_style_rules
        from brandlens.utils.ids import SequentialIds

        tokens = _tokens("t.json", shadows=[
            {"name": "shadow.card", "value": {"x": 0, "y": 2, "blur": 4, "color": "#00000033"}},
        ])
        shadow, = detect_component_style_rules([], [tokens], SequentialIds())

        tokens.shadows[0].value["blur"] = 99
        assert shadow.value.box_shadow["blur"] == 4

    def test_button_default_radius(self):
        from brandlens.engine.layout_rules import detect_component_style_rules
        from brandlens.utils.ids import SequentialIds

        pptx = _pptx(shapes={"buttons": [{"fill_color": "#123456"}]})
        button, = detect_component_style_rules([pptx], [], SequentialIds())
        assert button.value.border_radius == 8


class TestPartition:
    def _rule(self, confidence, name="Content margins"):
        from brandlens.schemas.rules import ContentMarginValue, Rule, RuleCategory

        return Rule(
            id=f"r-{confidence}",
            category=RuleCategory.SPACING,
            name=name,
            description="test",
            confidence=confidence,
            value=ContentMarginValue(margin=8),
        )

    def test_thresholds(self):
        from brandlens.engine import partition_rules

        high, mid, low = self._rule(0.6), self._rule(0.3), self._rule(0.29)
        confirmed, review = partition_rules([high, mid, low])

        assert confirmed == [high]
        assert review == [mid]

    def test_fail_open(self):
        from brandlens.engine import partition_rules

        weak = [self._rule(0.1), self._rule(0.2)]
        confirmed, review = partition_rules(weak)

        assert confirmed == []
        assert review == weak

    def test_empty(self):
        from brandlens.engine import partition_rules

        assert partition_rules([]) == ([], [])

    def test_custom_thresholds_from_config(self):
        from brandlens.config import AnalyzerConfig
        from brandlens.engine import analyze_patterns
        from brandlens.utils.ids import SequentialIds

        records = [_tokens("t.json", colors=[{"name": "brand", "value": "#ff5733"}])]
        config = AnalyzerConfig(confirmed_threshold=0.95, review_threshold=0.5)
        result = analyze_patterns(records, id_provider=SequentialIds(), config=config)

        assert result.rules == []
        assert [r.name for r in result.needs_review] == ["Primary color"]


class TestAnalyzePatterns:
    def _records(self):
        from brandlens.schemas.analysis import FontRecord, ImageRecord

        return [
            _pptx(
                theme={
                    "colors": [{"name": "accent1", "type": "accent", "label": "Accent 1",
                                "value": "#1a73e8"}],
                    "fonts": {"major": "Montserrat", "minor": "Open Sans"},
                },
                typography={"font_sizes": [10, 14, 28]},
                layouts={"slide_size": {"width": 960, "height": 720}},
                extracted_assets={"logos": [{"name": "logo.png", "confidence": 0.95}]},
            ),
            _tokens("t.json", colors=[{"name": "brand", "value": "#ff5733"}]),
            ImageRecord(
                source="logo.svg",
                properties={"is_likely_logo": True},
                colors={"dominant": [{"hex": "#ff5733"}]},
                data_url="data:image/svg+xml;base64,PHN2Zz4=",
                confidence=0.9,
            ),
            FontRecord(source="brand.ttf", name="Brand Sans", format="TrueType"),
        ]

    def test_empty_input(self):
        from brandlens.engine import analyze_patterns

        result = analyze_patterns([])
        assert result.rules == []
        assert result.needs_review == []
        assert result.extracted_assets.is_empty()

    def test_detector_order(self):
        from brandlens.engine import analyze_patterns
        from brandlens.utils.ids import SequentialIds

        result = analyze_patterns(self._records(), id_provider=SequentialIds())
        names = [r.name for r in result.all_rules]

        assert names.index("Primary color") < names.index("Heading font")
        assert names.index("Heading font") < names.index("Font size hierarchy")
        assert names.index("Font size hierarchy") < names.index("Presentation format")
        assert [r.id for r in result.rules][:2] == ["rule-1", "rule-2"]

    def test_idempotent(self):
        from brandlens.engine import analyze_patterns
        from brandlens.utils.ids import SequentialIds

        first = analyze_patterns(self._records(), id_provider=SequentialIds())
        second = analyze_patterns(self._records(), id_provider=SequentialIds())
        assert first.model_dump() == second.model_dump()

    def test_idempotent_apart_from_ids(self):
        from brandlens.engine import analyze_patterns

        def _strip(result):
            return [r.model_dump(exclude={"id"}) for r in result.all_rules]

        first = analyze_patterns(self._records())
        second = analyze_patterns(self._records())
        assert _strip(first) == _strip(second)
        assert {r.id for r in first.all_rules}.isdisjoint(r.id for r in second.all_rules)

    def test_merged_assets(self):
        from brandlens.engine import analyze_patterns

        assets = analyze_patterns(self._records()).extracted_assets

        assert [logo.name for logo in assets.logos] == ["logo.png", "logo.svg"]
        assert assets.logos[1].type == "logo"
        assert assets.logos[1].colors == ["#ff5733"]
        assert assets.fonts[0].name == "Brand Sans"
        assert assets.fonts[0].confidence == 0.9

    def test_accepts_buckets(self):
        from brandlens.engine import analyze_patterns
        from brandlens.schemas.analysis import RecordBuckets
        from brandlens.utils.ids import SequentialIds

        buckets = RecordBuckets.from_records(self._records())
        from_list = analyze_patterns(self._records(), id_provider=SequentialIds())
        from_buckets = analyze_patterns(buckets, id_provider=SequentialIds())
        assert from_list.model_dump() == from_buckets.model_dump()

    def test_result_yaml_roundtrip(self, tmp_path):
        from brandlens.engine import analyze_patterns
        from brandlens.schemas.rules import PatternResult
        from brandlens.utils.ids import SequentialIds

        result = analyze_patterns(self._records(), id_provider=SequentialIds())
        path = tmp_path / "rules.yaml"
        result.to_yaml(path)

        loaded = PatternResult.from_yaml(path)
        assert [r.name for r in loaded.rules] == [r.name for r in result.rules]
        assert loaded.rules[0].value.kind == result.rules[0].value.kind
