"""Extract palettes and logo heuristics from raster and SVG images."""

import logging
import re
from collections import Counter
from io import BytesIO
from pathlib import Path
from typing import Optional

import numpy as np
from lxml import etree
from PIL import Image

from brandlens.config import AnalyzerConfig
from brandlens.schemas.analysis import (
    ColorSample,
    ColorUsage,
    ImageColors,
    ImageDimensions,
    ImageProperties,
    ImageRecord,
)
from brandlens.utils.color_utils import css_color_to_hex, luminance, round_half_up
from brandlens.utils.media_utils import looks_like_svg, svg_dimensions, to_data_url
from brandlens.utils.palette import quantize, sample_pixels, to_rgba_array

logger = logging.getLogger(__name__)

QUANTIZE_STEP = 32
PALETTE_SIZE = 8
DOMINANT_SIZE = 3
MIN_PALETTE_LUMINANCE = 20
MAX_PALETTE_LUMINANCE = 240

LOGO_SCORE_THRESHOLD = 4
LOGO_CONFIDENCE = 0.9
IMAGE_CONFIDENCE = 0.7
MIN_SUGGESTED_SIZE = 32

_SVG_COLOR_ATTRS = ("fill", "stroke", "stop-color", "color")
_STYLE_COLOR_RE = re.compile(r"(?:^|;)\s*(?:fill|stroke|stop-color|color)\s*:\s*([^;]+)")


# -----------------------------------------------------------------------
# Heuristics
# -----------------------------------------------------------------------

def logo_score(
    filename: str,
    file_size: int,
    color_count: int,
    has_transparency: bool,
    aspect_ratio: float,
) -> int:
    """Score how logo-like an image is; 4 or more counts as a logo."""
    score = 0
    name = filename.lower()
    if "logo" in name:
        score += 3
    if "brand" in name:
        score += 2
    if "icon" in name:
        score += 1
    if "mark" in name:
        score += 1

    if has_transparency:
        score += 2

    if color_count <= 4:
        score += 2
    if color_count <= 2:
        score += 1

    if file_size < 50_000:
        score += 1
    if file_size < 20_000:
        score += 1

    if 0.5 <= aspect_ratio <= 3:
        score += 1
    return score


def is_likely_logo(filename, file_size, color_count, has_transparency, aspect_ratio) -> bool:
    return logo_score(filename, file_size, color_count, has_transparency, aspect_ratio) >= LOGO_SCORE_THRESHOLD


def downscale(image: Image.Image, max_dimension: int) -> Image.Image:
    """Shrink the image to fit a ``max_dimension`` box, keeping the aspect ratio."""
    width, height = image.size
    if width <= max_dimension and height <= max_dimension:
        return image
    ratio = min(max_dimension / width, max_dimension / height)
    size = (max(1, round_half_up(width * ratio)), max(1, round_half_up(height * ratio)))
    return image.resize(size, Image.Resampling.BILINEAR)


def has_transparency(image: Image.Image) -> bool:
    """Check the four corners, then every 100th pixel, for alpha."""
    width, height = image.size
    alpha = to_rgba_array(image)[:, 3]
    corners = (0, width - 1, (height - 1) * width, height * width - 1)
    if any(alpha[i] < 255 for i in corners):
        return True
    return bool(np.any(alpha[::100] < 250))


def extract_palette(image: Image.Image, sample_size: int) -> list[ColorSample]:
    """Most frequent quantized colors, without near-white and near-black."""
    bins = quantize(sample_pixels(image, sample_size), QUANTIZE_STEP)
    total = sum(b.count for b in bins)
    palette = [
        ColorSample(
            hex=b.hex,
            count=b.count,
            percentage=round_half_up(b.count / total * 100),
        )
        for b in bins
        if MIN_PALETTE_LUMINANCE < b.luminance < MAX_PALETTE_LUMINANCE
    ]
    return palette[:PALETTE_SIZE]


# -----------------------------------------------------------------------
# SVG
# -----------------------------------------------------------------------

def svg_palette(data: bytes) -> list[ColorSample]:
    """Count colors declared in fill/stroke attributes and inline styles."""
    try:
        root = etree.fromstring(data, parser=etree.XMLParser(resolve_entities=False, recover=True))
    except etree.XMLSyntaxError as e:
        logger.debug(f"Unparseable SVG: {e}")
        return []
    if root is None:
        return []

    counts: Counter[str] = Counter()
    for elem in root.iter():
        if not isinstance(elem.tag, str):
            continue
        declared = [elem.get(attr) for attr in _SVG_COLOR_ATTRS]
        declared.extend(_STYLE_COLOR_RE.findall(elem.get("style") or ""))
        for value in declared:
            hex_color = css_color_to_hex(value.strip()) if value else None
            if hex_color:
                counts[hex_color] += 1

    total = sum(counts.values())
    palette = [
        ColorSample(hex=hex_color, count=count, percentage=round_half_up(count / total * 100))
        for hex_color, count in counts.most_common()
        if MIN_PALETTE_LUMINANCE < luminance(hex_color) < MAX_PALETTE_LUMINANCE
    ]
    return palette[:PALETTE_SIZE]


# -----------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------

def extract_image(path: str | Path, config: Optional[AnalyzerConfig] = None) -> ImageRecord:
    """Analyze an image file: palette, transparency, logo likelihood.

    Raises:
        FileNotFoundError: If the file does not exist.
        PIL.UnidentifiedImageError: If a raster image cannot be decoded.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    config = config or AnalyzerConfig()

    data = path.read_bytes()
    ext = path.suffix.lower().lstrip(".")

    if ext == "svg" or looks_like_svg(data):
        width, height = svg_dimensions(data)
        palette = svg_palette(data)
        # SVG has no opaque canvas behind its shapes
        transparent = True
    else:
        with Image.open(BytesIO(data)) as img:
            width, height = img.size
            canvas = downscale(img.convert("RGBA"), config.image_max_dimension)
        transparent = has_transparency(canvas)
        palette = extract_palette(canvas, config.image_sample_size)

    aspect_ratio = width / height if height else 1.0
    likely_logo = is_likely_logo(path.name, len(data), len(palette), transparent, aspect_ratio)

    record = ImageRecord(
        source=path.name,
        dimensions=ImageDimensions(
            width=round_half_up(width),
            height=round_half_up(height),
            aspect_ratio=round(aspect_ratio, 4),
        ),
        colors=ImageColors(dominant=palette[:DOMINANT_SIZE], palette=palette),
        properties=ImageProperties(
            has_transparency=transparent,
            is_likely_logo=likely_logo,
            suggested_min_size=max(round_half_up(width * 0.5), MIN_SUGGESTED_SIZE),
        ),
        data_url=to_data_url(data, ext),
        size=len(data),
        confidence=LOGO_CONFIDENCE if likely_logo else IMAGE_CONFIDENCE,
    )
    for sample in palette:
        record.patterns.color_usage[sample.hex] = ColorUsage(frequency=sample.percentage or 0)

    logger.debug(
        f"{path.name}: {width}x{height}, {len(palette)} colors, "
        f"logo={likely_logo}, transparent={transparent}"
    )
    return record
