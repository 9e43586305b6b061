"""Lightweight asset preview: capped colors, fonts and logos without rules."""

import logging
from typing import Optional

from brandlens.config import AnalyzerConfig
from brandlens.schemas.analysis import RecordBuckets
from brandlens.schemas.preview import BrandPreview, PreviewColor, PreviewFont, PreviewLogo
from brandlens.utils.color_utils import color_distance, is_near_white_or_black, normalize_hex

logger = logging.getLogger(__name__)

# The preview filters structural colors with a wider band than the engine
PREVIEW_DARK_LUMINANCE = 25
PREVIEW_LIGHT_LUMINANCE = 235
DUPLICATE_DISTANCE = 15

THEME_ACCENT_PRIORITY = 15
THEME_OTHER_PRIORITY = 10
SLIDE_PRIORITY_CAP = 10
PDF_PRIORITY_CAP = 8
PDF_ACCENT_PRIORITY = 6
LOGO_COLOR_PRIORITY = 12

THEME_FONT_PRIORITY = 10
EXTRA_FONT_PRIORITY = 5
UPLOADED_FONT_PRIORITY = 15

PPTX_LOGO_CONFIDENCE = 0.8
IMAGE_LOGO_CONFIDENCE = 0.7


def _structural(hex_color: str) -> bool:
    return is_near_white_or_black(hex_color, PREVIEW_DARK_LUMINANCE, PREVIEW_LIGHT_LUMINANCE)


def _color(raw, source: str, priority: float, name: Optional[str] = None,
           drop_structural: bool = True) -> Optional[PreviewColor]:
    hex_color = normalize_hex(raw)
    if hex_color is None or (drop_structural and _structural(hex_color)):
        return None
    return PreviewColor(hex=hex_color, source=source, name=name, priority=priority)


def collect_colors(buckets: RecordBuckets) -> list[PreviewColor]:
    candidates: list[Optional[PreviewColor]] = []

    for pptx in buckets.pptx:
        for theme_color in pptx.theme.colors:
            candidates.append(_color(
                theme_color.value,
                "pptx-theme",
                THEME_ACCENT_PRIORITY if theme_color.type == "accent" else THEME_OTHER_PRIORITY,
                name=theme_color.label or theme_color.name,
                drop_structural=False,
            ))
        for hex_color, usage in pptx.patterns.color_usage.items():
            candidates.append(_color(
                hex_color, "pptx-slides", min(usage.frequency or 1, SLIDE_PRIORITY_CAP),
            ))

    for pdf in buckets.pdf:
        for sample in pdf.colors.dominant:
            candidates.append(_color(sample.hex, "pdf", min(sample.count or 1, PDF_PRIORITY_CAP)))
        for sample in pdf.colors.accent:
            candidates.append(_color(
                sample.hex, "pdf-accent", PDF_ACCENT_PRIORITY, drop_structural=False,
            ))

    for img in buckets.images:
        if not img.properties.is_likely_logo:
            continue
        for sample in img.colors.dominant:
            candidates.append(_color(sample.hex, "logo", LOGO_COLOR_PRIORITY))

    return [c for c in candidates if c is not None]


def deduplicate_colors(colors: list[PreviewColor]) -> list[PreviewColor]:
    """Merge visually identical colors, keeping the highest priority."""
    unique: list[PreviewColor] = []
    for color in colors:
        similar = next(
            (c for c in unique if color_distance(c.hex, color.hex) < DUPLICATE_DISTANCE),
            None,
        )
        if similar is None:
            unique.append(color.model_copy())
            continue
        similar.priority = max(similar.priority, color.priority)
        if color.name and not similar.name:
            similar.name = color.name
    return sorted(unique, key=lambda c: c.priority, reverse=True)


def collect_fonts(buckets: RecordBuckets) -> list[PreviewFont]:
    fonts: list[PreviewFont] = []
    for pptx in buckets.pptx:
        theme_fonts = pptx.theme.fonts
        if theme_fonts.major:
            fonts.append(PreviewFont(
                name=theme_fonts.major, usage="heading", source="pptx-theme",
                priority=THEME_FONT_PRIORITY,
            ))
        if theme_fonts.minor:
            fonts.append(PreviewFont(
                name=theme_fonts.minor, usage="body", source="pptx-theme",
                priority=THEME_FONT_PRIORITY,
            ))
        for ref in theme_fonts.all:
            if ref.name and not any(f.name == ref.name for f in fonts):
                fonts.append(PreviewFont(
                    name=ref.name, usage=ref.usage or "unknown", source="pptx",
                    priority=EXTRA_FONT_PRIORITY,
                ))

    for font in buckets.fonts:
        if font.name:
            fonts.append(PreviewFont(
                name=font.name, usage="uploaded", source="upload",
                data_url=font.data_url, priority=UPLOADED_FONT_PRIORITY,
            ))
    return fonts


def deduplicate_fonts(fonts: list[PreviewFont]) -> list[PreviewFont]:
    """Keep the first font per case-insensitive name, then sort by priority."""
    seen: set[str] = set()
    unique: list[PreviewFont] = []
    for font in fonts:
        key = font.name.lower()
        if key not in seen:
            seen.add(key)
            unique.append(font)
    return sorted(unique, key=lambda f: f.priority, reverse=True)


def collect_logos(buckets: RecordBuckets) -> list[PreviewLogo]:
    logos: list[PreviewLogo] = []
    for pptx in buckets.pptx:
        for logo in pptx.extracted_assets.logos:
            if logo.data:
                logos.append(PreviewLogo(
                    data_url=logo.data,
                    name=logo.name or "Logo",
                    source="pptx",
                    confidence=logo.confidence or PPTX_LOGO_CONFIDENCE,
                ))
    for img in buckets.images:
        if img.properties.is_likely_logo and img.data_url:
            logos.append(PreviewLogo(
                data_url=img.data_url,
                name=img.source or "Logo",
                source="image",
                confidence=img.confidence or IMAGE_LOGO_CONFIDENCE,
            ))
    return sorted(logos, key=lambda logo: logo.confidence, reverse=True)


def aggregate_extraction(
    buckets: RecordBuckets,
    config: Optional[AnalyzerConfig] = None,
) -> BrandPreview:
    """Build a capped preview of the brand assets for direct import."""
    config = config or AnalyzerConfig()

    colors = deduplicate_colors(collect_colors(buckets))
    fonts = deduplicate_fonts(collect_fonts(buckets))
    logos = collect_logos(buckets)
    logger.debug(f"Preview candidates: {len(colors)} colors, {len(fonts)} fonts, {len(logos)} logos")

    return BrandPreview(
        colors=colors[:config.preview_max_colors],
        fonts=fonts[:config.preview_max_fonts],
        logos=logos[:config.preview_max_logos],
    )
