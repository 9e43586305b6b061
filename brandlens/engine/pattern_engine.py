"""Pattern engine: turn per-file AnalysisRecords into brand rules.

Detectors run in a fixed order (color, typography, font size, spacing,
layout, logo, component) so that, given the same records and a
deterministic ID provider, the result is identical from run to run.
"""

import logging
from typing import Iterable, Optional, Union

from brandlens.config import AnalyzerConfig
from brandlens.schemas.analysis import FontRecord, ImageRecord, PptxRecord, RecordBuckets
from brandlens.schemas.rules import AssetEntry, ExtractedAssets, PatternResult, Rule
from brandlens.utils.ids import IdProvider, uuid_ids

from .color_rules import detect_color_rules
from .layout_rules import (
    detect_component_style_rules,
    detect_layout_rules,
    detect_logo_rules,
    detect_spacing_rules,
)
from .typography_rules import detect_font_size_rules, detect_typography_rules

logger = logging.getLogger(__name__)

DEFAULT_FONT_CONFIDENCE = 0.9


def analyze_patterns(
    records: Union[RecordBuckets, Iterable],
    id_provider: Optional[IdProvider] = None,
    config: Optional[AnalyzerConfig] = None,
) -> PatternResult:
    """Run every detector over the records and partition the rules.

    Args:
        records: A RecordBuckets instance or a flat iterable of records.
        id_provider: Zero-argument callable producing rule IDs.
        config: Partition thresholds; defaults apply when omitted.
    """
    buckets = records if isinstance(records, RecordBuckets) else RecordBuckets.from_records(records)
    ids = id_provider or uuid_ids()
    config = config or AnalyzerConfig()

    rules: list[Rule] = [
        *detect_color_rules(buckets.pptx, buckets.pdf, buckets.images, buckets.tokens, ids),
        *detect_typography_rules(buckets.pptx, buckets.fonts, buckets.tokens, ids),
        *detect_font_size_rules(buckets.pptx, ids),
        *detect_spacing_rules(buckets.pptx, buckets.tokens, ids),
        *detect_layout_rules(buckets.pptx, ids),
        *detect_logo_rules(buckets.pptx, ids),
        *detect_component_style_rules(buckets.pptx, buckets.tokens, ids),
    ]
    logger.debug(f"Detectors produced {len(rules)} candidate rules")

    confirmed, needs_review = partition_rules(
        rules,
        confirmed_threshold=config.confirmed_threshold,
        review_threshold=config.review_threshold,
    )

    return PatternResult(
        rules=confirmed,
        needs_review=needs_review,
        extracted_assets=merge_extracted_assets(buckets.pptx, buckets.images, buckets.fonts),
    )


def partition_rules(
    rules: list[Rule],
    confirmed_threshold: float = 0.6,
    review_threshold: float = 0.3,
) -> tuple[list[Rule], list[Rule]]:
    """Split rules into (confirmed, needs_review); low-confidence rules are dropped.

    If that would leave nothing at all while candidates exist, every rule is
    returned for review instead.
    """
    confirmed = [r for r in rules if r.confidence >= confirmed_threshold]
    needs_review = [
        r for r in rules
        if review_threshold <= r.confidence < confirmed_threshold
    ]

    if not confirmed and not needs_review and rules:
        # Heuristic: weak evidence beats an empty result
        logger.info(f"All {len(rules)} rules are below {review_threshold}; surfacing them for review")
        return [], list(rules)

    return confirmed, needs_review


def _by_confidence(entries: list[AssetEntry]) -> list[AssetEntry]:
    return sorted(entries, key=lambda e: e.confidence, reverse=True)


def merge_extracted_assets(
    pptx_records: list[PptxRecord],
    image_records: list[ImageRecord],
    font_records: list[FontRecord],
) -> ExtractedAssets:
    """Collect assets from presentations, logo-like images and uploaded fonts."""
    logos: list[AssetEntry] = []
    images: list[AssetEntry] = []
    icons: list[AssetEntry] = []
    backgrounds: list[AssetEntry] = []
    fonts: list[AssetEntry] = []

    for pptx in pptx_records:
        logos.extend(pptx.extracted_assets.logos)
        images.extend(pptx.extracted_assets.images)
        icons.extend(pptx.extracted_assets.icons)
        backgrounds.extend(pptx.extracted_assets.backgrounds)

    for img in image_records:
        if not img.properties.is_likely_logo:
            continue
        logos.append(AssetEntry(
            name=img.source,
            data=img.data_url,
            size=img.size,
            type="logo",
            source=img.source,
            confidence=img.confidence,
            colors=[c.hex for c in img.colors.dominant],
        ))

    for font in font_records:
        fonts.append(AssetEntry(
            name=font.name,
            data=font.data_url,
            size=font.size,
            type="font",
            source=font.source,
            format=font.format,
            confidence=font.confidence or DEFAULT_FONT_CONFIDENCE,
        ))

    return ExtractedAssets(
        logos=_by_confidence(logos),
        images=_by_confidence(images),
        icons=_by_confidence(icons),
        backgrounds=_by_confidence(backgrounds),
        fonts=_by_confidence(fonts),
    )
