"""Color aggregation and ranking.

Colors from every source are reduced to ColorObservations, folded into a
weighted frequency table keyed by normalized hex, filtered for structural
near-white/near-black colors, and ranked. The top of the ranking becomes
the primary, secondary and (hue-distinct) accent color rules.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from brandlens.schemas.analysis import ImageRecord, PdfRecord, PptxRecord, TokensRecord
from brandlens.schemas.rules import ColorValue, MediaTag, Provenance, Rule, RuleCategory
from brandlens.utils.color_utils import (
    hue,
    hue_distance,
    is_near_white_or_black,
    normalize_hex,
    round_to_places,
)
from brandlens.utils.ids import IdProvider

logger = logging.getLogger(__name__)

# Provenance-quality weights
TOKEN_WEIGHT = 20
THEME_ACCENT1_WEIGHT = 15
THEME_ACCENT_WEIGHT = 10
THEME_OTHER_WEIGHT = 5
LOGO_WEIGHT = 5

SECONDARY_FACTOR = 0.9
ACCENT_FACTOR = 0.8
MIN_ACCENT_HUE_DISTANCE = 30
MAX_ACCENTS = 2
ACCENT_RANK_END = 8  # accents are picked from ranks 2..7


@dataclass(frozen=True)
class ColorObservation:
    """One weighted sighting of a color."""

    hex: str
    weight: float
    provenance: tuple[Provenance, ...]


@dataclass(frozen=True)
class ColorStats:
    """Aggregate weight and provenance for one hex in the frequency table."""

    weight: float
    sources: tuple[Provenance, ...]

    @property
    def distinct_sources(self) -> int:
        return len({(p.file, p.location) for p in self.sources})


# -----------------------------------------------------------------------
# Observation reducers
# -----------------------------------------------------------------------

def _observe(raw_hex, weight: float, provenance: Provenance) -> Iterator[ColorObservation]:
    hex_color = normalize_hex(raw_hex)
    if hex_color is None:
        return
    yield ColorObservation(hex=hex_color, weight=weight, provenance=(provenance,))


def token_observations(records: Iterable[TokensRecord]) -> Iterator[ColorObservation]:
    for tokens in records:
        if not tokens.valid:
            continue
        for color in tokens.colors:
            if not isinstance(color.value, str) or not color.value.startswith("#"):
                continue
            yield from _observe(color.value, TOKEN_WEIGHT, Provenance(
                file=tokens.source,
                location="design-tokens",
                name=color.name,
                description=color.description,
            ))


def theme_weight(name: str, color_type: str) -> int:
    if name == "accent1":
        return THEME_ACCENT1_WEIGHT
    if color_type == "accent":
        return THEME_ACCENT_WEIGHT
    return THEME_OTHER_WEIGHT


def pptx_observations(records: Iterable[PptxRecord]) -> Iterator[ColorObservation]:
    for pptx in records:
        for theme_color in pptx.theme.colors:
            yield from _observe(
                theme_color.value,
                theme_weight(theme_color.name, theme_color.type),
                Provenance(
                    file=pptx.source,
                    location="theme",
                    type=theme_color.type,
                    name=theme_color.label or theme_color.name,
                ),
            )

        for hex_color, usage in pptx.patterns.color_usage.items():
            yield from _observe(hex_color, usage.frequency, Provenance(
                file=pptx.source,
                location="slides",
                contexts=tuple(usage.contexts),
            ))


def pdf_observations(records: Iterable[PdfRecord]) -> Iterator[ColorObservation]:
    for pdf in records:
        for sample in [*pdf.colors.dominant, *pdf.colors.accent]:
            yield from _observe(
                sample.hex,
                sample.count or 1,
                Provenance(file=pdf.source, location="pages"),
            )


def logo_observations(records: Iterable[ImageRecord]) -> Iterator[ColorObservation]:
    for img in records:
        if not img.properties.is_likely_logo:
            continue
        for sample in img.colors.dominant:
            yield from _observe(sample.hex, LOGO_WEIGHT, Provenance(file=img.source, location="logo"))


def build_frequency_table(observations: Iterable[ColorObservation]) -> dict[str, ColorStats]:
    """Fold observations into per-hex totals. Insertion order is first sighting."""
    table: dict[str, ColorStats] = {}
    for obs in observations:
        current = table.get(obs.hex)
        if current is None:
            table[obs.hex] = ColorStats(weight=obs.weight, sources=obs.provenance)
        else:
            table[obs.hex] = ColorStats(
                weight=current.weight + obs.weight,
                sources=current.sources + obs.provenance,
            )
    return table


def rank_colors(table: dict[str, ColorStats]) -> list[tuple[str, ColorStats]]:
    """Drop structural colors, then sort by weight (stable on ties)."""
    eligible = [(h, s) for h, s in table.items() if not is_near_white_or_black(h)]
    return sorted(eligible, key=lambda item: item[1].weight, reverse=True)


# -----------------------------------------------------------------------
# Confidence and usage
# -----------------------------------------------------------------------

def color_confidence(weight: float, distinct_sources: int) -> float:
    """0.4 floor + up to 0.4 for frequency (saturating at 5) + up to 0.2 for diversity."""
    freq_score = min(weight / 5, 1)
    source_score = min(distinct_sources / 2, 1)
    return round_to_places(0.4 + freq_score * 0.4 + source_score * 0.2)


def _scaled(confidence: float, factor: float) -> float:
    return round_to_places(confidence * factor)


def detect_color_usage(sources: Iterable[Provenance]) -> tuple[str, ...]:
    usage: list[str] = []

    def _add(item: str) -> None:
        if item not in usage:
            usage.append(item)

    for source in sources:
        if source.type == "accent":
            _add("accent")
        for context in source.contexts:
            _add(context)
        if source.location == "logo":
            _add("logo")
    return tuple(usage)


# -----------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------

def detect_color_rules(
    pptx_records: list[PptxRecord],
    pdf_records: list[PdfRecord],
    image_records: list[ImageRecord],
    token_records: list[TokensRecord],
    ids: IdProvider,
) -> list[Rule]:
    """Emit primary, secondary and up to two accent color rules."""
    table = build_frequency_table([
        *token_observations(token_records),
        *pptx_observations(pptx_records),
        *pdf_observations(pdf_records),
        *logo_observations(image_records),
    ])
    ranked = rank_colors(table)
    logger.debug(f"Color ranking: {[(h, s.weight) for h, s in ranked[:ACCENT_RANK_END]]}")

    rules: list[Rule] = []
    if not ranked:
        return rules

    primary_hex, primary = ranked[0]
    usage = detect_color_usage(primary.sources)
    usage_note = f" ({', '.join(usage)})" if usage else ""
    rules.append(Rule(
        id=ids(),
        category=RuleCategory.COLOR,
        name="Primary color",
        description=f"{primary_hex} is used as the main brand color{usage_note}",
        confidence=color_confidence(primary.weight, primary.distinct_sources),
        sources=primary.sources,
        value=ColorValue(type="primary", color=primary_hex, usage=usage),
        applicable_to=(MediaTag.ALL,),
    ))

    if len(ranked) > 1:
        secondary_hex, secondary = ranked[1]
        rules.append(Rule(
            id=ids(),
            category=RuleCategory.COLOR,
            name="Secondary color",
            description=f"{secondary_hex} is used as the second brand color",
            confidence=_scaled(
                color_confidence(secondary.weight, secondary.distinct_sources),
                SECONDARY_FACTOR,
            ),
            sources=secondary.sources,
            value=ColorValue(type="secondary", color=secondary_hex),
            applicable_to=(MediaTag.ALL,),
        ))

    primary_hue = hue(primary_hex)
    accent_count = 0
    for hex_color, stats in ranked[2:ACCENT_RANK_END]:
        if accent_count >= MAX_ACCENTS:
            break
        if hue_distance(hue(hex_color), primary_hue) <= MIN_ACCENT_HUE_DISTANCE:
            continue
        rules.append(Rule(
            id=ids(),
            category=RuleCategory.COLOR,
            name="Accent color" if accent_count == 0 else "Accent color 2",
            description=f"{hex_color} is used as an accent color for CTAs and highlights",
            confidence=_scaled(
                color_confidence(stats.weight, stats.distinct_sources),
                ACCENT_FACTOR,
            ),
            sources=stats.sources,
            value=ColorValue(type="accent", color=hex_color, usage=("cta", "highlight")),
            applicable_to=(MediaTag.ALL,),
        ))
        accent_count += 1

    return rules

