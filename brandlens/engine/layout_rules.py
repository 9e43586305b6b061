"""Spacing, layout, logo-position and component style rules."""

import copy
import logging
import re
from collections import Counter

from brandlens.schemas.analysis import PptxRecord, TokensRecord
from brandlens.schemas.rules import (
    BorderRadiusValue,
    BoxShadowValue,
    ButtonStyleValue,
    ContentMarginValue,
    GridValue,
    LogoPositionValue,
    MediaTag,
    PresentationFormatValue,
    Provenance,
    Rule,
    RuleCategory,
    SpacingTokens,
)
from brandlens.utils.color_utils import round_to_places, round_to_step
from brandlens.utils.ids import IdProvider

logger = logging.getLogger(__name__)

DEFAULT_GRID_BASE = 8
SPACING_BIN = 4
MARGIN_BIN = 8
MAX_SPACING = 200
MAX_SCALE_LENGTH = 6
MAX_RADIUS = 50
DEFAULT_BUTTON_RADIUS = 8
ROOT_FONT_SIZE_PX = 16

# Semantic spacing tokens and the grid multiple used when a slot is unfilled
SPACING_TOKEN_FALLBACKS = (("xs", 1), ("sm", 2), ("md", 3), ("lg", 4), ("xl", 6))

ASPECT_RATIOS = (
    (16 / 9, "16:9 Widescreen"),
    (4 / 3, "4:3 Standard"),
    (1.0, "1:1 Square"),
)
ASPECT_TOLERANCE = 0.1

POSITION_LABELS = {
    "top-left": "top left",
    "top-right": "top right",
    "bottom-left": "bottom left",
    "bottom-right": "bottom right",
    "center": "centered",
}

_LENGTH_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(px|rem|em)?\s*$", re.IGNORECASE)
_LEADING_NUMBER_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)")


def parse_css_length(value, allow_em: bool = True) -> float:
    """Convert a token length to pixels. Unparseable values yield 0.

    Numbers pass through; ``px`` is taken as-is; ``rem`` (and ``em`` when
    allowed) are multiplied by the 16px root size; other units fall back to
    the leading number.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return 0

    match = _LENGTH_RE.match(value)
    if match:
        number = float(match.group(1))
        unit = (match.group(2) or "px").lower()
        if unit == "rem" or (unit == "em" and allow_em):
            return number * ROOT_FONT_SIZE_PX
        if unit == "px":
            return number

    leading = _LEADING_NUMBER_RE.match(value)
    return float(leading.group(1)) if leading else 0


def _binned_counts(values, step: int, upper: float, inclusive: bool = False) -> Counter:
    counts: Counter[int] = Counter()
    for value in values:
        rounded = round_to_step(value, step)
        if rounded > 0 and (rounded <= upper if inclusive else rounded < upper):
            counts[rounded] += 1
    return counts


def _ranked(counts: Counter) -> list[tuple[int, int]]:
    """Bins by descending count; ties go to the smaller value."""
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


# -----------------------------------------------------------------------
# Spacing / grid
# -----------------------------------------------------------------------

def collect_spacings(pptx_records: list[PptxRecord], token_records: list[TokensRecord]) -> list[float]:
    spacings: list[float] = []
    for pptx in pptx_records:
        spacings.extend(pptx.spacing.common_spacings)
        spacings.extend(pptx.patterns.detected_grid_values)
    for tokens in token_records:
        if not tokens.valid:
            continue
        for entry in tokens.spacing:
            value = parse_css_length(entry.value)
            if value > 0:
                spacings.append(value)
    return spacings


def detect_spacing_rules(
    pptx_records: list[PptxRecord],
    token_records: list[TokensRecord],
    ids: IdProvider,
) -> list[Rule]:
    spacings = collect_spacings(pptx_records, token_records)
    if not spacings:
        return []

    grid_base = next(
        (p.patterns.grid_base for p in pptx_records if p.patterns.grid_base),
        DEFAULT_GRID_BASE,
    )

    counts = _binned_counts(spacings, SPACING_BIN, MAX_SPACING)
    frequent = [(value, n) for value, n in _ranked(counts) if n > 1]
    scale = sorted(value for value, _ in frequent[:MAX_SCALE_LENGTH])
    if not scale:
        return []

    tokens = SpacingTokens(**{
        name: scale[i] if i < len(scale) else grid_base * multiple
        for i, (name, multiple) in enumerate(SPACING_TOKEN_FALLBACKS)
    })

    return [Rule(
        id=ids(),
        category=RuleCategory.SPACING,
        name="Grid system",
        description=f"{grid_base}px base grid - spacings: {', '.join(str(s) for s in scale)}px",
        confidence=round_to_places(0.6 + min(len(scale) * 0.05, 0.3)),
        sources=tuple(Provenance(file=p.source, location="layouts") for p in pptx_records),
        value=GridValue(base_unit=grid_base, scale=tuple(scale), spacing_tokens=tokens),
        applicable_to=(MediaTag.WEBSITE, MediaTag.PRESENTATION, MediaTag.FLYER),
    )]


# -----------------------------------------------------------------------
# Layout
# -----------------------------------------------------------------------

def classify_aspect_ratio(ratio: float) -> str:
    for target, label in ASPECT_RATIOS:
        if abs(ratio - target) < ASPECT_TOLERANCE:
            return label
    return "Custom"


def detect_layout_rules(pptx_records: list[PptxRecord], ids: IdProvider) -> list[Rule]:
    """Presentation format (once) and the most common content margin."""
    rules: list[Rule] = []

    sized = next(
        (p for p in pptx_records
         if p.layouts.slide_size and p.layouts.slide_size.width > 0
         and p.layouts.slide_size.height > 0),
        None,
    )
    if sized:
        width = sized.layouts.slide_size.width
        height = sized.layouts.slide_size.height
        ratio = width / height
        label = classify_aspect_ratio(ratio)
        rules.append(Rule(
            id=ids(),
            category=RuleCategory.COMPONENT,
            name="Presentation format",
            description=f"{label} ({width}×{height}px)",
            confidence=0.95,
            sources=(Provenance(file=sized.source, location="presentation"),),
            value=PresentationFormatValue(
                width=width,
                height=height,
                aspect_ratio=f"{ratio:.2f}",
                format=label,
            ),
            applicable_to=(MediaTag.PRESENTATION,),
        ))

    margins = [m for p in pptx_records for m in p.spacing.margins]
    counts = _binned_counts(margins, MARGIN_BIN, MAX_SPACING)
    if counts:
        margin, count = _ranked(counts)[0]
        rules.append(Rule(
            id=ids(),
            category=RuleCategory.SPACING,
            name="Content margins",
            description=f"Standard outer margin: {margin}px",
            confidence=round_to_places(0.5 + min(count * 0.05, 0.3)),
            sources=tuple(Provenance(file=p.source, location="layouts") for p in pptx_records),
            value=ContentMarginValue(margin=margin),
            applicable_to=(MediaTag.WEBSITE, MediaTag.PRESENTATION, MediaTag.FLYER),
        ))

    return rules


def detect_logo_rules(pptx_records: list[PptxRecord], ids: IdProvider) -> list[Rule]:
    """Majority logo placement across every slide master, layout and slide."""
    counts = Counter(
        placement.position
        for p in pptx_records
        for placement in p.layouts.logo_positions
    )
    if not counts:
        return []

    position, occurrences = counts.most_common(1)[0]
    return [Rule(
        id=ids(),
        category=RuleCategory.COMPONENT,
        name="Logo positioning",
        description=f"The logo is preferably placed {POSITION_LABELS.get(position, position)}",
        confidence=round_to_places(0.5 + min(occurrences * 0.1, 0.4)),
        sources=tuple(Provenance(file=p.source, location="slides") for p in pptx_records),
        value=LogoPositionValue(position=position, occurrences=occurrences),
        applicable_to=(MediaTag.WEBSITE, MediaTag.PRESENTATION, MediaTag.FLYER, MediaTag.EMAIL),
    )]


# -----------------------------------------------------------------------
# Components
# -----------------------------------------------------------------------

def detect_component_style_rules(
    pptx_records: list[PptxRecord],
    token_records: list[TokensRecord],
    ids: IdProvider,
) -> list[Rule]:
    """Box shadows from tokens, border radius scale, button fill color."""
    rules: list[Rule] = []
    radii: list[tuple[float, str]] = []

    for tokens in token_records:
        if not tokens.valid:
            continue
        for entry in tokens.radii:
            value = parse_css_length(entry.value, allow_em=False)
            if value > 0:
                radii.append((value, tokens.source))

        for shadow in tokens.shadows:
            if not shadow.value:
                continue
            rules.append(Rule(
                id=ids(),
                category=RuleCategory.COMPONENT,
                name=shadow.name or "Box shadow",
                description=f"Shadow: {shadow.value}",
                confidence=0.85,
                sources=(Provenance(file=tokens.source, location="design-tokens"),),
                value=BoxShadowValue(box_shadow=copy.deepcopy(shadow.value)),
                applicable_to=(MediaTag.WEBSITE, MediaTag.SOCIAL),
            ))

    for pptx in pptx_records:
        for shape in pptx.shapes.rounded_rectangles:
            if shape.corner_radius:
                radii.append((shape.corner_radius, pptx.source))

    counts = _binned_counts((v for v, _ in radii), 2, MAX_RADIUS, inclusive=True)
    top = [value for value, _ in _ranked(counts)[:3]]
    if top:
        rules.append(Rule(
            id=ids(),
            category=RuleCategory.COMPONENT,
            name="Border radius",
            description=f"Corner radius: {'px, '.join(str(v) for v in top)}px",
            confidence=round_to_places(0.6 + min(len(radii) * 0.05, 0.3)),
            sources=tuple(Provenance(file=source, location="shapes") for _, source in radii),
            value=BorderRadiusValue(border_radius=top[0], scale=tuple(top)),
            applicable_to=(MediaTag.WEBSITE, MediaTag.SOCIAL, MediaTag.EMAIL),
        ))

    fills = Counter(
        button.fill_color
        for p in pptx_records
        for button in p.shapes.buttons
        if button.fill_color
    )
    if fills:
        color, count = fills.most_common(1)[0]
        rules.append(Rule(
            id=ids(),
            category=RuleCategory.COMPONENT,
            name="Button style",
            description=f"Buttons use {color} as background color",
            confidence=round_to_places(0.5 + min(count * 0.1, 0.4)),
            sources=tuple(Provenance(file=p.source, location="shapes") for p in pptx_records),
            value=ButtonStyleValue(
                background_color=color,
                border_radius=radii[0][0] if radii else DEFAULT_BUTTON_RADIUS,
            ),
            applicable_to=(MediaTag.WEBSITE, MediaTag.EMAIL, MediaTag.FLYER),
        ))

    return rules
