"""Typography rules: heading/body fonts, text transform, letter spacing, size scale."""

import logging
from collections import Counter
from dataclasses import dataclass, field

from brandlens.schemas.analysis import FontRecord, PptxRecord, TokensRecord
from brandlens.schemas.rules import (
    FontFamilyValue,
    FontSizeHierarchyValue,
    LetterSpacingValue,
    MediaTag,
    Provenance,
    Rule,
    RuleCategory,
    TextTransformValue,
)
from brandlens.utils.color_utils import round_to_places
from brandlens.utils.ids import IdProvider

logger = logging.getLogger(__name__)

BODY_SIZE_RANGE = (10, 14)
MIN_DISTINCT_SIZES = 3
FONT_SIZE_CONFIDENCE = 0.7


@dataclass(frozen=True)
class FontDeclaration:
    name: str
    usage: str
    source: str


@dataclass
class _FontTally:
    count: int = 0
    usages: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)


def _token_font_usage(token_name: str | None) -> str:
    lowered = (token_name or "").lower()
    if "heading" in lowered:
        return "heading"
    if "body" in lowered:
        return "body"
    return "token"


def collect_font_declarations(
    pptx_records: list[PptxRecord],
    font_records: list[FontRecord],
    token_records: list[TokensRecord],
) -> list[FontDeclaration]:
    """Gather font declarations tagged with their usage role.

    Theme major/minor slots are always recorded. Further theme fonts,
    uploaded font files and token font families are only added the first
    time a name is seen.
    """
    declarations: list[FontDeclaration] = []

    def _known(name: str) -> bool:
        return any(d.name == name for d in declarations)

    for pptx in pptx_records:
        fonts = pptx.theme.fonts
        if fonts.major:
            declarations.append(FontDeclaration(fonts.major, "heading", pptx.source))
        if fonts.minor:
            declarations.append(FontDeclaration(fonts.minor, "body", pptx.source))
        for ref in fonts.all:
            if ref.name and not _known(ref.name):
                declarations.append(FontDeclaration(ref.name, ref.usage, pptx.source))

    for font in font_records:
        if font.name and not _known(font.name):
            declarations.append(FontDeclaration(font.name, "uploaded", font.source))

    for tokens in token_records:
        if not tokens.valid:
            continue
        for entry in tokens.fonts:
            family = entry.value
            if isinstance(family, list):
                family = ", ".join(str(f) for f in family)
            if not isinstance(family, str) or not family or _known(family):
                continue
            declarations.append(
                FontDeclaration(family, _token_font_usage(entry.name), tokens.source)
            )

    return declarations


def tally_fonts(declarations: list[FontDeclaration]) -> dict[str, _FontTally]:
    tallies: dict[str, _FontTally] = {}
    for decl in declarations:
        tally = tallies.setdefault(decl.name, _FontTally())
        tally.count += 1
        if decl.usage not in tally.usages:
            tally.usages.append(decl.usage)
        tally.sources.append(decl.source)
    return tallies


def _font_rule(ids: IdProvider, role: str, font: str, tally: _FontTally) -> Rule:
    label = "Heading font" if role == "heading" else "Body font"
    purpose = "headings" if role == "heading" else "body copy"
    return Rule(
        id=ids(),
        category=RuleCategory.TYPOGRAPHY,
        name=label,
        description=f'"{font}" is used for {purpose}',
        confidence=min(0.95, round_to_places(0.6 + tally.count * 0.1)),
        sources=tuple(Provenance(file=s, location="theme") for s in tally.sources),
        value=FontFamilyValue(type=role, font_family=font),
        applicable_to=(MediaTag.ALL,),
    )


def detect_typography_rules(
    pptx_records: list[PptxRecord],
    font_records: list[FontRecord],
    token_records: list[TokensRecord],
    ids: IdProvider,
) -> list[Rule]:
    """Heading/body font rules, uppercase headline style, letter spacing."""
    rules: list[Rule] = []

    tallies = tally_fonts(collect_font_declarations(pptx_records, font_records, token_records))
    ranked = sorted(tallies.items(), key=lambda item: item[1].count, reverse=True)

    for role in ("heading", "body"):
        match = next(((name, t) for name, t in ranked if role in t.usages), None)
        if match:
            rules.append(_font_rule(ids, role, *match))

    # Uppercase headlines
    uppercase_sources = [
        p for p in pptx_records if p.patterns.typography_patterns.uses_uppercase
    ]
    if uppercase_sources and pptx_records:
        fraction = len(uppercase_sources) / len(pptx_records)
        rules.append(Rule(
            id=ids(),
            category=RuleCategory.TYPOGRAPHY,
            name="Headline style: uppercase",
            description="Headlines are set in capital letters (UPPERCASE)",
            confidence=round_to_places(0.5 + fraction * 0.4),
            sources=tuple(
                Provenance(file=p.source, location="slideMaster") for p in uppercase_sources
            ),
            value=TextTransformValue(text_transform="uppercase"),
            applicable_to=(MediaTag.WEBSITE, MediaTag.PRESENTATION, MediaTag.FLYER),
        ))

    letter_spacing = _letter_spacing_rule(pptx_records, ids)
    if letter_spacing:
        rules.append(letter_spacing)

    return rules


def _letter_spacing_rule(pptx_records: list[PptxRecord], ids: IdProvider) -> Rule | None:
    observations: list[tuple[float, str]] = []
    for pptx in pptx_records:
        styles = [*pptx.typography.heading_styles, *pptx.typography.body_styles]
        for style in styles:
            if style.letter_spacing:
                observations.append((style.letter_spacing, pptx.source))

    if not observations:
        return None

    counts = Counter(round_to_places(value) for value, _ in observations)
    spacing, count = counts.most_common(1)[0]
    rendered = f"{spacing:g}%" if spacing > 1 else f"{spacing:g}em"

    return Rule(
        id=ids(),
        category=RuleCategory.TYPOGRAPHY,
        name="Letter spacing",
        description=f"Headlines use {rendered} letter spacing",
        confidence=round_to_places(0.5 + min(count * 0.1, 0.4)),
        sources=tuple(Provenance(file=source, location="styles") for _, source in observations),
        value=LetterSpacingValue(letter_spacing=rendered),
        applicable_to=(MediaTag.WEBSITE, MediaTag.PRESENTATION, MediaTag.FLYER, MediaTag.SOCIAL),
    )


def detect_font_size_rules(pptx_records: list[PptxRecord], ids: IdProvider) -> list[Rule]:
    """Derive heading/subheading/body sizes from the distinct sizes in use."""
    sizes = sorted({s for pptx in pptx_records for s in pptx.typography.font_sizes})
    if len(sizes) < MIN_DISTINCT_SIZES:
        return []

    heading = sizes[-1]
    low, high = BODY_SIZE_RANGE
    body = next((s for s in sizes if low <= s <= high), sizes[0])
    subheading = next((s for s in sizes if body < s < heading), None)

    parts = [f"Headline: {heading:g}pt"]
    if subheading is not None:
        parts.append(f"Subheadline: {subheading:g}pt")
    parts.append(f"Body: {body:g}pt")

    return [Rule(
        id=ids(),
        category=RuleCategory.TYPOGRAPHY,
        name="Font size hierarchy",
        description=", ".join(parts),
        confidence=FONT_SIZE_CONFIDENCE,
        sources=tuple(Provenance(file=p.source, location="styles") for p in pptx_records),
        value=FontSizeHierarchyValue(
            heading=heading,
            subheading=subheading,
            body=body,
            scale=tuple(sizes),
        ),
        applicable_to=(MediaTag.ALL,),
    )]
