"""Pydantic models for per-file extraction results (AnalysisRecords).

Every extractor returns exactly one record. Records form a tagged union on
``type`` so that the pattern engine can bucket and pattern-match on the
discriminator instead of probing for optional nested fields. All nested
sections default to empty, so a partially parsed file is still a valid
record.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from .rules import ExtractedAssets


# ---------------------------------------------------------------------------
# Shared building blocks
# ---------------------------------------------------------------------------

class ColorSample(BaseModel):
    """A quantized color with the number of pixel samples that hit it."""

    hex: str
    count: int = 1
    percentage: Optional[int] = Field(
        default=None,
        description="Share of sampled pixels in percent (images only).",
    )


class ColorUsage(BaseModel):
    """How often a color occurs in slide XML and in which contexts."""

    frequency: float = 0
    contexts: list[str] = Field(
        default_factory=list,
        description="Usage contexts: background, text, border.",
    )


class ColorPatterns(BaseModel):
    color_usage: dict[str, ColorUsage] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# PPTX / POTX
# ---------------------------------------------------------------------------

class ThemeColor(BaseModel):
    """A named slot of the theme color scheme (dk1, accent1, hlink, ...)."""

    name: str
    type: Literal["dark", "light", "accent", "link"]
    label: str
    value: str


class FontReference(BaseModel):
    name: str
    usage: str = Field(
        default="other",
        description="heading, body, slide or other.",
    )


class ThemeFonts(BaseModel):
    major: Optional[str] = Field(default=None, description="Theme heading font")
    minor: Optional[str] = Field(default=None, description="Theme body font")
    all: list[FontReference] = Field(default_factory=list)


class ThemeInfo(BaseModel):
    colors: list[ThemeColor] = Field(default_factory=list)
    fonts: ThemeFonts = Field(default_factory=ThemeFonts)


class TextStyle(BaseModel):
    """Level-1 text style of a slide master title or body style."""

    font_size: Optional[float] = Field(default=None, description="Size in points")
    font_weight: str = "normal"
    text_transform: str = "none"
    letter_spacing: Optional[float] = Field(
        default=None,
        description="Character spacing in points (OOXML spc / 100).",
    )
    line_height: Optional[float] = Field(
        default=None,
        description="Line spacing multiplier (OOXML spcPct / 100000).",
    )


class TypographyInfo(BaseModel):
    heading_styles: list[TextStyle] = Field(default_factory=list)
    body_styles: list[TextStyle] = Field(default_factory=list)
    font_sizes: list[float] = Field(default_factory=list)
    font_weights: list[str] = Field(default_factory=list)
    text_transforms: list[str] = Field(default_factory=list)


class SlideSize(BaseModel):
    """Slide dimensions in pixels at 96 dpi, plus the raw EMU values."""

    width: int
    height: int
    width_emu: Optional[int] = None
    height_emu: Optional[int] = None


class Box(BaseModel):
    x: int
    y: int
    width: int
    height: int


class LogoPlacement(BaseModel):
    name: str
    position: Literal["top-left", "top-right", "bottom-left", "bottom-right", "center"]
    x: int
    y: int
    source: Optional[str] = Field(
        default=None,
        description="Where the placement was found: master, layout or slide.",
    )


class LayoutInfo(BaseModel):
    slide_size: Optional[SlideSize] = None
    content_areas: list[Box] = Field(default_factory=list)
    logo_positions: list[LogoPlacement] = Field(default_factory=list)


class SpacingInfo(BaseModel):
    """Raw spacing observations in pixels."""

    margins: list[float] = Field(default_factory=list)
    gaps: list[float] = Field(default_factory=list)
    grid_values: list[float] = Field(default_factory=list)
    common_spacings: list[int] = Field(default_factory=list)


class TypographyPatterns(BaseModel):
    uses_uppercase: bool = False
    uses_bold: bool = False
    uses_italic: bool = False


class PptxPatterns(ColorPatterns):
    typography_patterns: TypographyPatterns = Field(default_factory=TypographyPatterns)
    detected_grid_values: list[int] = Field(default_factory=list)
    grid_base: Optional[int] = Field(
        default=None,
        description="Best-fitting base unit from {4, 8, 10, 12, 16, 20, 24}.",
    )


class RoundedShape(BaseModel):
    corner_radius: float = Field(description="Corner radius in pixels")


class ButtonShape(BaseModel):
    fill_color: Optional[str] = None
    corner_radius: Optional[float] = None


class ShapeInfo(BaseModel):
    rounded_rectangles: list[RoundedShape] = Field(default_factory=list)
    buttons: list[ButtonShape] = Field(default_factory=list)


class PptxRecord(BaseModel):
    """Analysis of a PowerPoint presentation or template."""

    source: str
    type: Literal["pptx", "potx"] = "pptx"
    theme: ThemeInfo = Field(default_factory=ThemeInfo)
    typography: TypographyInfo = Field(default_factory=TypographyInfo)
    layouts: LayoutInfo = Field(default_factory=LayoutInfo)
    spacing: SpacingInfo = Field(default_factory=SpacingInfo)
    patterns: PptxPatterns = Field(default_factory=PptxPatterns)
    shapes: ShapeInfo = Field(default_factory=ShapeInfo)
    extracted_assets: ExtractedAssets = Field(default_factory=ExtractedAssets)
    slide_count: int = 0
    confidence: float = 0.0


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------

class PdfColors(BaseModel):
    dominant: list[ColorSample] = Field(default_factory=list)
    accent: list[ColorSample] = Field(default_factory=list)
    background: list[ColorSample] = Field(default_factory=list)


class PdfRecord(BaseModel):
    """Colors sampled from rendered PDF pages."""

    source: str
    type: Literal["pdf"] = "pdf"
    page_count: int = 0
    colors: PdfColors = Field(default_factory=PdfColors)
    patterns: ColorPatterns = Field(default_factory=ColorPatterns)
    confidence: float = 0.0


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

class ImageDimensions(BaseModel):
    width: int = 0
    height: int = 0
    aspect_ratio: float = 1.0


class ImageColors(BaseModel):
    dominant: list[ColorSample] = Field(default_factory=list)
    palette: list[ColorSample] = Field(default_factory=list)


class ImageProperties(BaseModel):
    has_transparency: bool = False
    is_likely_logo: bool = False
    suggested_min_size: int = 0


class ImageRecord(BaseModel):
    """Palette and logo heuristics for a raster or SVG image."""

    source: str
    type: Literal["image"] = "image"
    dimensions: ImageDimensions = Field(default_factory=ImageDimensions)
    colors: ImageColors = Field(default_factory=ImageColors)
    properties: ImageProperties = Field(default_factory=ImageProperties)
    patterns: ColorPatterns = Field(default_factory=ColorPatterns)
    data_url: Optional[str] = None
    size: int = 0
    confidence: float = 0.7


# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------

class FontRecord(BaseModel):
    """Metadata for an uploaded font file."""

    source: str
    type: Literal["font"] = "font"
    name: str
    format: str = "Unknown"
    size: int = 0
    data_url: Optional[str] = None
    confidence: float = 0.9


# ---------------------------------------------------------------------------
# Design tokens
# ---------------------------------------------------------------------------

class TokenEntry(BaseModel):
    """A single design token; ``value`` is kept as declared."""

    name: str
    value: Any = None
    description: Optional[str] = None


class TokensRecord(BaseModel):
    """Parsed design-token JSON (Tokens Studio, Style Dictionary, Figma, ...).

    When the file is not valid JSON the record carries ``valid=False`` and
    an ``error`` message instead of raising.
    """

    source: str
    type: Literal["tokens"] = "tokens"
    valid: bool = True
    error: Optional[str] = None
    format: Optional[str] = None
    colors: list[TokenEntry] = Field(default_factory=list)
    fonts: list[TokenEntry] = Field(default_factory=list)
    spacing: list[TokenEntry] = Field(default_factory=list)
    radii: list[TokenEntry] = Field(default_factory=list)
    shadows: list[TokenEntry] = Field(default_factory=list)
    confidence: float = 0.85


# ---------------------------------------------------------------------------
# Tagged union and buckets
# ---------------------------------------------------------------------------

AnalysisRecord = Annotated[
    Union[PptxRecord, PdfRecord, ImageRecord, FontRecord, TokensRecord],
    Field(discriminator="type"),
]

analysis_record_adapter = TypeAdapter(AnalysisRecord)


class RecordBuckets(BaseModel):
    """AnalysisRecords grouped by source type, in arrival order."""

    pptx: list[PptxRecord] = Field(default_factory=list)
    pdf: list[PdfRecord] = Field(default_factory=list)
    images: list[ImageRecord] = Field(default_factory=list)
    fonts: list[FontRecord] = Field(default_factory=list)
    tokens: list[TokensRecord] = Field(default_factory=list)

    @classmethod
    def from_records(cls, records) -> "RecordBuckets":
        buckets = cls()
        for record in records:
            buckets.add(record)
        return buckets

    def add(self, record) -> None:
        match record.type:
            case "pptx" | "potx":
                self.pptx.append(record)
            case "pdf":
                self.pdf.append(record)
            case "image":
                self.images.append(record)
            case "font":
                self.fonts.append(record)
            case "tokens":
                self.tokens.append(record)
            case other:
                raise ValueError(f"Unknown analysis record type: {other}")

    def all_records(self) -> list:
        return [*self.pptx, *self.pdf, *self.images, *self.fonts, *self.tokens]

    def is_empty(self) -> bool:
        return not self.all_records()
