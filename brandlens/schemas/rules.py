"""Pydantic models for brand rules and the pattern engine's output.

A Rule is a single confidence-scored brand-design assertion. Rules and their
value payloads are frozen: the pattern engine builds each one exactly once
and nothing downstream mutates it. The value payload is a tagged union on
``kind`` so a rule loaded back from YAML keeps its concrete value type.
"""

from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field


class RuleCategory(str, Enum):
    COLOR = "color"
    TYPOGRAPHY = "typography"
    SPACING = "spacing"
    COMPONENT = "component"


class MediaTag(str, Enum):
    """Output media a rule applies to."""

    WEBSITE = "website"
    PRESENTATION = "presentation"
    FLYER = "flyer"
    EMAIL = "email"
    SOCIAL = "social"
    ALL = "all"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Provenance(_Frozen):
    """Where a piece of evidence came from."""

    file: str
    location: str = Field(description="e.g. design-tokens, theme, slides, pages, logo")
    type: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    contexts: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Rule value payloads
# ---------------------------------------------------------------------------

class ColorValue(_Frozen):
    kind: Literal["color"] = "color"
    type: Literal["primary", "secondary", "accent"]
    color: str
    usage: tuple[str, ...] = ()


class FontFamilyValue(_Frozen):
    kind: Literal["font_family"] = "font_family"
    type: Literal["heading", "body"]
    font_family: str


class TextTransformValue(_Frozen):
    kind: Literal["text_transform"] = "text_transform"
    text_transform: str = "uppercase"


class LetterSpacingValue(_Frozen):
    kind: Literal["letter_spacing"] = "letter_spacing"
    letter_spacing: str


class FontSizeHierarchyValue(_Frozen):
    kind: Literal["font_size_hierarchy"] = "font_size_hierarchy"
    heading: float
    subheading: Optional[float] = None
    body: float
    scale: tuple[float, ...] = ()


class SpacingTokens(_Frozen):
    xs: int
    sm: int
    md: int
    lg: int
    xl: int


class GridValue(_Frozen):
    kind: Literal["grid"] = "grid"
    base_unit: int
    scale: tuple[int, ...] = ()
    spacing_tokens: Optional[SpacingTokens] = None


class PresentationFormatValue(_Frozen):
    kind: Literal["presentation_format"] = "presentation_format"
    width: int
    height: int
    aspect_ratio: str
    format: str


class ContentMarginValue(_Frozen):
    kind: Literal["content_margin"] = "content_margin"
    margin: int


class LogoPositionValue(_Frozen):
    kind: Literal["logo_position"] = "logo_position"
    position: str
    occurrences: int


class BorderRadiusValue(_Frozen):
    kind: Literal["border_radius"] = "border_radius"
    border_radius: int
    scale: tuple[int, ...] = ()


class BoxShadowValue(_Frozen):
    kind: Literal["box_shadow"] = "box_shadow"
    box_shadow: Any


class ButtonStyleValue(_Frozen):
    kind: Literal["button_style"] = "button_style"
    background_color: str
    border_radius: float = 8


RuleValue = Annotated[
    Union[
        ColorValue,
        FontFamilyValue,
        TextTransformValue,
        LetterSpacingValue,
        FontSizeHierarchyValue,
        GridValue,
        PresentationFormatValue,
        ContentMarginValue,
        LogoPositionValue,
        BorderRadiusValue,
        BoxShadowValue,
        ButtonStyleValue,
    ],
    Field(discriminator="kind"),
]


class Rule(_Frozen):
    """A confidence-scored, human-readable brand design rule."""

    id: str = Field(description="Opaque unique identifier")
    category: RuleCategory
    name: str = Field(description="Short label, e.g. 'Primary color'")
    description: str
    confidence: float = Field(ge=0.0, le=1.0)
    sources: tuple[Provenance, ...] = ()
    value: RuleValue
    applicable_to: tuple[MediaTag, ...] = (MediaTag.ALL,)


# ---------------------------------------------------------------------------
# Extracted assets
# ---------------------------------------------------------------------------

class Point(BaseModel):
    x: int
    y: int
    slide: Optional[int] = None


class Dimensions(BaseModel):
    width: float
    height: float


class AssetEntry(BaseModel):
    """A logo, image, icon, background or font pulled out of the uploads."""

    name: str
    data: Optional[str] = Field(
        default=None,
        description="Payload as a data URI (base64).",
    )
    size: int = 0
    type: str = "image"
    source: Optional[str] = None
    format: Optional[str] = None
    position: Optional[Point] = None
    dimensions: Optional[Dimensions] = None
    position_category: Optional[str] = None
    is_vector: bool = False
    confidence: float = 0.5
    colors: list[str] = Field(default_factory=list)


class ExtractedAssets(BaseModel):
    logos: list[AssetEntry] = Field(default_factory=list)
    images: list[AssetEntry] = Field(default_factory=list)
    icons: list[AssetEntry] = Field(default_factory=list)
    backgrounds: list[AssetEntry] = Field(default_factory=list)
    fonts: list[AssetEntry] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.logos or self.images or self.icons or self.backgrounds or self.fonts)


# ---------------------------------------------------------------------------
# Pattern engine output
# ---------------------------------------------------------------------------

class PatternResult(BaseModel):
    """Rules partitioned by confidence plus the merged asset collections."""

    rules: list[Rule] = Field(
        default_factory=list,
        description="Confirmed rules (confidence >= confirmed threshold).",
    )
    needs_review: list[Rule] = Field(
        default_factory=list,
        description="Rules that need human review.",
    )
    extracted_assets: ExtractedAssets = Field(default_factory=ExtractedAssets)

    @property
    def all_rules(self) -> list[Rule]:
        return [*self.rules, *self.needs_review]

    @classmethod
    def from_yaml(cls, path: str | Path) -> "PatternResult":
        """Load a previously saved analysis result."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Analysis result file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data)

    def to_yaml(self, path: str | Path) -> None:
        """Save the result to a YAML file."""
        path = Path(path)
        data = self.model_dump(mode="json", exclude_none=True)
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    def to_json(self, path: str | Path) -> None:
        """Save the result to a JSON file."""
        path = Path(path)
        with open(path, "w") as f:
            f.write(self.model_dump_json(indent=2, exclude_none=True))
