"""Pydantic models for the lightweight asset preview (no rules)."""

from typing import Optional

from pydantic import BaseModel, Field


class PreviewColor(BaseModel):
    hex: str
    source: str = Field(description="pptx-theme, pptx-slides, pdf, pdf-accent or logo")
    name: Optional[str] = None
    priority: float = 0


class PreviewFont(BaseModel):
    name: str
    usage: str = "unknown"
    source: str
    data_url: Optional[str] = None
    priority: float = 0


class PreviewLogo(BaseModel):
    data_url: str
    name: str = "Logo"
    source: str
    confidence: float = 0.0


class BrandPreview(BaseModel):
    """Capped, de-duplicated colors, fonts and logos for quick import."""

    colors: list[PreviewColor] = Field(default_factory=list)
    fonts: list[PreviewFont] = Field(default_factory=list)
    logos: list[PreviewLogo] = Field(default_factory=list)
