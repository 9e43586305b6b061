"""Analyzer configuration.

Defaults reproduce the standard behavior; a YAML file can override any
subset of fields:

    confirmed_threshold: 0.65
    max_pdf_pages: 3
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator


class AnalyzerConfig(BaseModel):
    """Thresholds and sampling limits for one analysis run."""

    confirmed_threshold: float = Field(
        default=0.6, ge=0.0, le=1.0,
        description="Rules at or above this confidence are confirmed.",
    )
    review_threshold: float = Field(
        default=0.3, ge=0.0, le=1.0,
        description="Rules below the confirmed threshold but at or above this one need review.",
    )

    # Extractor sampling
    max_pdf_pages: int = Field(default=5, ge=1, description="Pages rendered per PDF")
    pdf_samples_per_page: int = Field(default=500, ge=1)
    image_max_dimension: int = Field(
        default=300, ge=16,
        description="Images are downscaled to fit this box before sampling.",
    )
    image_sample_size: int = Field(default=1000, ge=1)

    # Preview caps
    preview_max_colors: int = Field(default=10, ge=0)
    preview_max_fonts: int = Field(default=4, ge=0)
    preview_max_logos: int = Field(default=5, ge=0)

    @model_validator(mode="after")
    def _check_thresholds(self) -> "AnalyzerConfig":
        if self.review_threshold > self.confirmed_threshold:
            raise ValueError("review_threshold must not exceed confirmed_threshold")
        return self

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AnalyzerConfig":
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    def to_yaml(self, path: str | Path) -> None:
        path = Path(path)
        with open(path, "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)
