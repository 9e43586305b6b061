from pathlib import Path
from typing import Callable, Optional

from brandlens.config import AnalyzerConfig

from .font_extractor import extract_font
from .image_extractor import extract_image
from .pdf_extractor import extract_pdf
from .pptx_extractor import extract_pptx
from .tokens_extractor import extract_tokens

_EXTRACTOR_MAP = {
    ".pptx": extract_pptx,
    ".ppt": extract_pptx,
    ".potx": extract_pptx,
    ".pdf": extract_pdf,
    ".png": extract_image,
    ".jpg": extract_image,
    ".jpeg": extract_image,
    ".gif": extract_image,
    ".svg": extract_image,
    ".webp": extract_image,
    ".ico": extract_image,
    ".ttf": extract_font,
    ".otf": extract_font,
    ".woff": extract_font,
    ".woff2": extract_font,
    ".json": extract_tokens,
}

SUPPORTED_EXTENSIONS = frozenset(_EXTRACTOR_MAP)

# Extractors whose sampling limits come from the analyzer config
_SAMPLING_EXTRACTORS = {extract_pdf, extract_image}


def extractor_for(path: str | Path) -> Optional[Callable]:
    """Return the extractor for a file's extension, or None if unsupported."""
    return _EXTRACTOR_MAP.get(Path(path).suffix.lower())


def extract(path: str | Path, config: Optional[AnalyzerConfig] = None):
    """Extract an AnalysisRecord from a brand asset file.

    Dispatches to the appropriate extractor based on file extension.
    Supported formats: presentations, PDF, images, fonts, design tokens.
    """
    path = Path(path)
    extractor = extractor_for(path)
    if extractor is None:
        supported = ", ".join(sorted(_EXTRACTOR_MAP.keys()))
        raise ValueError(f"Unsupported file format '{path.suffix.lower()}'. Supported: {supported}")
    if extractor in _SAMPLING_EXTRACTORS:
        return extractor(path, config)
    return extractor(path)


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "extract",
    "extractor_for",
    "extract_font",
    "extract_image",
    "extract_pdf",
    "extract_pptx",
    "extract_tokens",
]
