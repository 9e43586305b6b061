from .rules import (
    AssetEntry, ExtractedAssets, MediaTag, PatternResult, Provenance, Rule,
    RuleCategory,
)
from .analysis import (
    AnalysisRecord, FontRecord, ImageRecord, PdfRecord, PptxRecord,
    RecordBuckets, TokensRecord,
)
from .preview import BrandPreview, PreviewColor, PreviewFont, PreviewLogo

__all__ = [
    "AssetEntry",
    "ExtractedAssets",
    "MediaTag",
    "PatternResult",
    "Provenance",
    "Rule",
    "RuleCategory",
    "AnalysisRecord",
    "FontRecord",
    "ImageRecord",
    "PdfRecord",
    "PptxRecord",
    "RecordBuckets",
    "TokensRecord",
    "BrandPreview",
    "PreviewColor",
    "PreviewFont",
    "PreviewLogo",
]
