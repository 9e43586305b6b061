from .aggregator import aggregate_extraction
from .pattern_engine import analyze_patterns, merge_extracted_assets, partition_rules

__all__ = [
    "aggregate_extraction",
    "analyze_patterns",
    "merge_extracted_assets",
    "partition_rules",
]
