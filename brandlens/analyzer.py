"""Analysis runner: extract every file, then synthesize brand rules.

Files are processed one after another. A file that fails to extract is
logged and contributes no record; the rest of the run continues.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from brandlens.config import AnalyzerConfig
from brandlens.engine.aggregator import aggregate_extraction
from brandlens.engine.pattern_engine import analyze_patterns
from brandlens.extractors import extract, extractor_for
from brandlens.schemas.analysis import RecordBuckets
from brandlens.schemas.preview import BrandPreview
from brandlens.schemas.rules import PatternResult
from brandlens.utils.color_utils import round_half_up
from brandlens.utils.ids import IdProvider

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

# Share of the progress bar covered by file extraction
EXTRACTION_PROGRESS = 80


@dataclass
class AnalysisRun:
    """Per-file records of one run and the pattern engine's result."""

    records: RecordBuckets
    result: PatternResult


def bucket_records(records: Iterable) -> RecordBuckets:
    """Group a flat list of AnalysisRecords by source type."""
    return RecordBuckets.from_records(records)


def collect_records(
    paths: Iterable[str | Path],
    on_progress: Optional[ProgressCallback] = None,
    config: Optional[AnalyzerConfig] = None,
) -> RecordBuckets:
    """Run the matching extractor over each file, in order.

    Unsupported files are skipped. Extraction failures are logged and the
    file is left out. ``on_progress`` receives 0-80 as files complete.
    """
    paths = [Path(p) for p in paths]
    buckets = RecordBuckets()
    total = len(paths)

    for completed, path in enumerate(paths, start=1):
        if extractor_for(path) is None:
            logger.debug(f"Skipping unsupported file: {path.name}")
        else:
            try:
                buckets.add(extract(path, config))
                logger.info(f"Analyzed {path.name}")
            except Exception as e:
                logger.warning(f"Skipping {path.name}: {e}")

        if on_progress:
            on_progress(round_half_up(completed / total * EXTRACTION_PROGRESS))

    return buckets


def analyze_files(
    paths: Iterable[str | Path],
    on_progress: Optional[ProgressCallback] = None,
    id_provider: Optional[IdProvider] = None,
    config: Optional[AnalyzerConfig] = None,
) -> AnalysisRun:
    """Extract all files and generate brand rules from the combined records."""
    config = config or AnalyzerConfig()
    buckets = collect_records(paths, on_progress=on_progress, config=config)
    result = analyze_patterns(buckets, id_provider=id_provider, config=config)

    if on_progress:
        on_progress(100)

    logger.info(
        f"Analysis complete: {len(buckets.all_records())} files analyzed, "
        f"{len(result.rules)} confirmed rules, {len(result.needs_review)} for review"
    )
    return AnalysisRun(records=buckets, result=result)


def preview_files(
    paths: Iterable[str | Path],
    config: Optional[AnalyzerConfig] = None,
) -> BrandPreview:
    """Extract all files and return the capped color/font/logo preview."""
    config = config or AnalyzerConfig()
    buckets = collect_records(paths, config=config)
    return aggregate_extraction(buckets, config=config)
