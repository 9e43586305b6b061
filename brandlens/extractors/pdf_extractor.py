"""Extract brand colors from PDF documents by sampling rendered pages."""

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from brandlens.config import AnalyzerConfig
from brandlens.schemas.analysis import ColorSample, ColorUsage, PdfRecord
from brandlens.utils.color_utils import luminance
from brandlens.utils.palette import QuantizedColor, quantize, sample_pixels

logger = logging.getLogger(__name__)

# Half of the 72 dpi page size is enough for color sampling
PAGE_RESOLUTION = 36
QUANTIZE_STEP = 16
MAX_CLUSTERS = 10

MIN_CLUSTER_LUMINANCE = 10
MAX_CLUSTER_LUMINANCE = 250
BACKGROUND_LUMINANCE = 240
TEXT_LUMINANCE = 50
DOMINANT_SHARE = 0.3


def cluster_page_colors(pixels: np.ndarray, max_clusters: int = MAX_CLUSTERS) -> list[QuantizedColor]:
    """Quantize sampled pixels and keep the most frequent non-extreme bins."""
    clusters = [
        c for c in quantize(pixels, QUANTIZE_STEP)
        if MIN_CLUSTER_LUMINANCE < luminance(c.hex) < MAX_CLUSTER_LUMINANCE
    ]
    return clusters[:max_clusters]


def categorize_clusters(clusters: list[QuantizedColor], record: PdfRecord) -> None:
    """Sort clusters into background, dominant and accent colors.

    Very dark clusters are taken to be body text and are not categorized,
    but every cluster still counts towards color usage.
    """
    if not clusters:
        return
    top_count = clusters[0].count

    for cluster in clusters:
        sample = ColorSample(hex=cluster.hex, count=cluster.count)
        lum = luminance(cluster.hex)
        if lum > BACKGROUND_LUMINANCE:
            record.colors.background.append(sample)
        elif lum >= TEXT_LUMINANCE:
            is_dominant = cluster.count > top_count * DOMINANT_SHARE
            (record.colors.dominant if is_dominant else record.colors.accent).append(sample)

        record.patterns.color_usage[cluster.hex] = ColorUsage(frequency=cluster.count)


def extract_pdf(path: str | Path, config: Optional[AnalyzerConfig] = None) -> PdfRecord:
    """Render the first pages of a PDF and extract its dominant colors.

    Pages that fail to render are logged and skipped.
    """
    import pdfplumber

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    config = config or AnalyzerConfig()

    record = PdfRecord(source=path.name)
    samples: list[np.ndarray] = []

    with pdfplumber.open(str(path)) as pdf:
        record.page_count = len(pdf.pages)
        for number, page in enumerate(pdf.pages[:config.max_pdf_pages], start=1):
            try:
                rendered = page.to_image(resolution=PAGE_RESOLUTION).original
                samples.append(sample_pixels(rendered, config.pdf_samples_per_page))
            except Exception as e:
                logger.debug(f"{path.name}: skipping page {number}: {e}")

    clusters = cluster_page_colors(np.concatenate(samples)) if samples else []
    categorize_clusters(clusters, record)
    record.confidence = 0.8 if 0 < len(clusters) < 20 else 0.5

    logger.debug(
        f"{path.name}: {record.page_count} pages, {len(clusters)} color clusters, "
        f"{len(record.colors.dominant)} dominant"
    )
    return record
