"""File I/O and path utilities."""

import json
import logging
from pathlib import Path
from typing import Any, Iterable

import yaml

from brandlens.extractors import SUPPORTED_EXTENSIONS

logger = logging.getLogger(__name__)


def ensure_directory(path: str | Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def save_yaml(data: dict[str, Any], path: str | Path) -> None:
    """Save a dict to a YAML file."""
    path = Path(path)
    ensure_directory(path.parent)
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)


def save_json(data: Any, path: str | Path, indent: int = 2) -> None:
    """Save data to a JSON file."""
    path = Path(path)
    ensure_directory(path.parent)
    with open(path, "w") as f:
        json.dump(data, f, indent=indent, default=str)


def find_brand_files(directory: str | Path) -> list[Path]:
    """Recursively find all files with a supported brand-asset extension."""
    directory = Path(directory)
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")
    files = sorted(
        f for f in directory.rglob("*")
        if f.is_file() and f.suffix.lower() in SUPPORTED_EXTENSIONS
    )
    # Exclude temp/hidden files
    files = [f for f in files if not f.name.startswith(("~", "."))]
    logger.debug(f"Found {len(files)} brand files in {directory}")
    return files


def expand_sources(sources: Iterable[str | Path]) -> list[Path]:
    """Expand a mix of files and directories into a flat list of files.

    Files are kept as given (unsupported ones are filtered later by the
    extractor dispatch); directories are searched recursively.
    """
    expanded: list[Path] = []
    for source in sources:
        source = Path(source)
        if source.is_dir():
            expanded.extend(find_brand_files(source))
        elif source.exists():
            expanded.append(source)
        else:
            raise FileNotFoundError(f"File not found: {source}")
    return expanded
