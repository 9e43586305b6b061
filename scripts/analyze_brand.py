#!/usr/bin/env python3
"""Derive brand rules from presentations, PDFs, images, fonts and design tokens.

Usage:
    # Analyze a folder of brand assets:
    python scripts/analyze_brand.py assets/ -o output/brand_rules.yaml

    # Mix files and folders, write JSON:
    python scripts/analyze_brand.py deck.potx logo.svg tokens.json -o rules.json

    # Quick color/font/logo preview without rules:
    python scripts/analyze_brand.py assets/ --preview
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from brandlens.analyzer import analyze_files, preview_files
from brandlens.config import AnalyzerConfig
from brandlens.utils.file_utils import ensure_directory, expand_sources, save_json, save_yaml


def _print_progress(percent: int) -> None:
    print(f"\r  Progress: {percent:3d}%", end="", flush=True)
    if percent >= 100:
        print()


def _write(data: dict, output: Path) -> None:
    if output.suffix.lower() == ".json":
        save_json(data, output)
    else:
        save_yaml(data, output)


def main():
    parser = argparse.ArgumentParser(description="Extract brand rules from design assets")
    parser.add_argument("sources", type=Path, nargs="+",
                        help="Files and/or directories to analyze")
    parser.add_argument("-o", "--output", type=Path,
                        default=Path("output/brand_rules.yaml"),
                        help="Output path (.yaml or .json)")
    parser.add_argument("--preview", action="store_true",
                        help="Only aggregate colors, fonts and logos (no rules)")
    parser.add_argument("--config", type=Path, default=None,
                        help="Analyzer config YAML")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        files = expand_sources(args.sources)
        config = AnalyzerConfig.from_yaml(args.config) if args.config else AnalyzerConfig()
    except (FileNotFoundError, NotADirectoryError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not files:
        print("No supported files found.", file=sys.stderr)
        sys.exit(0)

    print(f"Analyzing {len(files)} files...")

    if args.preview:
        preview = preview_files(files, config=config)
        _write(preview.model_dump(mode="json", exclude_none=True), args.output)

        print(f"\nPreview saved to: {args.output}")
        print(f"  Colors: {', '.join(c.hex for c in preview.colors) or '-'}")
        print(f"  Fonts: {', '.join(f.name for f in preview.fonts) or '-'}")
        print(f"  Logos: {len(preview.logos)}")
        return

    run = analyze_files(files, on_progress=_print_progress, config=config)
    result = run.result
    ensure_directory(args.output.parent)
    if args.output.suffix.lower() == ".json":
        result.to_json(args.output)
    else:
        result.to_yaml(args.output)

    print(f"\nBrand rules saved to: {args.output}")
    print(f"  Files analyzed: {len(run.records.all_records())} of {len(files)}")
    print(f"  Confirmed rules: {len(result.rules)}")
    for rule in result.rules:
        print(f"    [{rule.confidence:.2f}] {rule.name}: {rule.description}")
    print(f"  Needs review: {len(result.needs_review)}")
    for rule in result.needs_review:
        print(f"    [{rule.confidence:.2f}] {rule.name}: {rule.description}")
    assets = result.extracted_assets
    print(f"  Assets: {len(assets.logos)} logos, {len(assets.images)} images, "
          f"{len(assets.icons)} icons, {len(assets.backgrounds)} backgrounds, "
          f"{len(assets.fonts)} fonts")


if __name__ == "__main__":
    main()
