#!/usr/bin/env python3
"""CLI entry point for the Itinerary Continuity engine.

Usage:
    python fix_itinerary.py --input path/to/itinerary.json [--output-dir output/]

Options:
    --input PATH      JSON itinerary (a list of segments or {"segments": [...]})
    --output-dir DIR  Directory for output files (default: output/)
    --format FMT      Output format: report, csv, json, all (default: all)
    --no-autofix      Report review issues without applying fixes
    --dry-run         Show stats without writing files
"""

import argparse
import logging
import sys
from pathlib import Path

from itinerary_continuity.config import LOG_LEVEL, OUTPUT_DIR
from itinerary_continuity.normalize.segment_parser import load_segments
from itinerary_continuity.output import format_report, segments_to_csv, to_json
from itinerary_continuity.pipeline import run_pipeline


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Fill location gaps in an itinerary and review its sequencing.",
    )
    parser.add_argument(
        "--input",
        required=True,
        help="Path to the itinerary JSON file",
    )
    parser.add_argument(
        "--output-dir",
        default=str(OUTPUT_DIR),
        help="Output directory",
    )
    parser.add_argument(
        "--format",
        choices=["report", "csv", "json", "all"],
        default="all",
        help="Output format (report, csv, json, all)",
    )
    parser.add_argument(
        "--no-autofix",
        action="store_false",
        dest="auto_fix",
        help="Don't apply suggested fixes from the semantic review",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show stats only, don't write files",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    try:
        segments = load_segments(args.input)
    except (OSError, ValueError) as e:
        print(f"Could not read {args.input}: {e}", file=sys.stderr)
        return 1

    result = run_pipeline(segments, auto_fix=args.auto_fix, verbose=True)

    if args.dry_run:
        print(
            f"\nDry run complete. {len(result.segments)} segments, "
            f"{len(result.gaps)} gaps, {len(result.inserted)} inserted."
        )
        return 0

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if args.format in ("report", "all"):
        report_text = format_report(result)
        report_path = output_dir / "continuity_report.txt"
        report_path.write_text(report_text, encoding="utf-8")
        print(f"\nReport written to: {report_path}")
        # Also print to stdout
        print(report_text)

    if args.format in ("csv", "all"):
        csv_path = output_dir / "segments.csv"
        segments_to_csv(result.segments, csv_path)
        print(f"CSV written to: {csv_path}")

    if args.format in ("json", "all"):
        json_path = output_dir / "itinerary.json"
        to_json(result, json_path)
        print(f"JSON written to: {json_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
