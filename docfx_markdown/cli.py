"""Convert DocFX ManagedReference YAML to cross-linked Markdown pages.

Runs in two passes: discovery assigns every UID an output file and freezes
the link table, then each page is rendered and its cross-references are
rewritten into relative links.
"""

import argparse
import logging
from pathlib import Path

from docfx_markdown.conversion_config import OUTPUT_FORMATS, LayoutStrategy
from docfx_markdown.errors import ConversionError
from docfx_markdown.run_conversion import run_conversion
from docfx_markdown.safe_name import CasePolicy


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    ap = argparse.ArgumentParser(
        description="Convert DocFX ManagedReference YAML to Markdown pages.",
    )
    ap.add_argument(
        "yml_dir",
        type=Path,
        help="Folder containing DocFX ManagedReference *.yml files",
    )
    ap.add_argument(
        "out_dir",
        type=Path,
        help="Output folder for the Markdown pages",
    )
    ap.add_argument("--config", help="Path to a YAML configuration file")
    ap.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        help="Output file extension (default: md)",
    )
    ap.add_argument(
        "--grouping",
        choices=[s.value for s in LayoutStrategy],
        help="Directory layout for the pages (default: flat)",
    )
    ap.add_argument(
        "--case",
        choices=[c.value for c in CasePolicy],
        help="Casing applied to file and directory names (default: lowercase)",
    )
    ap.add_argument(
        "--no-combine-members",
        action="store_true",
        help="Give every member its own page instead of an anchor on its type",
    )
    ap.add_argument(
        "--strict-duplicates",
        action="store_true",
        help="Fail when two items share a UID",
    )
    ap.add_argument(
        "--templates",
        type=Path,
        help="Folder of Jinja2 page templates and an optional template.json",
    )
    ap.add_argument("--workers", type=int, help="Threads used for each pass")
    ap.add_argument(
        "--dry-run",
        action="store_true",
        help="Run discovery and print the UID mappings without writing pages",
    )
    ap.add_argument("--report", type=Path, help="Where to write the JSON report")
    ap.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return ap


def main(argv: list[str] | None = None) -> int:
    """Run the conversion process."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return run_conversion(args)
    except ConversionError as e:
        raise SystemExit(f"Error: {e}") from e


if __name__ == "__main__":
    raise SystemExit(main())
