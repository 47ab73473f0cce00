"""Orchestration logic for converting DocFX YAML to Markdown."""

import argparse
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from docfx_markdown.build_index import build_index
from docfx_markdown.conversion_config import ConversionConfig
from docfx_markdown.diagnostics import Diagnostics, compute_config_hash
from docfx_markdown.discovery import DiscoveryResult, discover
from docfx_markdown.doc_tree import assemble_tree, build_children_index
from docfx_markdown.link_renderer import LinkRenderer
from docfx_markdown.load_config import load_config
from docfx_markdown.models import MetadataRecord
from docfx_markdown.page_templates import PageRenderer, load_template_settings
from docfx_markdown.xref_processor import XrefProcessor

logger = logging.getLogger(__name__)

REPORT_FILE_NAME = "conversion_report.json"
DRY_RUN_PREVIEW = 10


def run_conversion(args: argparse.Namespace) -> int:
    """Execute the full conversion pipeline."""
    yml_files = sorted(Path(args.yml_dir).rglob("*.yml"))
    if not yml_files:
        msg = f"No .yml files found under: {args.yml_dir}"
        raise SystemExit(msg)

    raw_config = load_config(getattr(args, "config", None))
    templates_dir = getattr(args, "templates", None) or raw_config.get("templates_dir")
    if templates_dir:
        # template.json settings apply over the config file, flags over both.
        raw_config["templates_dir"] = str(templates_dir)
        raw_config.update(load_template_settings(templates_dir).config)
    raw_config = _apply_cli_overrides(raw_config, args)
    config = ConversionConfig.from_dict(raw_config)
    diagnostics = Diagnostics()

    records, references = build_index(yml_files, diagnostics)
    result = discover(records, references, config, diagnostics)

    stats: dict[str, Any] = {
        "files": len(yml_files),
        "records": len(records),
        "references": len(references),
        "uids": result.total_uids,
        "assemblies": len(result.assembly_dirs),
        "namespaces": len(result.namespace_dirs),
    }

    out_root = Path(args.out_dir).resolve()
    report_path = getattr(args, "report", None)

    if getattr(args, "dry_run", False):
        _print_preview(result)
        diagnostics.log_summary()
        if report_path:
            diagnostics.generate_report(
                report_path, compute_config_hash(raw_config), stats
            )
        print("Dry run complete. No files written.")
        return 0

    out_root.mkdir(parents=True, exist_ok=True)
    written = write_pages(result, out_root, diagnostics)
    stats["pages_written"] = written

    diagnostics.log_summary()
    diagnostics.generate_report(
        report_path or out_root / REPORT_FILE_NAME,
        compute_config_hash(raw_config),
        stats,
    )
    print(f"Generated {written} Markdown pages into: {out_root}")
    return 0


def _apply_cli_overrides(
    config: dict[str, Any], args: argparse.Namespace
) -> dict[str, Any]:
    """Command-line flags win over the configuration file."""
    overrides = {
        "output_format": getattr(args, "format", None),
        "file_grouping": getattr(args, "grouping", None),
        "filename_case": getattr(args, "case", None),
        "workers": getattr(args, "workers", None),
    }
    for key, value in overrides.items():
        if value is not None:
            config[key] = value
    if getattr(args, "no_combine_members", False):
        config["combine_members"] = False
    if getattr(args, "strict_duplicates", False):
        config["strict_duplicates"] = True
    return config


def _print_preview(result: DiscoveryResult) -> None:
    """Show where the first few UIDs would be written."""
    entries = result.link_table.items()
    print(f"Dry run: {len(entries)} UIDs mapped")
    for uid, info in entries[:DRY_RUN_PREVIEW]:
        print(f"  {uid} -> {info.target}")
    if len(entries) > DRY_RUN_PREVIEW:
        print(f"  ... and {len(entries) - DRY_RUN_PREVIEW} more")


def output_file_for_page(out_root: Path, rel_path: str) -> Path:
    """Determine the output file for a page path relative to the output root."""
    p = out_root / rel_path
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def write_pages(
    result: DiscoveryResult,
    out_root: Path,
    diagnostics: Diagnostics,
) -> int:
    """Render, resolve and write every page; returns the number written."""
    children_index = build_children_index(result.records)
    page_renderer = PageRenderer(result.config)
    processor = XrefProcessor(
        result.link_table, LinkRenderer(result.config.link_template)
    )

    def render(record: MetadataRecord) -> tuple[str, str]:
        rel_path = result.output_path(record.uid)
        node = assemble_tree(record, children_index)
        text = page_renderer.render(node)
        return rel_path, processor.process(text, rel_path, diagnostics)

    pages = result.page_records()
    total = len(pages)
    print(f"Writing {total} pages...")

    # The link table is frozen, so rendering only reads shared state.
    if result.config.workers > 1 and total > 1:
        with ThreadPoolExecutor(max_workers=result.config.workers) as pool:
            rendered = pool.map(render, pages)
            return _write_rendered(rendered, out_root, total)
    return _write_rendered(map(render, pages), out_root, total)


def _write_rendered(rendered: Any, out_root: Path, total: int) -> int:
    written = 0
    for rel_path, text in rendered:
        output_file_for_page(out_root, rel_path).write_text(text, encoding="utf-8")
        written += 1
        if written % 50 == 0:
            print(f"  ... wrote {written}/{total} pages")
    logger.debug("Wrote %d pages under %s", written, out_root)
    return written
