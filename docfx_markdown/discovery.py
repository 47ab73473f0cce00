"""Pass 1: discover every UID and decide where it will be written."""

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from docfx_markdown.conversion_config import ConversionConfig
from docfx_markdown.diagnostics import Diagnostics
from docfx_markdown.errors import DuplicateUidError
from docfx_markdown.item_kind import is_member_kind, is_type_kind
from docfx_markdown.link_table import LinkResolutionTable
from docfx_markdown.models import MetadataRecord, ReferenceRecord
from docfx_markdown.output_paths import (
    assembly_output_directory,
    member_anchor,
    namespace_output_directory,
    output_path_for,
)

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryResult:
    """Everything pass 2 needs: records by UID and the frozen link table."""

    config: ConversionConfig
    link_table: LinkResolutionTable
    records: list[MetadataRecord] = field(default_factory=list)
    uid_to_record: dict[str, MetadataRecord] = field(default_factory=dict)
    assembly_dirs: dict[str, str] = field(default_factory=dict)
    namespace_dirs: dict[str, str] = field(default_factory=dict)
    duplicates: list[str] = field(default_factory=list)

    @property
    def total_uids(self) -> int:
        """Number of distinct UIDs registered."""
        return len(self.uid_to_record)

    @property
    def assemblies(self) -> list[str]:
        """All assemblies seen, in discovery order."""
        return list(self.assembly_dirs)

    @property
    def namespaces(self) -> list[str]:
        """All namespaces seen, in discovery order."""
        return list(self.namespace_dirs)

    def output_path(self, uid: str) -> str:
        """File a UID is written to (its parent's page for combined members)."""
        return self.link_table.get_output_info(uid).file_path

    def page_records(self) -> list[MetadataRecord]:
        """Records that get a page of their own, in discovery order."""
        pages = []
        for record in self.records:
            info = self.link_table.get_output_info(record.uid)
            if info.anchor:
                continue
            if is_type_kind(record.kind) or is_member_kind(record.kind):
                pages.append(record)
        return pages


def discover(
    records: Iterable[MetadataRecord],
    references: Iterable[ReferenceRecord],
    config: ConversionConfig | dict[str, Any],
    diagnostics: Diagnostics | None = None,
) -> DiscoveryResult:
    """Build the link table for a whole batch and freeze it.

    Runs as ordered steps: assign a path to every record, then move members
    onto their parent type's page (when combining), then record external
    references. Nothing can be resolved until the final freeze.
    """
    if not isinstance(config, ConversionConfig):
        config = ConversionConfig.from_dict(config)
    diagnostics = diagnostics or Diagnostics()

    result = DiscoveryResult(
        config=config,
        link_table=LinkResolutionTable(
            config.external_prefixes, config.external_url_template
        ),
    )

    _assign_output_paths(list(records), result, diagnostics)
    if result.duplicates and config.strict_duplicates:
        raise DuplicateUidError(result.duplicates)

    if config.combine_members:
        _combine_members(result)
    _report_path_collisions(result, diagnostics)

    for ref in references:
        if ref.uid not in result.link_table:
            result.link_table.record_external_reference(ref.uid, ref.href)

    result.link_table.freeze()
    logger.info(
        "Discovery completed: %d UIDs found across %d assemblies and %d namespaces",
        result.total_uids,
        len(result.assembly_dirs),
        len(result.namespace_dirs),
    )
    return result


def _assign_output_paths(
    records: list[MetadataRecord],
    result: DiscoveryResult,
    diagnostics: Diagnostics,
) -> None:
    """Step 1: give every record with a UID its own file."""
    config = result.config
    candidates = []
    for record in records:
        if not record.uid:
            diagnostics.skipped_record(str(record.file or ""), "missing uid")
            continue
        candidates.append(record)

    # Paths are pure functions of a record, so they can be computed in
    # parallel; the table is only ever written from this thread.
    if config.workers > 1 and len(candidates) > 1:
        with ThreadPoolExecutor(max_workers=config.workers) as pool:
            paths = list(pool.map(lambda r: output_path_for(r, config), candidates))
    else:
        paths = [output_path_for(r, config) for r in candidates]

    for record, path in zip(candidates, paths, strict=True):
        if record.uid in result.uid_to_record:
            result.duplicates.append(record.uid)
            diagnostics.duplicate_uid(record.uid, str(record.file or ""))
            continue

        result.link_table.record_generated_file(record.uid, path)
        result.uid_to_record[record.uid] = record
        result.records.append(record)

        for assembly in record.assemblies:
            if assembly and assembly not in result.assembly_dirs:
                result.assembly_dirs[assembly] = assembly_output_directory(
                    assembly, config
                )
        if record.namespace and record.namespace not in result.namespace_dirs:
            result.namespace_dirs[record.namespace] = namespace_output_directory(
                record.namespace, config
            )


def _combine_members(result: DiscoveryResult) -> None:
    """Step 2: point members at their parent type's page plus an anchor."""
    table = result.link_table
    moved = 0
    for record in result.records:
        if not is_member_kind(record.kind) or not record.parent:
            continue
        parent = result.uid_to_record.get(record.parent)
        if parent is None or not is_type_kind(parent.kind):
            continue
        parent_info = table.get_output_info(parent.uid)
        table.rewrite_to_parent(
            record.uid,
            parent_info.file_path,
            member_anchor(record, result.config.case),
        )
        moved += 1
    logger.debug("Combined %d members onto their parent pages", moved)


def _report_path_collisions(result: DiscoveryResult, diagnostics: Diagnostics) -> None:
    """Standalone pages that land on the same file overwrite each other."""
    seen: dict[str, str] = {}
    for uid, info in result.link_table.items():
        if info.anchor:
            continue
        other = seen.get(info.file_path)
        if other is not None:
            diagnostics.path_collision(uid, info.file_path, other)
        else:
            seen[info.file_path] = uid
