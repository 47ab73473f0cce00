"""Logic for turning DocFX YAML files into flat record and reference lists."""

import logging
from pathlib import Path
from typing import Any

import yaml

from docfx_markdown.diagnostics import Diagnostics
from docfx_markdown.item_kind import ItemKind
from docfx_markdown.load_managed_reference import load_managed_reference
from docfx_markdown.models import (
    AttributeDocEntry,
    ExceptionDocEntry,
    MetadataRecord,
    ParameterDoc,
    ReferenceRecord,
    ReturnDoc,
    TypeParameterDoc,
)

logger = logging.getLogger(__name__)


def as_text(v: object) -> str:
    """Convert a value to a string, handling lists and None."""
    if v is None:
        return ""
    if isinstance(v, str):
        return v.strip()
    if isinstance(v, list):
        return "\n".join(as_text(x) for x in v if as_text(x))
    return str(v).strip()


def _uid_list(values: object) -> list[str]:
    if not isinstance(values, list):
        return []
    out = []
    for x in values:
        uid = x.get("uid") if isinstance(x, dict) else x
        if uid:
            out.append(str(uid))
    return out


def _text_list(values: object) -> list[str]:
    """A YAML list of names; a single scalar counts as a one-item list."""
    if isinstance(values, (str, int, float)):
        values = [values]
    if not isinstance(values, list):
        return []
    return [str(v) for v in values if v and not isinstance(v, (dict, list))]


def _parse_record(it: dict[str, Any], source: Path) -> MetadataRecord:
    uid = as_text(it.get("uid"))
    syntax = it.get("syntax") if isinstance(it.get("syntax"), dict) else {}

    ret = syntax.get("return")
    returns = None
    if isinstance(ret, dict) and (ret.get("type") or ret.get("description")):
        returns = ReturnDoc(as_text(ret.get("type")), as_text(ret.get("description")))

    return MetadataRecord(
        uid=uid,
        kind=ItemKind.parse(as_text(it.get("type"))),
        name=as_text(it.get("name") or it.get("fullName") or uid),
        full_name=as_text(it.get("fullName") or it.get("name") or uid),
        parent=as_text(it.get("parent")) or None,
        namespace=as_text(it.get("namespace")) or None,
        assemblies=_text_list(it.get("assemblies")),
        summary=as_text(it.get("summary")),
        remarks=as_text(it.get("remarks")),
        example=as_text(it.get("example")),
        syntax=as_text(syntax.get("content")),
        children=_uid_list(it.get("children")),
        inheritance=_uid_list(it.get("inheritance")),
        implements=_uid_list(it.get("implements")),
        parameters=[
            ParameterDoc(
                name=as_text(p.get("id") or p.get("name")),
                type=as_text(p.get("type")),
                description=as_text(p.get("description")),
            )
            for p in syntax.get("parameters") or []
            if isinstance(p, dict)
        ],
        returns=returns,
        type_parameters=[
            TypeParameterDoc(as_text(t.get("id")), as_text(t.get("description")))
            for t in syntax.get("typeParameters") or []
            if isinstance(t, dict)
        ],
        exceptions=[
            ExceptionDocEntry(as_text(e.get("type")), as_text(e.get("description")))
            for e in it.get("exceptions") or []
            if isinstance(e, dict)
        ],
        attributes=[
            AttributeDocEntry(
                type=as_text(a.get("type")),
                constructor=as_text(a.get("ctor")),
                arguments=tuple(
                    (as_text(arg.get("type")), as_text(arg.get("value")))
                    for arg in a.get("arguments") or []
                    if isinstance(arg, dict)
                ),
            )
            for a in it.get("attributes") or []
            if isinstance(a, dict)
        ],
        file=source,
        raw=it,
    )


def build_index(
    yml_files: list[Path],
    diagnostics: Diagnostics | None = None,
) -> tuple[list[MetadataRecord], list[ReferenceRecord]]:
    """Parse DocFX YAML files into records and references, in source order.

    Items without a UID are skipped here and reported; duplicates are kept
    so that discovery can detect and report them.
    """
    diagnostics = diagnostics or Diagnostics()
    records: list[MetadataRecord] = []
    references: list[ReferenceRecord] = []

    for f in yml_files:
        try:
            doc = load_managed_reference(f)
        except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as e:
            diagnostics.unparseable_file(str(f), str(e))
            continue

        items = doc.get("items") or []
        if not items:
            logger.warning("Skipping %s: no items", f)
            continue

        for it in items:
            if not isinstance(it, dict):
                continue
            if not as_text(it.get("uid")):
                diagnostics.skipped_record(str(f))
                continue
            records.append(_parse_record(it, f))

        for ref in doc.get("references") or []:
            if isinstance(ref, dict) and ref.get("uid"):
                references.append(
                    ReferenceRecord(
                        uid=str(ref["uid"]),
                        name=as_text(ref.get("name") or ref.get("fullName")),
                        href=as_text(ref.get("href")) or None,
                    )
                )

    logger.info(
        "Indexed %d records and %d references from %d files",
        len(records),
        len(references),
        len(yml_files),
    )
    return records, references
