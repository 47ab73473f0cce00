"""Logic for loading managed reference YAML files."""

import re
from pathlib import Path
from typing import Any

import yaml

YAML_MIME_PREFIX = "### YamlMime:"
VB_EQUALS_RE = re.compile(r"^(\s*[\w\.]+\.vb:\s+)(=$)", flags=re.MULTILINE)


def strip_yaml_mime_header(text: str) -> str:
    """Remove the DocFX YAML MIME header from the content."""
    lines = text.splitlines()
    if lines and lines[0].startswith(YAML_MIME_PREFIX):
        return "\n".join(lines[1:]).lstrip("\n")
    return text


def load_managed_reference(path: Path) -> dict[str, Any]:
    """Load and parse a DocFX ManagedReference YAML file."""
    raw = strip_yaml_mime_header(path.read_text(encoding="utf-8"))
    # Fix unquoted equals sign in VB names which confuses PyYAML
    # Matches: "  name.vb: =" -> "  name.vb: '='"
    raw = VB_EQUALS_RE.sub(r"\1'='", raw)
    doc = yaml.safe_load(raw)
    if doc is None:
        return {}
    if not isinstance(doc, dict):
        msg = f"expected a mapping at the top level, got {type(doc).__name__}"
        raise ValueError(msg)
    return doc
