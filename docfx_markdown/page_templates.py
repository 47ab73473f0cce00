"""User-supplied Jinja2 templates for type and member pages.

A template folder holds one template per type kind (`class.md.j2`,
`struct.md.j2`, ...), a `member.md.j2` for standalone member pages and an
optional `template.json`. Kinds without their own template use the class
template; pages with no template at all fall back to the built-in renderer.
Templates produce pre-resolution text, so type references are written with
the `xref()` helper and rewritten by the xref processor like any other page.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jinja2 import Environment, Template, TemplateNotFound

from docfx_markdown.conversion_config import ConversionConfig
from docfx_markdown.doc_tree import DocumentationNode
from docfx_markdown.errors import ConfigurationError
from docfx_markdown.item_kind import is_type_kind
from docfx_markdown.link_renderer import create_environment, render_template
from docfx_markdown.models import MetadataRecord
from docfx_markdown.output_paths import member_anchor
from docfx_markdown.render_type_page import (
    md_codeblock,
    md_table,
    render_page,
    sorted_member_groups,
    xref_marker,
)

logger = logging.getLogger(__name__)

TEMPLATE_SETTINGS_FILE = "template.json"

DEFAULT_TEMPLATE_FILES = {
    "class": "class.md.j2",
    "struct": "struct.md.j2",
    "interface": "interface.md.j2",
    "enum": "enum.md.j2",
    "delegate": "delegate.md.j2",
    "member": "member.md.j2",
}

# template.json keys and the configuration keys they set.
SETTING_KEYS = {
    "outputFormat": "output_format",
    "fileGrouping": "file_grouping",
    "filenameCase": "filename_case",
    "combineMembers": "combine_members",
}


@dataclass(frozen=True)
class TemplateSettings:
    """Contents of a template folder's `template.json`."""

    name: str = "default"
    config: dict[str, Any] = field(default_factory=dict)
    template_files: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_TEMPLATE_FILES)
    )


def load_template_settings(templates_dir: str | Path) -> TemplateSettings:
    """Read `template.json` from a template folder; defaults when it is absent."""
    d = Path(templates_dir)
    if not d.is_dir():
        msg = f"Template folder not found: {d}"
        raise ConfigurationError(msg)

    p = d / TEMPLATE_SETTINGS_FILE
    if not p.exists():
        logger.warning("%s not found in %s, using defaults", TEMPLATE_SETTINGS_FILE, d)
        return TemplateSettings()

    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON in template settings {p}: {e}"
        raise ConfigurationError(msg) from e
    if not isinstance(data, dict):
        msg = f"Template settings {p} must contain an object"
        raise ConfigurationError(msg)

    files = dict(DEFAULT_TEMPLATE_FILES)
    mapping = data.get("templates") or {}
    if not isinstance(mapping, dict):
        msg = f"'templates' in {p} must map item kinds to file names"
        raise ConfigurationError(msg)
    files.update({str(k).lower(): str(v) for k, v in mapping.items() if v})

    settings = TemplateSettings(
        name=str(data.get("name") or "default"),
        config={SETTING_KEYS[k]: v for k, v in data.items() if k in SETTING_KEYS},
        template_files=files,
    )
    logger.info(
        "Loaded page templates '%s' from %s (settings: %s)",
        settings.name,
        d,
        sorted(settings.config),
    )
    return settings


def page_context(node: DocumentationNode, config: ConversionConfig) -> dict[str, Any]:
    """Values a page template can use."""
    record = node.record

    def anchor(member: MetadataRecord) -> str:
        return member_anchor(member, config.case)

    return {
        "item": record,
        "node": node,
        "member_groups": sorted_member_groups(node),
        "combine_members": config.combine_members,
        "output_format": config.output_format,
        "anchor": anchor,
    }


class PageRenderer:
    """Renders pages from a template folder, or with the built-in layout."""

    def __init__(self, config: ConversionConfig) -> None:
        """Load the template folder named by `config`, if any."""
        self.config = config
        self.settings: TemplateSettings | None = None
        self._env: Environment | None = None
        if config.templates_dir:
            self.settings = load_template_settings(config.templates_dir)
            self._env = create_environment(config.templates_dir)
            self._env.globals.update(
                xref=xref_marker,
                md_table=md_table,
                md_codeblock=md_codeblock,
            )

    def template_for(self, record: MetadataRecord) -> Template | None:
        """The kind's template, then the class template for types; None if absent."""
        if self._env is None or self.settings is None:
            return None
        files = self.settings.template_files
        if is_type_kind(record.kind):
            kind = record.kind.value.lower() if record.kind else ""
            names = [files.get(kind), files.get("class")]
        else:
            names = [files.get("member")]

        for name in dict.fromkeys(n for n in names if n):
            try:
                return self._env.get_template(name)
            except TemplateNotFound:
                continue
        return None

    def render(self, node: DocumentationNode) -> str:
        """Pre-resolution text for one page."""
        template = self.template_for(node.record)
        if template is None:
            return render_page(node, self.config)
        logger.debug("Rendering %s with template %s", node.uid, template.name)
        return render_template(template, page_context(node, self.config))
