"""Logic for rendering type and member pages.

Pages are rendered before links are known: every type reference is emitted
as an `<xref href="...">` marker and rewritten later by the xref processor.
"""

from docfx_markdown.conversion_config import ConversionConfig
from docfx_markdown.doc_tree import DocumentationNode
from docfx_markdown.item_kind import ItemKind, is_type_kind
from docfx_markdown.models import MetadataRecord
from docfx_markdown.output_paths import member_anchor


def xref_marker(uid: str, text: str = "") -> str:
    """Marker the resolution pass turns into a link."""
    return f'<xref href="{uid}">{text}</xref>'


def md_codeblock(lang: str, code: str) -> str:
    """Generate a fenced Markdown code block."""
    return f"```{lang}\n{code.rstrip()}\n```"


def _cell(text: str) -> str:
    # Table cells must stay on one line.
    return " ".join(text.split()).replace("|", "\\|")


def md_table(headers: list[str], rows: list[list[str]]) -> str:
    """Generate a Markdown table, or an empty string when there are no rows."""
    if not rows:
        return ""
    out = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(["---"] * len(headers)) + " |",
    ]
    out.extend("| " + " | ".join(_cell(c) for c in r) + " |" for r in rows)
    return "\n".join(out)


def sorted_member_groups(
    node: DocumentationNode,
) -> list[tuple[str, list[MetadataRecord]]]:
    """Member groups in display order, each sorted by name."""
    return [
        (title, [m.record for m in sorted(members, key=_member_sort_key)])
        for title, members in node.member_groups()
    ]


def _member_sort_key(member: DocumentationNode) -> tuple[str, str]:
    return member.name.lower(), member.uid


def render_page(node: DocumentationNode, config: ConversionConfig) -> str:
    """Render the built-in page for a type or a standalone member."""
    if is_type_kind(node.record.kind):
        return render_type_page(node, config)
    return render_member_page(node, config)


def render_type_page(node: DocumentationNode, config: ConversionConfig) -> str:
    """Render a type page (class, struct, etc.) in Markdown."""
    record = node.record
    parts = _front_matter(record)
    parts += [f"# {record.kind_label} {record.name}", ""]

    parts.extend(_render_metadata(record))
    parts.extend(_render_body(record))
    parts.extend(_render_type_parameters(record))
    parts.extend(_render_uid_list("Inheritance", record.inheritance, arrow=True))
    parts.extend(_render_uid_list("Implements", record.implements))

    if record.remarks:
        parts += ["## Remarks", "", record.remarks, ""]
    if record.example:
        parts += ["## Examples", "", record.example, ""]

    for title, members in sorted_member_groups(node):
        parts += [f"## {title}", ""]
        for member in members:
            parts.extend(_render_member(member, config, heading="###"))

    return "\n".join(parts).rstrip() + "\n"


def render_member_page(node: DocumentationNode, config: ConversionConfig) -> str:
    """Render a standalone member page (used when members are not combined)."""
    record = node.record
    parts = _front_matter(record)
    parts += [f"# {record.kind_label} {record.name}", ""]
    if record.parent:
        parts += [f"**Declared in:** {xref_marker(record.parent)}", ""]
    parts.extend(_render_metadata(record))
    parts.extend(_render_member(record, config, heading=None))
    if record.remarks:
        parts += ["## Remarks", "", record.remarks, ""]
    return "\n".join(parts).rstrip() + "\n"


def _front_matter(record: MetadataRecord) -> list[str]:
    return ["---", f"uid: {record.uid}", "---", ""]


def _render_metadata(record: MetadataRecord) -> list[str]:
    """Render namespace and assembly lines."""
    parts = []
    if record.namespace:
        parts.append(f"**Namespace:** {record.namespace}")
    if record.assemblies:
        formatted = [
            a if a.lower().endswith(".dll") else f"{a}.dll" for a in record.assemblies
        ]
        if parts:
            parts[-1] += "  "
        parts.append(f"**Assembly:** {', '.join(formatted)}")
    if parts:
        parts.append("")
    return parts


def _render_body(record: MetadataRecord) -> list[str]:
    """Summary, then the declaration."""
    parts = []
    if record.summary:
        parts += [record.summary, ""]
    if record.syntax:
        parts += [md_codeblock("csharp", record.syntax), ""]
    return parts


def _render_type_parameters(record: MetadataRecord, heading: str = "##") -> list[str]:
    if not record.type_parameters:
        return []
    rows = [[f"`{tp.name}`", tp.description] for tp in record.type_parameters]
    table = md_table(["Name", "Description"], rows)
    return [f"{heading} Type Parameters", "", table, ""]


def _render_uid_list(title: str, uids: list[str], *, arrow: bool = False) -> list[str]:
    """Render a list of UIDs as xref markers."""
    if not uids:
        return []
    links = [xref_marker(uid) for uid in uids]
    joined = " → ".join(links) if arrow else ", ".join(links)
    return [f"## {title}", "", joined, ""]


def _render_member(
    record: MetadataRecord,
    config: ConversionConfig,
    heading: str | None,
) -> list[str]:
    """Render one member section; `heading` None means the page is the member."""
    parts: list[str] = []
    sub = "####" if heading else "##"
    if heading:
        if config.combine_members:
            parts += [f'<a id="{member_anchor(record, config.case)}"></a>', ""]
        parts += [f"{heading} {record.name}", ""]

    parts.extend(_render_body(record))
    parts.extend(_render_type_parameters(record, sub))

    if record.parameters:
        rows = [
            [f"`{p.name}`", xref_marker(p.type) if p.type else "", p.description]
            for p in record.parameters
        ]
        table = md_table(["Name", "Type", "Description"], rows)
        parts += [f"{sub} Parameters", "", table, ""]

    ret = record.returns
    if ret is not None and (ret.type or ret.description):
        label = "Returns"
        if record.kind is ItemKind.PROPERTY:
            label = "Property Value"
        elif record.kind is ItemKind.FIELD:
            label = "Field Value"
        parts += [f"{sub} {label}", ""]
        if ret.type:
            parts += [f"**Type:** {xref_marker(ret.type)}", ""]
        if ret.description:
            parts += [ret.description, ""]

    if record.exceptions:
        parts += [f"{sub} Exceptions", ""]
        for exc in record.exceptions:
            line = f"- {xref_marker(exc.type)}"
            if exc.description:
                line += f": {exc.description}"
            parts.append(line)
        parts.append("")

    return parts
