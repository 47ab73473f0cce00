"""Rules mapping a metadata record onto its output file path."""

from docfx_markdown.conversion_config import ConversionConfig, LayoutStrategy
from docfx_markdown.models import MetadataRecord
from docfx_markdown.safe_name import (
    GLOBAL_NAMESPACE,
    UNKNOWN_ASSEMBLY,
    UNKNOWN_TYPE,
    CasePolicy,
    safe_directory_name,
    safe_file_name,
)


def simple_name(record: MetadataRecord) -> str:
    """The record's short name, falling back to the last UID segment."""
    if record.name:
        return record.name
    head = record.uid.split("(")[0]
    return head.rsplit(".", 1)[-1]


def assembly_directory(assemblies: list[str], case: CasePolicy) -> str:
    """Directory for the first assembly an item ships in."""
    first = assemblies[0] if assemblies else ""
    return safe_directory_name(first, case, UNKNOWN_ASSEMBLY)


def namespace_directory(namespace: str | None, case: CasePolicy) -> str:
    """Directory for a namespace; the global namespace gets its own folder."""
    return safe_directory_name(namespace or "", case, GLOBAL_NAMESPACE)


def output_path_for(record: MetadataRecord, config: ConversionConfig) -> str:
    """Compute the output file path of a record under the configured layout."""
    layout = config.layout
    case = config.case
    ext = config.extension

    if layout is LayoutStrategy.FLAT:
        return safe_file_name(record.uid, case, UNKNOWN_TYPE) + ext

    file_name = safe_file_name(simple_name(record), case, UNKNOWN_TYPE) + ext
    if layout is LayoutStrategy.NAMESPACE:
        return f"{namespace_directory(record.namespace, case)}/{file_name}"
    if layout is LayoutStrategy.ASSEMBLY_NAMESPACE:
        asm = assembly_directory(record.assemblies, case)
        ns = namespace_directory(record.namespace, case)
        return f"{asm}/{ns}/{file_name}"
    if layout is LayoutStrategy.ASSEMBLY_FLAT:
        return f"{assembly_directory(record.assemblies, case)}/{file_name}"

    msg = f"Unhandled layout strategy: {layout}"
    raise ValueError(msg)


def member_anchor(record: MetadataRecord, case: CasePolicy) -> str:
    """In-page anchor of a member combined onto its parent's page."""
    return safe_file_name(simple_name(record), case, UNKNOWN_TYPE)


def assembly_output_directory(assembly: str, config: ConversionConfig) -> str:
    """Directory an assembly's pages land in, or empty when the layout has none."""
    if config.layout.has_assembly_dir:
        return safe_directory_name(assembly, config.case, UNKNOWN_ASSEMBLY)
    return ""


def namespace_output_directory(namespace: str, config: ConversionConfig) -> str:
    """Directory a namespace's pages land in, or empty when the layout has none."""
    if config.layout.has_namespace_dir:
        return namespace_directory(namespace, config.case)
    return ""
