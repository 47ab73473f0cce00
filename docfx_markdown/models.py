"""Data models shared by the discovery and resolution passes."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from docfx_markdown.item_kind import ItemKind


@dataclass(frozen=True)
class ParameterDoc:
    """A parameter from a member's syntax block."""

    name: str
    type: str
    description: str = ""


@dataclass(frozen=True)
class ReturnDoc:
    """The return value (or property/field value) of a member."""

    type: str
    description: str = ""


@dataclass(frozen=True)
class TypeParameterDoc:
    """A generic type parameter."""

    name: str
    description: str = ""


@dataclass(frozen=True)
class ExceptionDocEntry:
    """An exception a member documents as thrown."""

    type: str
    description: str = ""


@dataclass(frozen=True)
class AttributeDocEntry:
    """An attribute applied to an item."""

    type: str
    constructor: str = ""
    arguments: tuple[tuple[str, str], ...] = ()


@dataclass
class MetadataRecord:
    """Represents a documented item (class, method, etc.)."""

    uid: str
    kind: ItemKind | None
    name: str
    full_name: str
    parent: str | None = None
    namespace: str | None = None
    assemblies: list[str] = field(default_factory=list)
    summary: str = ""
    remarks: str = ""
    example: str = ""
    syntax: str = ""
    children: list[str] = field(default_factory=list)
    inheritance: list[str] = field(default_factory=list)
    implements: list[str] = field(default_factory=list)
    parameters: list[ParameterDoc] = field(default_factory=list)
    returns: ReturnDoc | None = None
    type_parameters: list[TypeParameterDoc] = field(default_factory=list)
    exceptions: list[ExceptionDocEntry] = field(default_factory=list)
    attributes: list[AttributeDocEntry] = field(default_factory=list)
    file: Path | None = None
    raw: dict[str, Any] = field(default_factory=dict)  # original parsed item

    @property
    def kind_label(self) -> str:
        """Human readable kind, or Unknown when DocFX used a type we do not model."""
        if self.kind is not None:
            return self.kind.value
        return str(self.raw.get("type") or "Unknown")


@dataclass(frozen=True)
class ReferenceRecord:
    """An entry from a DocFX `references` list."""

    uid: str
    name: str = ""
    href: str | None = None


@dataclass(frozen=True)
class OutputFileInfo:
    """Where a UID is documented: a file, plus an anchor for combined members."""

    file_path: str
    anchor: str | None = None

    @property
    def target(self) -> str:
        """The file path with the anchor appended, if any."""
        if self.anchor:
            return f"{self.file_path}#{self.anchor}"
        return self.file_path


@dataclass
class LinkInfo:
    """A resolved link, as handed to the link template."""

    uid: str
    display_name: str
    relative_path: str  # anchor already appended
    is_external: bool = False

    def as_context(self) -> dict[str, Any]:
        """Template context; keys follow the camelCase names templates use."""
        return {
            "uid": self.uid,
            "displayName": self.display_name,
            "relativePath": self.relative_path,
            "isExternal": self.is_external,
        }
