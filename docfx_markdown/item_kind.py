"""DocFX item kinds and predicates over them."""

from enum import Enum


class ItemKind(Enum):
    """The `type` values DocFX writes for ManagedReference items."""

    CLASS = "Class"
    STRUCT = "Struct"
    NAMESPACE = "Namespace"
    DELEGATE = "Delegate"
    ENUM = "Enum"
    INTERFACE = "Interface"
    FIELD = "Field"
    PROPERTY = "Property"
    METHOD = "Method"
    OPERATOR = "Operator"
    EVENT = "Event"
    CONSTRUCTOR = "Constructor"

    @classmethod
    def parse(cls, value: "str | ItemKind | None") -> "ItemKind | None":
        """Map a raw DocFX type string onto a kind, case-insensitively."""
        if isinstance(value, ItemKind):
            return value
        if not value:
            return None
        return _BY_LOWER_NAME.get(str(value).strip().lower())


_BY_LOWER_NAME = {kind.value.lower(): kind for kind in ItemKind}

TYPE_KINDS = frozenset(
    {
        ItemKind.CLASS,
        ItemKind.STRUCT,
        ItemKind.INTERFACE,
        ItemKind.ENUM,
        ItemKind.DELEGATE,
    }
)

MEMBER_KINDS = frozenset(
    {
        ItemKind.FIELD,
        ItemKind.PROPERTY,
        ItemKind.METHOD,
        ItemKind.OPERATOR,
        ItemKind.EVENT,
        ItemKind.CONSTRUCTOR,
    }
)


def is_type_kind(kind: "str | ItemKind | None") -> bool:
    """Check if the kind represents a type (class, struct, etc.)."""
    return ItemKind.parse(kind) in TYPE_KINDS


def is_member_kind(kind: "str | ItemKind | None") -> bool:
    """Check if the kind represents a member (method, property, etc.)."""
    return ItemKind.parse(kind) in MEMBER_KINDS


def is_namespace_kind(kind: "str | ItemKind | None") -> bool:
    """Check if the kind represents a namespace."""
    return ItemKind.parse(kind) is ItemKind.NAMESPACE
