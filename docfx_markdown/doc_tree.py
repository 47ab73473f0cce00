"""Assembles flat metadata records into per-type documentation trees."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from docfx_markdown.item_kind import ItemKind
from docfx_markdown.models import MetadataRecord

logger = logging.getLogger(__name__)


@dataclass
class DocumentationNode:
    """A record plus its members, bucketed the way pages present them."""

    record: MetadataRecord
    constructors: list["DocumentationNode"] = field(default_factory=list)
    fields: list["DocumentationNode"] = field(default_factory=list)
    properties: list["DocumentationNode"] = field(default_factory=list)
    methods: list["DocumentationNode"] = field(default_factory=list)
    events: list["DocumentationNode"] = field(default_factory=list)

    @property
    def uid(self) -> str:
        return self.record.uid

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def full_name(self) -> str:
        return self.record.full_name

    @property
    def kind(self) -> ItemKind | None:
        return self.record.kind

    def add_child(self, child: "DocumentationNode") -> bool:
        """Put a child in the bucket for its kind; False if no bucket fits."""
        bucket = self._bucket_for(child.kind)
        if bucket is None:
            return False
        bucket.append(child)
        return True

    def _bucket_for(self, kind: ItemKind | None) -> list["DocumentationNode"] | None:
        if kind is ItemKind.CONSTRUCTOR:
            return self.constructors
        if kind is ItemKind.FIELD:
            return self.fields
        if kind is ItemKind.PROPERTY:
            return self.properties
        if kind in (ItemKind.METHOD, ItemKind.OPERATOR):
            return self.methods
        if kind is ItemKind.EVENT:
            return self.events
        return None

    def member_groups(self) -> list[tuple[str, list["DocumentationNode"]]]:
        """Non-empty buckets with their section titles, in page order."""
        groups = [
            ("Constructors", self.constructors),
            ("Fields", self.fields),
            ("Properties", self.properties),
            ("Methods", self.methods),
            ("Events", self.events),
        ]
        return [(title, nodes) for title, nodes in groups if nodes]

    def child_count(self) -> int:
        """Direct children across all buckets."""
        return sum(len(nodes) for _, nodes in self.member_groups())


def build_children_index(
    records: Iterable[MetadataRecord],
) -> dict[str, list[MetadataRecord]]:
    """Group records by parent UID, keeping source order within each group."""
    index: dict[str, list[MetadataRecord]] = {}
    for record in records:
        if record.parent:
            index.setdefault(record.parent, []).append(record)
    return index


def assemble_tree(
    record: MetadataRecord,
    children_index: dict[str, list[MetadataRecord]],
    _ancestors: frozenset[str] = frozenset(),
) -> DocumentationNode:
    """Build the node for `record` and, recursively, for everything under it.

    Children are attached in source order. A child that is already one of
    its own ancestors (malformed parent links) is skipped.
    """
    node = DocumentationNode(record=record)
    path = _ancestors | {record.uid}
    for child in children_index.get(record.uid, []):
        if child.uid in path:
            logger.warning(
                "Parent cycle at %s under %s; not descending", child.uid, record.uid
            )
            continue
        child_node = assemble_tree(child, children_index, path)
        if not node.add_child(child_node):
            logger.debug(
                "Skipping child item %s with type %s", child.uid, child.kind_label
            )
    return node
