"""Field-offset schema for the flat node and edge arrays.

A heap snapshot describes its own record layout in ``snapshot.meta``: the
position of a name in ``node_fields`` is the offset of that field inside every
node record, and likewise for edges. The ``type`` field's value is an index
into the enum found at the same position in ``node_types``/``edge_types``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from cleanheap.snapshot.models import SnapshotMeta


def field_offsets(fields: Sequence[str]) -> dict[str, int]:
    """Map each field name to its position in the record."""
    return {name: offset for offset, name in enumerate(fields)}


def _type_enum(types: Sequence[str | list[str]], offsets: Mapping[str, int]) -> tuple[str, ...]:
    offset = offsets.get("type")
    if offset is None or offset >= len(types):
        return ()
    entry = types[offset]
    # Plain string entries ("number", "string") describe scalar fields, not enums
    if isinstance(entry, str):
        return ()
    return tuple(entry)


@dataclass(frozen=True)
class SnapshotSchema:
    """Immutable field layout resolved once per snapshot.

    Attributes:
        node_offsets: Node field name to offset within a node record.
        edge_offsets: Edge field name to offset within an edge record.
        node_type_enum: Names indexed by a node's ``type`` field value.
        edge_type_enum: Names indexed by an edge's ``type`` field value.
        node_stride: Number of integers per node record.
        edge_stride: Number of integers per edge record.
    """

    node_offsets: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    edge_offsets: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    node_type_enum: tuple[str, ...] = ()
    edge_type_enum: tuple[str, ...] = ()
    node_stride: int = 0
    edge_stride: int = 0

    @classmethod
    def from_meta(cls, meta: SnapshotMeta) -> SnapshotSchema:
        """Resolve offsets and type enums from snapshot metadata."""
        node_offsets = field_offsets(meta.node_fields)
        edge_offsets = field_offsets(meta.edge_fields)
        return cls(
            node_offsets=MappingProxyType(node_offsets),
            edge_offsets=MappingProxyType(edge_offsets),
            node_type_enum=_type_enum(meta.node_types, node_offsets),
            edge_type_enum=_type_enum(meta.edge_types, edge_offsets),
            node_stride=len(meta.node_fields),
            edge_stride=len(meta.edge_fields),
        )

    def node_offset(self, name: str) -> int | None:
        """Offset of a node field, or None if the layout lacks it."""
        return self.node_offsets.get(name)

    def edge_offset(self, name: str) -> int | None:
        """Offset of an edge field, or None if the layout lacks it."""
        return self.edge_offsets.get(name)

    def node_type_name(self, value: int) -> str | None:
        """Decode a node ``type`` field value, or None if out of range."""
        if 0 <= value < len(self.node_type_enum):
            return self.node_type_enum[value]
        return None
