"""Weak-retainer classification of node records."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from cleanheap.snapshot.schema import SnapshotSchema

WEAK_RETAINER_NAMES: frozenset[str] = frozenset(
    {
        "WeakMap",
        "WeakSet",
        "WeakRef",
        "DebugWeakCache",
        "DebugWeakMap",
    }
)


def constructor_name(
    nodes: Sequence[int],
    strings: Sequence[str],
    schema: SnapshotSchema,
    node_start: int,
) -> str | None:
    """Return the constructor name of an ``object`` node.

    For object nodes the ``name`` field holds the constructor name. Any other
    node type (native, hidden, closure, ...) has no constructor semantics and
    yields None, as do unresolved fields and out-of-range indices.
    """
    type_offset = schema.node_offset("type")
    name_offset = schema.node_offset("name")
    if type_offset is None or name_offset is None:
        return None

    if schema.node_type_name(nodes[node_start + type_offset]) != "object":
        return None

    string_index = nodes[node_start + name_offset]
    if 0 <= string_index < len(strings):
        return strings[string_index]
    return None


class RetainerClassifier:
    """Membership test against a closed set of weak-retainer names.

    Args:
        names: Constructor names to treat as weak retainers.
            Defaults to WEAK_RETAINER_NAMES.
    """

    def __init__(self, names: Iterable[str] | None = None) -> None:
        self.names = frozenset(WEAK_RETAINER_NAMES if names is None else names)

    def __repr__(self) -> str:
        return f"RetainerClassifier(names={sorted(self.names)})"

    def is_weak_retainer(self, name: str | None) -> bool:
        return name is not None and name in self.names

    def classify(
        self,
        nodes: Sequence[int],
        strings: Sequence[str],
        schema: SnapshotSchema,
        node_start: int,
    ) -> str | None:
        """Return the node's constructor name if it is a weak retainer, else None."""
        name = constructor_name(nodes, strings, schema, node_start)
        return name if self.is_weak_retainer(name) else None
