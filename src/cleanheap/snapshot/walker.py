"""Sequential traversal of the flat node array.

Edge runs are not indexed: a node's edges start where the previous node's
edges end. The only way to find node *i*'s run is to walk nodes ``0..i-1`` and
accumulate their edge counts, so every consumer goes through ``walk_nodes``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from cleanheap.snapshot.schema import SnapshotSchema


class NodeRun(NamedTuple):
    """A node record paired with the bounds of its edge run.

    Attributes:
        index: Ordinal of the node (0-based).
        node_start: Offset of the node record in ``nodes``.
        edge_start: First position of the node's run in ``edges``.
        edge_end: One past the last position of the run.
    """

    index: int
    node_start: int
    edge_start: int
    edge_end: int

    @property
    def length(self) -> int:
        return self.edge_end - self.edge_start


def iter_slices(start: int, end: int, size: int) -> Iterator[tuple[int, int]]:
    """Yield ``(slice_start, slice_end)`` bounds over ``[start, end)``.

    Iterates a large array in fixed-size chunks without allocating a
    sub-list per chunk. A trailing chunk shorter than ``size`` is skipped.

    Raises:
        ValueError: If ``size`` is not positive.
    """
    if size <= 0:
        raise ValueError(f"slice size must be positive, got {size}")
    for offset in range(start, end - size + 1, size):
        yield offset, offset + size


def walk_nodes(nodes: Sequence[int], schema: SnapshotSchema) -> Iterator[NodeRun]:
    """Walk node records in order, tracking each node's edge run.

    The cursor advances by ``own_edge_count * edge_stride`` for every node,
    regardless of what the caller does with the yielded run. Callers may
    modify the node's ``edge_count`` field after receiving a run; the count
    is read before yielding.

    Yields nothing when the schema has no ``edge_count`` node field, since
    edge runs cannot be located without it.
    """
    edge_count_offset = schema.node_offset("edge_count")
    if edge_count_offset is None or schema.node_stride == 0:
        return

    edge_stride = schema.edge_stride
    cursor = 0
    for index, (node_start, _) in enumerate(iter_slices(0, len(nodes), schema.node_stride)):
        own_edges = nodes[node_start + edge_count_offset]
        edge_end = cursor + own_edges * edge_stride
        yield NodeRun(index, node_start, cursor, edge_end)
        cursor = edge_end
