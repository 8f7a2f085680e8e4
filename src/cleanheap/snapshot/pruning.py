"""Mark-and-compact removal of edge runs.

Pruning tombstones a run in place (``None`` in every slot) and fixes up the
counters; compaction sweeps the tombstones out afterwards. Edge positions
must not shift until the walker has visited every node.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cleanheap.snapshot.schema import SnapshotSchema
    from cleanheap.snapshot.walker import NodeRun


def prune_run(data: dict[str, Any], schema: SnapshotSchema, run: NodeRun) -> int:
    """Tombstone every edge owned by a node and adjust the edge counts.

    All of the node's edges are removed; partial pruning is not supported.
    Both ``snapshot.edge_count`` and the node's own ``edge_count`` field are
    decremented by the number of edge records removed.

    Args:
        data: Raw snapshot document (mutated in place).
        schema: Resolved field layout.
        run: The node and edge-run bounds yielded by the walker.

    Returns:
        Number of edge records removed.
    """
    edges: list[int | None] = data["edges"]
    edge_stride = schema.edge_stride
    if edge_stride == 0 or run.length == 0:
        return 0

    edges[run.edge_start : run.edge_end] = [None] * run.length

    removed = run.length // edge_stride
    header = data["snapshot"]
    header["edge_count"] = header.get("edge_count", 0) - removed

    edge_count_offset = schema.node_offsets["edge_count"]
    data["nodes"][run.node_start + edge_count_offset] -= removed
    return removed


def compact_edges(edges: list[int | None]) -> int:
    """Remove tombstones from ``edges`` in place, preserving order.

    Two-pointer sweep followed by a single truncation, so no second copy of
    the edge array is allocated. Only valid once the full node walk is done.

    Returns:
        Number of slots removed.
    """
    write = 0
    for value in edges:
        if value is not None:
            edges[write] = value
            write += 1
    removed = len(edges) - write
    del edges[write:]
    return removed
