"""Tests for the sequential node walker."""

from __future__ import annotations

import pytest

from cleanheap.snapshot.models import SnapshotMeta
from cleanheap.snapshot.schema import SnapshotSchema
from cleanheap.snapshot.walker import NodeRun, iter_slices, walk_nodes
from tests.fixtures.snapshots import MINIMAL_META, V8_META, build_snapshot


def _schema(meta: dict) -> SnapshotSchema:
    return SnapshotSchema.from_meta(SnapshotMeta.model_validate(meta))


class TestIterSlices:
    """Test iter_slices."""

    def test_fixed_size_chunks(self) -> None:
        """Bounds cover the range in equal steps."""
        assert list(iter_slices(0, 9, 3)) == [(0, 3), (3, 6), (6, 9)]

    def test_offset_start(self) -> None:
        """Iteration can begin mid-array."""
        assert list(iter_slices(6, 12, 3)) == [(6, 9), (9, 12)]

    def test_trailing_partial_chunk_skipped(self) -> None:
        """A chunk shorter than size is not yielded."""
        assert list(iter_slices(0, 8, 3)) == [(0, 3), (3, 6)]

    def test_empty_range(self) -> None:
        """Empty range yields nothing."""
        assert list(iter_slices(4, 4, 2)) == []

    @pytest.mark.parametrize("size", [0, -3])
    def test_non_positive_size_rejected(self, size: int) -> None:
        """Slice size must be positive."""
        with pytest.raises(ValueError, match="positive"):
            list(iter_slices(0, 10, size))


class TestWalkNodes:
    """Test walk_nodes cursor bookkeeping."""

    def test_runs_accumulate_edge_counts(self) -> None:
        """Each run starts where the previous one ended."""
        document = build_snapshot(
            [("object", "A", 2), ("object", "B", 0), ("object", "C", 3)],
            meta=MINIMAL_META,
        )
        runs = list(walk_nodes(document["nodes"], _schema(MINIMAL_META)))

        assert runs == [
            NodeRun(index=0, node_start=0, edge_start=0, edge_end=6),
            NodeRun(index=1, node_start=3, edge_start=6, edge_end=6),
            NodeRun(index=2, node_start=6, edge_start=6, edge_end=15),
        ]
        assert runs[-1].edge_end == len(document["edges"])

    def test_edge_count_read_through_schema(self) -> None:
        """The node edge count comes from the edge_count field offset."""
        document = build_snapshot([("object", "A", 1), ("object", "B", 2)])
        runs = list(walk_nodes(document["nodes"], _schema(V8_META)))

        assert [run.node_start for run in runs] == [0, 7]
        assert [run.length for run in runs] == [3, 6]

    def test_cursor_uses_counts_read_before_yield(self) -> None:
        """Zeroing a node's edge_count mid-walk does not shift later runs."""
        document = build_snapshot(
            [("object", "A", 2), ("object", "B", 1)],
            meta=MINIMAL_META,
        )
        nodes = document["nodes"]
        runs = []
        for run in walk_nodes(nodes, _schema(MINIMAL_META)):
            runs.append(run)
            nodes[run.node_start + 2] = 0

        assert runs[1].edge_start == 6

    def test_missing_edge_count_field_yields_nothing(self) -> None:
        """Without edge_count, runs cannot be located."""
        meta = {"node_fields": ["type", "name"], "edge_fields": ["to_node"]}

        assert list(walk_nodes([3, 0, 3, 1], _schema(meta))) == []

    def test_empty_nodes(self) -> None:
        """No nodes yield no runs."""
        assert list(walk_nodes([], _schema(V8_META))) == []
