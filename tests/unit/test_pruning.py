"""Tests for edge-run tombstoning and compaction."""

from __future__ import annotations

from cleanheap.snapshot.models import SnapshotMeta
from cleanheap.snapshot.pruning import compact_edges, prune_run
from cleanheap.snapshot.schema import SnapshotSchema
from cleanheap.snapshot.walker import NodeRun, walk_nodes
from tests.fixtures.snapshots import MINIMAL_META, build_snapshot, node_field


def _schema() -> SnapshotSchema:
    return SnapshotSchema.from_meta(SnapshotMeta.model_validate(MINIMAL_META))


class TestPruneRun:
    """Test prune_run."""

    def test_tombstones_run_and_updates_counts(self) -> None:
        """The whole run is nulled and both counters drop by the edge count."""
        document = build_snapshot(
            [("object", "WeakMap", 2), ("object", "Foo", 1)],
            meta=MINIMAL_META,
        )
        schema = _schema()
        first = next(walk_nodes(document["nodes"], schema))

        removed = prune_run(document, schema, first)

        assert removed == 2
        assert document["edges"][:6] == [None] * 6
        assert None not in document["edges"][6:]
        assert document["snapshot"]["edge_count"] == 1
        assert node_field(document, 0, "edge_count") == 0
        assert node_field(document, 1, "edge_count") == 1

    def test_run_boundaries_respected(self) -> None:
        """Neighbouring runs are untouched."""
        document = build_snapshot(
            [("object", "Foo", 1), ("object", "WeakSet", 1), ("object", "Bar", 1)],
            meta=MINIMAL_META,
        )
        schema = _schema()
        before = list(document["edges"])
        middle = list(walk_nodes(document["nodes"], schema))[1]

        prune_run(document, schema, middle)

        assert document["edges"][:3] == before[:3]
        assert document["edges"][3:6] == [None, None, None]
        assert document["edges"][6:] == before[6:]

    def test_empty_run_is_noop(self) -> None:
        """A node without edges changes nothing."""
        document = build_snapshot([("object", "WeakRef", 0)], meta=MINIMAL_META)

        removed = prune_run(document, _schema(), NodeRun(0, 0, 0, 0))

        assert removed == 0
        assert document["snapshot"]["edge_count"] == 0
        assert node_field(document, 0, "edge_count") == 0


class TestCompactEdges:
    """Test compact_edges."""

    def test_removes_tombstones_in_order(self) -> None:
        """Survivors keep their relative order."""
        edges = [1, None, None, 2, 0, None, 3]

        removed = compact_edges(edges)

        assert removed == 3
        assert edges == [1, 2, 0, 3]

    def test_zero_values_survive(self) -> None:
        """Zero is a legitimate edge value, not a tombstone."""
        edges = [0, 0, None, 0]

        compact_edges(edges)

        assert edges == [0, 0, 0]

    def test_no_tombstones(self) -> None:
        """A clean array is left alone."""
        edges = [4, 5, 6]

        assert compact_edges(edges) == 0
        assert edges == [4, 5, 6]

    def test_all_tombstones(self) -> None:
        """Compacting only tombstones leaves an empty list."""
        edges = [None, None, None]

        assert compact_edges(edges) == 3
        assert edges == []

    def test_in_place(self) -> None:
        """The same list object is compacted."""
        edges = [None, 7]
        original = edges

        compact_edges(edges)

        assert original is edges
        assert original == [7]
