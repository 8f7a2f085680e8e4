"""Heap snapshot wrapper and the weak-retainer cleaning pass.

A HeapSnapshot owns the raw decoded document and mutates it in place:

1. Walk every node record, tracking each node's edge run.
2. For object nodes whose constructor is a weak retainer, tombstone the run
   and decrement the header and node edge counts.
3. Compact the edge array once the walk is complete.

The document is then handed to the bounded writer, which consumes it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from cleanheap.observability.logging import get_logger
from cleanheap.snapshot.classifier import RetainerClassifier
from cleanheap.snapshot.errors import SnapshotHeaderError
from cleanheap.snapshot.models import SnapshotHeader
from cleanheap.snapshot.pruning import compact_edges, prune_run
from cleanheap.snapshot.schema import SnapshotSchema
from cleanheap.snapshot.walker import walk_nodes

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from cleanheap.snapshot.walker import NodeRun

log = get_logger(__name__)


@dataclass
class CleanReport:
    """Outcome of a cleaning pass.

    Attributes:
        nodes_traversed: Node records visited.
        weak_retainers: Nodes whose edges were removed.
        edges_removed: Edge records removed.
        retainers_by_name: Removed-node count per constructor name.
    """

    nodes_traversed: int = 0
    weak_retainers: int = 0
    edges_removed: int = 0
    retainers_by_name: dict[str, int] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        """True if any weak retainer was found."""
        return self.weak_retainers > 0

    def __bool__(self) -> bool:
        return self.changed


class HeapSnapshot:
    """A decoded heap snapshot with its resolved field layout.

    Attributes:
        data: The raw document, mutated in place by clean().
        header: Validated copy of the ``snapshot`` header at load time.
        schema: Field offsets and type enums.
        classifier: Weak-retainer membership test.
    """

    def __init__(
        self,
        data: dict[str, Any],
        *,
        weak_retainer_names: Iterable[str] | None = None,
    ) -> None:
        """Wrap a decoded snapshot document.

        Args:
            data: Document with ``snapshot``, ``nodes``, ``edges``, ``strings``.
            weak_retainer_names: Override for the default weak-retainer set.

        Raises:
            SnapshotHeaderError: If the header has the wrong shape.
        """
        try:
            self.header = SnapshotHeader.model_validate(data["snapshot"])
        except ValidationError as e:
            raise SnapshotHeaderError(f"invalid snapshot header: {e}") from e

        self.data = data
        self.schema = SnapshotSchema.from_meta(self.header.meta)
        self.classifier = RetainerClassifier(weak_retainer_names)

    def __repr__(self) -> str:
        return (
            f"HeapSnapshot(nodes={self.node_count}, "
            f"edges={self.data['snapshot'].get('edge_count', 0)})"
        )

    @property
    def node_count(self) -> int:
        """Number of complete node records in the flat array."""
        stride = self.schema.node_stride
        return len(self.data["nodes"]) // stride if stride else 0

    def _missing_fields(self) -> list[str]:
        missing = [
            name for name in ("type", "name", "edge_count") if self.schema.node_offset(name) is None
        ]
        if self.schema.edge_stride == 0:
            missing.append("edge_fields")
        return missing

    def iter_weak_retainers(self) -> Iterator[tuple[str, NodeRun]]:
        """Yield ``(constructor_name, run)`` for each weak retainer that owns edges.

        Retainers whose run is already empty are skipped, so a cleaned
        snapshot yields nothing. The generator itself does not modify the
        document; callers may prune each run as it is yielded.
        """
        nodes = self.data["nodes"]
        strings = self.data["strings"]
        for run in walk_nodes(nodes, self.schema):
            if run.length == 0:
                continue
            name = self.classifier.classify(nodes, strings, self.schema, run.node_start)
            if name is not None:
                yield name, run

    def count_weak_retainers(self) -> CleanReport:
        """Classify every node without modifying anything."""
        report = CleanReport(nodes_traversed=self.node_count)
        if self._missing_fields():
            return report
        for name, run in self.iter_weak_retainers():
            report.weak_retainers += 1
            report.edges_removed += run.length // self.schema.edge_stride
            report.retainers_by_name[name] = report.retainers_by_name.get(name, 0) + 1
        return report

    def clean(self) -> CleanReport:
        """Remove every outgoing edge of weak-retainer nodes.

        Runs the full mark pass before compacting, so edge positions stay
        valid for the walker throughout. Metadata that lacks the fields
        needed to classify nodes makes this a no-op.

        Returns:
            CleanReport; truthy if anything was removed.
        """
        missing = self._missing_fields()
        if missing:
            log.warning("schema_incomplete", missing=missing)
            return CleanReport(nodes_traversed=self.node_count)

        report = CleanReport(nodes_traversed=self.node_count)
        for name, run in self.iter_weak_retainers():
            removed = prune_run(self.data, self.schema, run)
            report.weak_retainers += 1
            report.edges_removed += removed
            report.retainers_by_name[name] = report.retainers_by_name.get(name, 0) + 1
            log.debug("weak_retainer_pruned", node=run.index, name=name, edges=removed)

        if report.changed:
            compact_edges(self.data["edges"])
            log.info(
                "snapshot_cleaned",
                removed=report.weak_retainers,
                traversed=report.nodes_traversed,
                edges_removed=report.edges_removed,
            )
        else:
            log.info("snapshot_already_clean", traversed=report.nodes_traversed)
        return report

    def check_edge_counts(self) -> list[str]:
        """Check that the edge counters agree with each other.

        Compares the header's ``edge_count``, the sum of every node's own
        ``edge_count`` field, and the number of edge records in ``edges``.

        Returns:
            Human-readable violations; empty if consistent.
        """
        offset = self.schema.node_offset("edge_count")
        stride = self.schema.node_stride
        edge_stride = self.schema.edge_stride
        if offset is None or stride == 0 or edge_stride == 0:
            return ["schema lacks edge_count node field or edge fields"]

        nodes = self.data["nodes"]
        node_total = sum(nodes[offset : stride * self.node_count : stride])
        declared = self.data["snapshot"].get("edge_count", 0)
        edges_len = len(self.data["edges"])

        violations = []
        if edges_len % edge_stride:
            violations.append(f"edges length {edges_len} is not a multiple of {edge_stride}")
        if declared != node_total:
            violations.append(f"header edge_count {declared} != sum of node edge counts {node_total}")
        if edges_len // edge_stride != node_total:
            violations.append(
                f"edges array holds {edges_len // edge_stride} records, nodes declare {node_total}"
            )
        return violations
