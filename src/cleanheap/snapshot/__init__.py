"""Heap snapshot decoding, weak-retainer pruning and bounded output.

The pipeline is strictly sequential: load, clean (walk, prune, compact),
then write field by field.
"""

from cleanheap.snapshot.classifier import (
    WEAK_RETAINER_NAMES,
    RetainerClassifier,
    constructor_name,
)
from cleanheap.snapshot.errors import (
    SnapshotError,
    SnapshotFormatError,
    SnapshotHeaderError,
    SnapshotNotFoundError,
    SnapshotWriteError,
)
from cleanheap.snapshot.models import SnapshotHeader, SnapshotMeta
from cleanheap.snapshot.pruning import compact_edges, prune_run
from cleanheap.snapshot.reader import load_snapshot
from cleanheap.snapshot.schema import SnapshotSchema, field_offsets
from cleanheap.snapshot.snapshot import CleanReport, HeapSnapshot
from cleanheap.snapshot.walker import NodeRun, iter_slices, walk_nodes
from cleanheap.snapshot.writer import write_snapshot

__all__ = [
    "WEAK_RETAINER_NAMES",
    "CleanReport",
    "HeapSnapshot",
    "NodeRun",
    "RetainerClassifier",
    "SnapshotError",
    "SnapshotFormatError",
    "SnapshotHeader",
    "SnapshotHeaderError",
    "SnapshotMeta",
    "SnapshotNotFoundError",
    "SnapshotSchema",
    "SnapshotWriteError",
    "compact_edges",
    "constructor_name",
    "field_offsets",
    "iter_slices",
    "load_snapshot",
    "prune_run",
    "walk_nodes",
    "write_snapshot",
]
