"""Heap snapshot loading."""

from __future__ import annotations

import json
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from cleanheap.observability.logging import get_logger
from cleanheap.snapshot.errors import SnapshotFormatError, SnapshotNotFoundError

log = get_logger(__name__)

REQUIRED_ARRAYS = ("nodes", "edges", "strings")


def load_snapshot(path: Path) -> dict[str, Any]:
    """Read and structurally check a heap snapshot file.

    Only the top-level shape is checked here: a ``snapshot`` object and the
    three flat arrays. Header fields are validated by HeapSnapshot.

    Args:
        path: Path to a ``.heapsnapshot`` JSON file.

    Returns:
        The decoded document, top-level key order preserved.

    Raises:
        SnapshotNotFoundError: If the path is not an existing file.
        SnapshotFormatError: If the file cannot be read or is not a heap
            snapshot document.
    """
    if not path.is_file():
        raise SnapshotNotFoundError(path)

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SnapshotFormatError(path, f"invalid JSON ({e})") from e
    except UnicodeDecodeError as e:
        raise SnapshotFormatError(path, f"not UTF-8 text ({e.reason})") from e
    except OSError as e:
        raise SnapshotFormatError(path, f"unreadable ({e.strerror or e})") from e

    if not isinstance(data, dict):
        raise SnapshotFormatError(path, "top-level value is not an object")
    if not isinstance(data.get("snapshot"), dict):
        raise SnapshotFormatError(path, "missing 'snapshot' header object")
    for key in REQUIRED_ARRAYS:
        if not isinstance(data.get(key), list):
            raise SnapshotFormatError(path, f"missing '{key}' array")

    log.info(
        "snapshot_loaded",
        path=str(path),
        nodes=len(data["nodes"]),
        edges=len(data["edges"]),
        strings=len(data["strings"]),
    )
    return data
