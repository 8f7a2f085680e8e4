"""Bounded-memory JSON serialization of a cleaned snapshot.

The document is written one top-level field at a time. After a field's text
has been flushed, both the text and the field's value are dropped before the
next field is serialized, so peak memory is bounded by the largest single
field rather than the whole document plus its serialized form.
"""

from __future__ import annotations

import gc
import json
import re
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from cleanheap.observability.logging import get_logger
from cleanheap.snapshot.errors import SnapshotWriteError

log = get_logger(__name__)

# Fields emitted first, in this order; everything else follows in original order
LEADING_FIELDS = ("snapshot", "nodes", "edges", "strings")

# Unpaired UTF-16 surrogates survive json decoding but cannot be written as UTF-8
_SURROGATE = re.compile("[\ud800-\udfff]")


def field_order(data: dict[str, Any]) -> list[str]:
    """Return the top-level keys in output order."""
    leading = [key for key in LEADING_FIELDS if key in data]
    return leading + [key for key in data if key not in LEADING_FIELDS]


def _escape_surrogate(match: re.Match[str]) -> str:
    return f"\\u{ord(match.group()):04x}"


def _encode(value: Any) -> str:
    text = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return _SURROGATE.sub(_escape_surrogate, text)


def write_snapshot(data: dict[str, Any], path: Path, *, collect: bool = True) -> Path:
    """Write a snapshot document, consuming it field by field.

    Each field is popped from ``data`` once written, so ``data`` is empty
    when this returns. A failure mid-write leaves a truncated file behind.

    Args:
        data: Snapshot document (consumed).
        path: Destination file; overwritten if it exists.
        collect: Force a garbage collection after releasing each field.

    Returns:
        The destination path.

    Raises:
        SnapshotWriteError: If any write fails. Remaining fields are skipped.
    """
    keys = field_order(data)
    current = "{"
    try:
        with path.open("w", encoding="utf-8") as f:
            f.write("{")
            for position, key in enumerate(keys):
                current = key
                prefix = "," if position else ""
                f.write(f"{prefix}{_encode(key)}:")

                text = _encode(data.pop(key))
                f.write(text)
                size = len(text)
                del text
                if collect:
                    gc.collect()
                log.debug("field_written", field=key, chars=size)
            current = "}"
            f.write("}")
    except OSError as e:
        raise SnapshotWriteError(path, current, str(e)) from e

    log.info("snapshot_written", path=str(path), fields=len(keys))
    return path
