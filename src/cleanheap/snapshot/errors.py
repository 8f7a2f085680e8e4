"""Snapshot I/O error types.

Reading and validation errors are fatal to a run and are raised before the
snapshot is mutated. Write errors abort the remaining output fields and leave
whatever was already flushed on disk.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path  # noqa: TC003 - used at runtime


class SnapshotError(Exception):
    """Base class for heap snapshot errors."""


@dataclass
class SnapshotNotFoundError(SnapshotError):
    """Raised when the input path does not resolve to a readable file.

    Attributes:
        path: The path that was requested.
    """

    path: Path

    def __post_init__(self) -> None:
        super().__init__(f"The file {self.path} does not exist")


@dataclass
class SnapshotFormatError(SnapshotError):
    """Raised when the input is not a heap snapshot document.

    Attributes:
        path: The file being read.
        reason: What was wrong with its content.
    """

    path: Path
    reason: str

    def __post_init__(self) -> None:
        super().__init__(f"Invalid heap snapshot {self.path}: {self.reason}")


@dataclass
class SnapshotWriteError(SnapshotError):
    """Raised when writing a top-level field of the output fails.

    The output file is left truncated; no cleanup is attempted.

    Attributes:
        path: Destination file.
        field: Top-level key being written when the failure happened.
        reason: Underlying error message.
    """

    path: Path
    field: str
    reason: str

    def __post_init__(self) -> None:
        super().__init__(f"Failed to write '{self.field}' to {self.path}: {self.reason}")


class SnapshotHeaderError(SnapshotError, ValueError):
    """Raised when the ``snapshot`` header object fails validation."""
