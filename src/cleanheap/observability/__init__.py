"""Observability module for cleanheap.

Provides structured logging for the CLI and the snapshot pipeline.
"""

from cleanheap.observability.logging import (
    close_file_logging,
    configure_logging,
    get_log_file,
    get_logger,
)

__all__ = [
    "close_file_logging",
    "configure_logging",
    "get_log_file",
    "get_logger",
]
