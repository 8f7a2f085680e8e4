"""Logging setup shared by the cleaner and the CLI.

Events are emitted through structlog and routed to the stdlib root logger.
The root logger feeds a rich console on stderr, filtered by ``-v``, and
optionally a JSONL file (``--log-file``) that records every event at DEBUG.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - Used at runtime for path operations
from typing import TYPE_CHECKING, Any

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from structlog.typing import Processor

_configured = False
_file_handler: logging.FileHandler | None = None
_log_file: Path | None = None

CONSOLE_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def _event_fields(record: logging.LogRecord) -> dict[str, Any]:
    # structlog hands its event dict over as record.msg
    if not isinstance(record.msg, dict):
        return {"message": record.getMessage()}
    fields = {k: v for k, v in record.msg.items() if k not in ("level", "timestamp")}
    fields["message"] = fields.pop("event", "")
    return fields


class JSONLFileHandler(logging.FileHandler):
    """Append one JSON object per log record."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry: dict[str, Any] = {
                "timestamp": datetime.now(UTC).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                **_event_fields(record),
            }
            if self.stream:
                self.stream.write(json.dumps(entry, default=str) + "\n")
                self.stream.flush()
        except Exception:
            self.handleError(record)


def _console_handler(verbosity: int) -> RichHandler:
    return RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity >= 2,
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        markup=True,
        level=CONSOLE_LEVELS.get(verbosity, logging.DEBUG),
    )


def configure_logging(
    verbosity: int = 0,
    log_file: Path | None = None,
) -> None:
    """Route cleanheap's events to the console and, optionally, a JSONL file.

    Safe to call repeatedly; each call replaces the previous handlers.

    Args:
        verbosity: Console level. 0=WARNING (default), 1=INFO, 2+=DEBUG.
        log_file: If set, every event is also appended to this file.
    """
    global _configured, _file_handler, _log_file

    close_file_logging()

    handlers: list[logging.Handler] = [_console_handler(verbosity)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _file_handler = JSONLFileHandler(str(log_file), mode="a")
        _file_handler.setLevel(logging.DEBUG)
        handlers.append(_file_handler)
        _log_file = log_file

    # The file records everything, so the root only narrows when it is absent
    root_level = logging.DEBUG if (verbosity > 0 or log_file is not None) else logging.WARNING
    logging.basicConfig(
        level=root_level,
        format="%(message)s",
        handlers=handlers,
        force=True,
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        cache_logger_on_first_use=False,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Return a structlog logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()

    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger


def get_log_file() -> Path | None:
    """The active JSONL log file, or None if file logging is off."""
    return _log_file


def close_file_logging() -> None:
    """Close the JSONL handler, if any."""
    global _file_handler, _log_file
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None
        _log_file = None
