"""Structured logging for pixsync.

Console output goes through rich on stderr, at a level picked by ``-v``.
With a log directory, every event (DEBUG and up) is also appended to
``{log_dir}/debug.jsonl``, one JSON object per line.

Events logged while a lifecycle hook runs carry the hook name and project
id (see ``hook_context``), so store and reaper events, which only know
about files, can be traced back to the save or delete that caused them.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from structlog.typing import EventDict, Processor, WrappedLogger

DEBUG_LOG_NAME = "debug.jsonl"

_CONSOLE_LEVELS = {0: logging.WARNING, 1: logging.INFO}
# Added by shared processors; rich and the JSONL handler render their own.
_RECORD_KEYS = ("level", "timestamp")

_configured = False
_file_handler: JSONLFileHandler | None = None


class JSONLFileHandler(logging.FileHandler):
    """Appends one JSON object per log record to ``{log_dir}/debug.jsonl``.

    structlog hands its event dict over through ``record.msg``; its keys
    become top-level fields next to timestamp, level and logger. Records
    from plain stdlib loggers get their formatted message as ``event``.
    """

    def __init__(self, log_dir: Path) -> None:
        log_dir.mkdir(parents=True, exist_ok=True)
        super().__init__(log_dir / DEBUG_LOG_NAME, mode="a", encoding="utf-8")
        self.setLevel(logging.DEBUG)

    @staticmethod
    def to_entry(record: logging.LogRecord) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        if isinstance(record.msg, dict):
            context = {k: v for k, v in record.msg.items() if k not in _RECORD_KEYS}
            entry["event"] = context.pop("event", "")
            entry.update(context)
        else:
            entry["event"] = record.getMessage()
        return entry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.stream.write(json.dumps(self.to_entry(record), default=str) + "\n")
            self.flush()
        except Exception:
            self.handleError(record)


def _drop_record_keys(_logger: WrappedLogger, _name: str, event_dict: EventDict) -> EventDict:
    for key in _RECORD_KEYS:
        event_dict.pop(key, None)
    return event_dict


def _console_handler(verbosity: int) -> RichHandler:
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity >= 2,
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        markup=False,
        level=_CONSOLE_LEVELS.get(verbosity, logging.DEBUG),
    )
    # event='asset_stored' category='layers' filename='layer-5-pixmagix-1.png'
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _drop_record_keys,
                structlog.processors.KeyValueRenderer(key_order=["event"], drop_missing=True),
            ],
        )
    )
    return handler


def configure_logging(verbosity: int = 0, log_dir: Path | None = None) -> None:
    """Configure logging for pixsync.

    Args:
        verbosity: Console level; 0=WARNING, 1=INFO, 2+=DEBUG.
        log_dir: If given, also write every event to ``{log_dir}/debug.jsonl``.
    """
    global _configured, _file_handler

    close_file_logging()

    handlers: list[logging.Handler] = [_console_handler(verbosity)]
    if log_dir is not None:
        _file_handler = JSONLFileHandler(log_dir)
        handlers.append(_file_handler)

    # The root level is the floor for every handler; each handler filters further.
    root_level = logging.DEBUG if (verbosity > 0 or log_dir is not None) else logging.WARNING
    logging.basicConfig(level=root_level, handlers=handlers, force=True)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a structured logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()

    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger


@contextmanager
def hook_context(hook: str, project_id: int) -> Iterator[None]:
    """Bind ``hook`` and ``project_id`` to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(hook=hook, project_id=project_id):
        yield


def close_file_logging() -> None:
    """Close the JSONL file handler, if any."""
    global _file_handler
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None
