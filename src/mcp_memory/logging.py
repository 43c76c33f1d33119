"""
Structured logging for the Memory MCP Server.

Every module logs through a child of the ``mcp_memory`` logger. Output goes to
stderr by default because stdout carries the JSON-RPC responses of the stdio
transport.

Three output shapes are available:
- JSON lines (default), one object per record, tagged with the service name
- Plain text, for a human reading a terminal
- Debug mode: plain text at DEBUG level with the source location of each call
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import IO, TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp_memory.config import LoggingConfig

ROOT_LOGGER_NAME = "mcp_memory"

PLAIN_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(filename)s:%(lineno)d]: %(message)s"

# Attributes of a bare LogRecord; anything else on a record came from `extra`
_RESERVED_RECORD_KEYS = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "taskName",
}


class JSONFormatter(logging.Formatter):
    """
    Render each record as one JSON object.

    Fields, in order: timestamp (UTC, from the record's creation time), level,
    logger, message, service (when configured), every ``extra`` field that is
    not None, and exception (when the record carries one). Values that are not
    JSON-native are rendered with ``str``.
    """

    def __init__(self, service: str | None = None) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.service is not None:
            entry["service"] = self.service

        entry.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RESERVED_RECORD_KEYS and value is not None
        )

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _resolve_level(name: str) -> int:
    """Map a level name (any case, 'warn' included) to its number; unknown names mean INFO."""
    name = name.upper()
    if name == "WARN":
        name = "WARNING"
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def _build_formatter(
    *, json_format: bool, debug_mode: bool, service: str | None
) -> logging.Formatter:
    if debug_mode:
        return logging.Formatter(DEBUG_LOG_FORMAT)
    if json_format:
        return JSONFormatter(service=service)
    return logging.Formatter(PLAIN_LOG_FORMAT)


def setup_logging(
    config: LoggingConfig | None = None,
    *,
    level: str = "INFO",
    json_format: bool = True,
    log_to_stderr: bool = True,
    debug_mode: bool = False,
    service: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """
    Configure the ``mcp_memory`` logger.

    Calling it again replaces the previous handler. The logger does not
    propagate to the root logger.

    Args:
        config: LoggingConfig whose fields take the place of level,
            json_format, log_to_stderr and debug_mode.
        level: Log level name when no config is given.
        json_format: Emit JSON lines (ignored in debug mode).
        log_to_stderr: Attach a stream handler; when False, records are
            discarded through a NullHandler.
        debug_mode: Force DEBUG level and the plain-text debug format.
        service: Service name added to every JSON line.
        stream: Stream to write to instead of stderr.

    Returns:
        The configured package logger.

    Example:
        >>> logger = setup_logging(level="DEBUG", service="memory-mcp")
        >>> logger.info("Server started", extra={"methods_count": 6})
    """
    if config is not None:
        level = config.level
        json_format = config.json_format
        log_to_stderr = config.log_to_stderr
        debug_mode = config.debug_mode

    log_level = logging.DEBUG if debug_mode else _resolve_level(level)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)
    logger.handlers.clear()
    logger.propagate = False

    if not log_to_stderr:
        logger.addHandler(logging.NullHandler())
        return logger

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(
        _build_formatter(json_format=json_format, debug_mode=debug_mode, service=service)
    )
    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Return the logger for a module, placed under the ``mcp_memory`` logger.

    ``get_logger(__name__)`` inside the package returns the module's own
    logger; any other name is prefixed with ``mcp_memory.``.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
