"""Logging setup and the per-event message stream for logsim.

Two independent diagnostic streams exist: status/progress lines go through
the ``logsim`` logger namespace, while the raw access-log lines produced by
simulated users are written verbatim by :class:`MessageEcho`.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import UTC, datetime
from typing import TextIO


class _JsonFormatter(logging.Formatter):
    """Structured JSON log formatter.

    Emits one-line JSON objects with keys: timestamp, level, logger, thread,
    message.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON string.

        Args:
            record: The log record to format.

        Returns:
            A single-line JSON string.
        """
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def setup_logging(
    level: int = logging.INFO,
    *,
    json_format: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure and return the root logsim logger.

    Sets up a handler on the ``logsim`` logger namespace. Subsequent calls
    only update levels, handlers are never duplicated.

    Args:
        level: Logging level (e.g., ``logging.DEBUG``). Defaults to INFO.
        json_format: If True, emit structured JSON logs. If False, emit
            human-readable logs tagged with the emitting thread.
        stream: Stream for the handler. Defaults to ``sys.stdout``, keeping
            status lines apart from event lines on stderr.

    Returns:
        The configured ``logsim`` root logger.
    """
    logger = logging.getLogger("logsim")
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setLevel(level)

    if json_format:
        formatter: logging.Formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)-8s] %(threadName)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Prevent propagation to root logger to avoid duplicate output
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the ``logsim`` namespace.

    Args:
        name: Logger name, appended to ``logsim.`` prefix.
            Example: ``get_logger("engine.worker")`` returns
            ``logging.getLogger("logsim.engine.worker")``.

    Returns:
        A child logger.
    """
    return logging.getLogger(f"logsim.{name}")


class MessageEcho:
    """Thread-safe writer for raw access-log lines.

    Every simulated user shares one instance, so whole lines are written
    under a lock and never interleave mid-line.

    Attributes:
        stream: Destination text stream.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize the echo.

        Args:
            stream: Destination stream. Defaults to ``sys.stderr``, resolved
                at write time so test harnesses that swap it are honoured.
        """
        self.stream = stream
        self._lock = threading.Lock()

    def __call__(self, line: str) -> None:
        """Write one line followed by a newline and flush."""
        stream = self.stream if self.stream is not None else sys.stderr
        with self._lock:
            stream.write(line + "\n")
            stream.flush()
