"""In-process sinks that record published lines instead of sending them."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from logsim._internal.errors import PublishError

if TYPE_CHECKING:
    from logsim._internal.config import RunConfig


@dataclass(frozen=True)
class PublishedRecord:
    """A record accepted by a MemorySink.

    Attributes:
        topic: Destination topic.
        key: Partition key.
        payload: Encoded access-log line.
    """

    topic: str
    key: str
    payload: bytes


class MemorySink:
    """Keeps every published record of one simulated user in a list."""

    def __init__(self) -> None:
        self.records: list[PublishedRecord] = []
        self.close_count = 0

    @property
    def closed(self) -> bool:
        """Return True once close() has been called."""
        return self.close_count > 0

    def publish(self, topic: str, key: str, payload: bytes) -> None:
        """Record one publish.

        Raises:
            PublishError: If the sink was already closed.
        """
        if self.closed:
            msg = "publish on a closed sink"
            raise PublishError(msg)
        self.records.append(PublishedRecord(topic=topic, key=key, payload=payload))

    def close(self) -> None:
        """Mark the sink closed. Safe to call repeatedly."""
        self.close_count += 1


class MemorySinkFactory:
    """Hands every simulated user a fresh MemorySink and remembers it.

    Backs ``logsim run --dry-run`` and the engine tests.
    """

    def __init__(self) -> None:
        self.sinks: list[MemorySink] = []
        self._lock = threading.Lock()

    def __call__(self, config: RunConfig) -> MemorySink:
        sink = MemorySink()
        with self._lock:
            self.sinks.append(sink)
        return sink

    @property
    def records(self) -> list[PublishedRecord]:
        """Return every record published through any sink built so far."""
        with self._lock:
            return [record for sink in self.sinks for record in sink.records]

    def lines(self) -> list[str]:
        """Return all decoded payloads, grouped per sink."""
        return [record.payload.decode("utf-8") for record in self.records]
