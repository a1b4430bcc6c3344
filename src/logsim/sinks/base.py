"""Publish sink protocol shared by every broker adapter."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from logsim._internal.config import RunConfig


@runtime_checkable
class PublishSink(Protocol):
    """Destination for access-log lines.

    Each simulated user owns exactly one sink, acquired when it starts and
    closed when it drains. Implementations therefore need not be thread-safe.
    """

    def publish(self, topic: str, key: str, payload: bytes) -> None:
        """Hand one record off to the broker.

        Args:
            topic: Destination topic.
            key: Partition key, the simulated client address.
            payload: Encoded access-log line.

        Raises:
            PublishError: If the record could not be handed off.
        """
        ...

    def close(self) -> None:
        """Flush buffered sends and release resources. Idempotent."""
        ...


# Builds the sink a newly started simulated user will own.
SinkFactory = Callable[["RunConfig"], PublishSink]
