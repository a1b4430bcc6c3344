"""Access-log event generation and partition routing."""

from __future__ import annotations

from logsim.events.generator import LogEvent, format_event, next_event, next_status, next_url
from logsim.events.partitioner import client_partitioner, partition_for

__all__ = [
    "LogEvent",
    "client_partitioner",
    "format_event",
    "next_event",
    "next_status",
    "next_url",
    "partition_for",
]
