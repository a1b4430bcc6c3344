"""Publish sinks that hand access-log lines off to a message broker."""

from __future__ import annotations

from logsim.sinks.base import PublishSink, SinkFactory
from logsim.sinks.kafka import KafkaSink, kafka_sink_factory
from logsim.sinks.memory import MemorySink, MemorySinkFactory, PublishedRecord

__all__ = [
    "KafkaSink",
    "MemorySink",
    "MemorySinkFactory",
    "PublishSink",
    "PublishedRecord",
    "SinkFactory",
    "kafka_sink_factory",
]
