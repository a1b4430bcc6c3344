"""logsim: simulate users browsing a site and stream their access logs to Kafka."""

from __future__ import annotations

from logsim._internal.config import RunConfig, load_config
from logsim._internal.errors import ConfigError, LogSimError, PublishError
from logsim.engine.coordinator import Coordinator
from logsim.engine.runner import SimulationRunner, run
from logsim.events.generator import LogEvent, format_event
from logsim.events.partitioner import partition_for
from logsim.metrics.models import RunSummary, UserResult
from logsim.sinks.base import PublishSink
from logsim.sinks.kafka import KafkaSink
from logsim.sinks.memory import MemorySink, MemorySinkFactory

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "Coordinator",
    "KafkaSink",
    "LogEvent",
    "LogSimError",
    "MemorySink",
    "MemorySinkFactory",
    "PublishError",
    "PublishSink",
    "RunConfig",
    "RunSummary",
    "SimulationRunner",
    "UserResult",
    "format_event",
    "load_config",
    "partition_for",
    "run",
]
