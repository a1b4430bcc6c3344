"""Shared test fixtures for the logsim test suite."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

import pytest

from logsim._internal.config import RunConfig
from logsim._internal.errors import PublishError
from logsim.sinks.memory import MemorySink, MemorySinkFactory

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


# =============================================================================
# Pytest configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)


@pytest.fixture(autouse=True)
def _reset_logsim_logger() -> Iterator[None]:
    """Drop handlers installed by setup_logging so caplog sees every record."""
    yield
    logger = logging.getLogger("logsim")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Sinks
# =============================================================================


class FailingSink:
    """Sink whose every publish is rejected."""

    def __init__(self) -> None:
        self.attempts = 0
        self.close_count = 0

    def publish(self, topic: str, key: str, payload: bytes) -> None:
        self.attempts += 1
        msg = "broker rejected the record"
        raise PublishError(msg)

    def close(self) -> None:
        self.close_count += 1


class SelectiveSinkFactory:
    """Builds MemorySinks, except for the sink indices listed as failing."""

    def __init__(self, failing: set[int]) -> None:
        self.failing = failing
        self.sinks: list[MemorySink | FailingSink] = []
        self._lock = threading.Lock()

    def __call__(self, config: RunConfig) -> MemorySink | FailingSink:
        with self._lock:
            index = len(self.sinks)
            sink: MemorySink | FailingSink = (
                FailingSink() if index in self.failing else MemorySink()
            )
            self.sinks.append(sink)
        return sink


@pytest.fixture
def memory_sinks() -> MemorySinkFactory:
    """A fresh MemorySinkFactory."""
    return MemorySinkFactory()


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def make_config() -> Callable[..., RunConfig]:
    """Build a RunConfig with sub-second timings suitable for tests."""

    def _make(**overrides: object) -> RunConfig:
        values: dict[str, object] = {
            "brokers": ("localhost:9092",),
            "topic": "weblogs-test",
            "users": 3,
            "run_seconds": 0.3,
            "think_time": (0.01, 0.02),
            "silent": False,
            "heartbeat_interval": 0.05,
        }
        values.update(overrides)
        return RunConfig(**values)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def selective_sinks() -> Callable[[set[int]], SelectiveSinkFactory]:
    """Return a builder for factories whose listed sink indices always fail."""
    return SelectiveSinkFactory
