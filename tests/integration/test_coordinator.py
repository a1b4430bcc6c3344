"""Integration tests for the multi-user coordinator."""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING

import pytest

from logsim.engine.coordinator import Coordinator
from logsim.engine.counter import ActiveUserCounter
from logsim.engine.worker import UserState
from logsim.sinks.memory import MemorySink, MemorySinkFactory

if TYPE_CHECKING:
    from collections.abc import Callable

    from logsim._internal.config import RunConfig


class _WatchedCounter(ActiveUserCounter):
    """Counter that remembers every value it ever took."""

    def __init__(self) -> None:
        super().__init__()
        self.history: list[int] = []
        self._history_lock = threading.Lock()

    def increment(self) -> int:
        value = super().increment()
        with self._history_lock:
            self.history.append(value)
        return value

    def decrement(self) -> int:
        value = super().decrement()
        with self._history_lock:
            self.history.append(value)
        return value


class TestCoordinator:
    @pytest.mark.timeout(15)
    @pytest.mark.parametrize("users", [1, 4, 10])
    def test_returns_after_every_user_stopped(
        self,
        users: int,
        make_config: Callable[..., RunConfig],
        memory_sinks: MemorySinkFactory,
    ) -> None:
        coordinator = Coordinator(make_config(users=users), sink_factory=memory_sinks)
        watched = _WatchedCounter()
        coordinator.counter = watched

        summary = coordinator.run()

        assert summary.users == users
        assert len(summary.user_results) == users
        assert all(r.state == UserState.STOPPED for r in summary.user_results)
        assert watched.value == 0
        assert min(watched.history) >= 0
        assert watched.history.count(0) == 1
        assert not coordinator.is_alive
        assert len(memory_sinks.sinks) == users
        assert all(sink.closed for sink in memory_sinks.sinks)

    @pytest.mark.timeout(15)
    def test_users_get_distinct_sessions(
        self,
        make_config: Callable[..., RunConfig],
        memory_sinks: MemorySinkFactory,
    ) -> None:
        summary = Coordinator(make_config(users=8), sink_factory=memory_sinks).run()

        sessions = {r.session_id for r in summary.user_results}
        assert len(sessions) == 8
        assert [r.user_id for r in summary.user_results] == list(range(8))
        for result in summary.user_results:
            assert result.client_address.startswith("192.168.1.")

    @pytest.mark.timeout(15)
    def test_each_user_keeps_its_identity_on_every_event(
        self,
        make_config: Callable[..., RunConfig],
        memory_sinks: MemorySinkFactory,
    ) -> None:
        summary = Coordinator(make_config(users=5), sink_factory=memory_sinks).run()

        identities = {(r.client_address, r.session_id) for r in summary.user_results}
        for sink in memory_sinks.sinks:
            keys = {(rec.key, rec.payload.decode().split(" ")[3]) for rec in sink.records}
            assert len(keys) == 1
            assert keys <= identities
        assert summary.events_published == len(memory_sinks.records)

    @pytest.mark.timeout(15)
    def test_one_failing_sink_does_not_affect_others(
        self,
        make_config: Callable[..., RunConfig],
        selective_sinks: Callable[[set[int]], Callable[[RunConfig], object]],
    ) -> None:
        factory = selective_sinks({2})
        coordinator = Coordinator(make_config(users=5), sink_factory=factory)  # type: ignore[arg-type]

        summary = coordinator.run()

        assert summary.users == 5
        assert all(r.state == UserState.STOPPED for r in summary.user_results)
        assert coordinator.counter.value == 0
        assert summary.failed_users == 0
        assert summary.publish_failures > 0

        healthy = [r for r in summary.user_results if r.publish_failures == 0]
        assert len(healthy) == 4
        assert all(r.events_published > 0 for r in healthy)

    @pytest.mark.timeout(15)
    def test_setup_failure_isolated(self, make_config: Callable[..., RunConfig]) -> None:
        calls: list[int] = []
        lock = threading.Lock()

        def _factory(_config: RunConfig) -> MemorySink:
            with lock:
                calls.append(1)
                first = len(calls) == 1
            if first:
                msg = "no brokers available"
                raise ConnectionError(msg)
            return MemorySink()

        summary = Coordinator(make_config(users=3), sink_factory=_factory).run()

        assert summary.failed_users == 1
        assert summary.users == 3
        assert sum(1 for r in summary.user_results if r.events_published > 0) == 2

    @pytest.mark.timeout(15)
    def test_heartbeat_logs_remaining_users(
        self,
        make_config: Callable[..., RunConfig],
        memory_sinks: MemorySinkFactory,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        config = make_config(users=2, run_seconds=0.4, heartbeat_interval=0.05)
        with caplog.at_level(logging.INFO, logger="logsim"):
            Coordinator(config, sink_factory=memory_sinks).run()

        messages = [r.getMessage() for r in caplog.records]
        assert "Waiting for 2 users to finish." in messages
        assert messages[-1] == "All users have finished."

    @pytest.mark.timeout(15)
    def test_silent_suppresses_progress_and_events(
        self,
        make_config: Callable[..., RunConfig],
        memory_sinks: MemorySinkFactory,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        lines: list[str] = []
        config = make_config(users=2, run_seconds=0.3, heartbeat_interval=0.05, silent=True)
        with caplog.at_level(logging.INFO, logger="logsim"):
            Coordinator(config, sink_factory=memory_sinks, on_message=lines.append).run()

        messages = [r.getMessage() for r in caplog.records]
        assert not any("Waiting for" in m for m in messages)
        assert "All users have finished." not in messages
        assert lines == []
        assert memory_sinks.records

    @pytest.mark.timeout(15)
    def test_message_callback_receives_every_event(
        self,
        make_config: Callable[..., RunConfig],
        memory_sinks: MemorySinkFactory,
    ) -> None:
        lines: list[str] = []
        lock = threading.Lock()

        def _collect(line: str) -> None:
            with lock:
                lines.append(line)

        Coordinator(make_config(users=3), sink_factory=memory_sinks, on_message=_collect).run()

        assert sorted(lines) == sorted(memory_sinks.lines())

    @pytest.mark.timeout(15)
    def test_stop_cancels_long_run(
        self,
        make_config: Callable[..., RunConfig],
        memory_sinks: MemorySinkFactory,
    ) -> None:
        config = make_config(users=4, run_seconds=60.0, think_time=(5.0, 10.0))
        coordinator = Coordinator(config, sink_factory=memory_sinks)

        timer = threading.Timer(0.3, coordinator.stop)
        timer.start()
        start = time.monotonic()
        summary = coordinator.run()
        timer.join()

        assert time.monotonic() - start < 5.0
        assert summary.users == 4
        assert summary.events_published == 4
        assert coordinator.counter.value == 0

    @pytest.mark.timeout(15)
    def test_seed_makes_addresses_reproducible(
        self,
        make_config: Callable[..., RunConfig],
    ) -> None:
        config = make_config(users=6, run_seconds=0.05, seed=2024)
        first = Coordinator(config, sink_factory=MemorySinkFactory()).run()
        second = Coordinator(config, sink_factory=MemorySinkFactory()).run()

        assert [r.client_address for r in first.user_results] == [
            r.client_address for r in second.user_results
        ]
