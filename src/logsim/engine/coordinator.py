"""Spawns simulated users and waits for all of them to stop."""

from __future__ import annotations

import random
import threading
import time
from typing import TYPE_CHECKING

from logsim._internal.logging import get_logger
from logsim.engine.counter import ActiveUserCounter
from logsim.engine.worker import (
    SimulatedUser,
    new_session_id,
    random_client_address,
    run_user,
)
from logsim.metrics.models import RunSummary, UserResult
from logsim.sinks.kafka import kafka_sink_factory

if TYPE_CHECKING:
    from logsim._internal.config import RunConfig
    from logsim._internal.types import MessageCallback
    from logsim.sinks.base import SinkFactory

logger = get_logger("engine.coordinator")

_JOIN_TIMEOUT_SECONDS = 5.0


class Coordinator:
    """Manages the lifecycle of N simulated user threads.

    Spawns one non-daemon thread per simulated user, each with its own
    identity, random source and sink, then blocks until the active user
    count drops to zero. While waiting it wakes every
    ``config.heartbeat_interval`` seconds to log how many users remain.

    Attributes:
        config: The validated run configuration.
        counter: Active user count shared with every user thread.
    """

    def __init__(
        self,
        config: RunConfig,
        *,
        sink_factory: SinkFactory = kafka_sink_factory,
        on_message: MessageCallback | None = None,
        stop_event: threading.Event | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            config: Validated run configuration.
            sink_factory: Builds the sink each user owns.
            on_message: Receives every access-log line when not silent.
            stop_event: Cancellation token shared with all users. A new one
                is created when omitted.
        """
        self.config = config
        self.counter = ActiveUserCounter()
        self._sink_factory = sink_factory
        self._on_message = on_message
        self._stop_event = stop_event if stop_event is not None else threading.Event()
        self._spawn_rng = random.Random(config.seed)  # noqa: S311
        self._threads: list[threading.Thread] = []
        self._results: list[UserResult | None] = []

    @property
    def is_alive(self) -> bool:
        """Return True if any user thread is still running."""
        return any(t.is_alive() for t in self._threads)

    def stop(self) -> None:
        """Ask every user to stop at its next loop check or think-time wait."""
        if not self._stop_event.is_set():
            logger.info("Stop requested, cancelling %d users", self.counter.value)
            self._stop_event.set()

    def run(self) -> RunSummary:
        """Spawn every user, wait for all of them to stop, and summarize.

        Returns:
            RunSummary over all spawned users.
        """
        start = time.monotonic()
        try:
            self._spawn_users()
        except Exception:
            logger.exception("Spawning users failed, stopping the ones already running")
            self.stop()
            self.counter.wait_for_zero()
            raise

        while not self.counter.wait_for_zero(timeout=self.config.heartbeat_interval):
            if not self.config.silent:
                logger.info("Waiting for %d users to finish.", self.counter.value)

        for thread in self._threads:
            thread.join(timeout=_JOIN_TIMEOUT_SECONDS)
            if thread.is_alive():
                logger.warning("User thread %s did not exit in time", thread.name)

        if not self.config.silent:
            logger.info("All users have finished.")

        results = [r for r in self._results if r is not None]
        return RunSummary.from_results(results, time.monotonic() - start)

    def _spawn_users(self) -> None:
        for user_id in range(self.config.users):
            user = SimulatedUser(
                user_id=user_id,
                client_address=random_client_address(self._spawn_rng),
                session_id=new_session_id(),
                run_duration=self.config.run_seconds,
            )
            seed = None if self.config.seed is None else self.config.seed + user_id
            rng = random.Random(seed)  # noqa: S311

            self._results.append(None)
            thread = threading.Thread(
                target=self._run_user,
                args=(user, rng),
                name=f"logsim-user-{user_id}",
                daemon=False,
            )
            self._threads.append(thread)

            # Register before start so wait_for_zero cannot pass early.
            self.counter.increment()
            try:
                thread.start()
            except RuntimeError:
                self.counter.decrement()
                raise
            logger.debug("Started user thread %s: %s", thread.name, user.client_address)

        logger.info("Started %d simulated users", self.config.users)

    def _run_user(self, user: SimulatedUser, rng: random.Random) -> None:
        self._results[user.user_id] = run_user(
            user,
            self.config,
            counter=self.counter,
            sink_factory=self._sink_factory,
            stop_event=self._stop_event,
            rng=rng,
            on_message=self._on_message,
        )
