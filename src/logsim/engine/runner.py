"""Top-level simulation orchestrator."""

from __future__ import annotations

import signal
import threading
from typing import TYPE_CHECKING

from logsim._internal.logging import MessageEcho, get_logger, setup_logging
from logsim.engine.coordinator import Coordinator
from logsim.sinks.kafka import kafka_sink_factory

if TYPE_CHECKING:
    from logsim._internal.config import RunConfig
    from logsim._internal.types import MessageCallback
    from logsim.metrics.models import RunSummary
    from logsim.sinks.base import SinkFactory

logger = get_logger("engine.runner")

EXIT_OK = 0


class SimulationRunner:
    """Runs a whole simulation with graceful signal handling.

    Wires together logging, the coordinator and the per-event message
    stream. SIGINT and SIGTERM set the shared cancellation token, so every
    simulated user finishes its current iteration, closes its sink and
    stops cooperatively.

    Attributes:
        config: The validated run configuration.
    """

    def __init__(
        self,
        config: RunConfig,
        *,
        sink_factory: SinkFactory = kafka_sink_factory,
        on_message: MessageCallback | None = None,
        log_level: int = 20,
        json_logs: bool = False,
    ) -> None:
        """Initialize the runner.

        Args:
            config: Validated run configuration.
            sink_factory: Builds the sink each simulated user owns.
            on_message: Receives each access-log line. Defaults to writing
                the lines to stderr.
            log_level: Logging level.
            json_logs: Emit structured JSON log lines.
        """
        self.config = config
        self._sink_factory = sink_factory
        self._on_message = on_message if on_message is not None else MessageEcho()
        self._log_level = log_level
        self._json_logs = json_logs
        self._stop_event = threading.Event()

    def stop(self) -> None:
        """Request cooperative shutdown of every simulated user."""
        self._stop_event.set()

    def run(self) -> RunSummary:
        """Execute the simulation and return its summary.

        Blocks until every simulated user has stopped, either because its
        run duration elapsed or because a stop was requested.

        Returns:
            RunSummary of the whole run.
        """
        setup_logging(level=self._log_level, json_format=self._json_logs)
        silent = self.config.silent

        if not silent:
            logger.debug(
                "Starting simulation: topic=%s, brokers=%s, users=%d, duration=%.1fs, "
                "think_time=%.1f-%.1fs",
                self.config.topic,
                ",".join(self.config.brokers),
                self.config.users,
                self.config.run_seconds,
                *self.config.think_time,
            )

        coordinator = Coordinator(
            self.config,
            sink_factory=self._sink_factory,
            on_message=self._on_message,
            stop_event=self._stop_event,
        )

        # Signal handlers can only be installed from the main thread.
        install_signals = threading.current_thread() is threading.main_thread()
        if install_signals:
            original_sigint = signal.getsignal(signal.SIGINT)
            original_sigterm = signal.getsignal(signal.SIGTERM)

            def _signal_handler(signum: int, _frame: object) -> None:
                logger.info("Signal %d received, initiating graceful shutdown", signum)
                coordinator.stop()

            signal.signal(signal.SIGINT, _signal_handler)
            signal.signal(signal.SIGTERM, _signal_handler)

        try:
            summary = coordinator.run()
        finally:
            if install_signals:
                signal.signal(signal.SIGINT, original_sigint)
                signal.signal(signal.SIGTERM, original_sigterm)

        if not silent:
            logger.info(
                "Simulation completed: duration=%.1fs, published=%d, failed=%d, "
                "failed_users=%d, rate=%.1f/s, p95=%.1fms",
                summary.duration_seconds,
                summary.events_published,
                summary.publish_failures,
                summary.failed_users,
                summary.events_per_second,
                summary.latency_p95,
            )
        return summary


def run(
    config: RunConfig,
    *,
    sink_factory: SinkFactory = kafka_sink_factory,
    on_message: MessageCallback | None = None,
    log_level: int = 20,
) -> int:
    """Run a simulation to completion and return the process exit code.

    Args:
        config: Validated run configuration.
        sink_factory: Builds the sink each simulated user owns.
        on_message: Receives each access-log line.
        log_level: Logging level.

    Returns:
        ``EXIT_OK`` once every simulated user has stopped. Publish failures
        do not change the exit code.
    """
    SimulationRunner(
        config,
        sink_factory=sink_factory,
        on_message=on_message,
        log_level=log_level,
    ).run()
    return EXIT_OK
