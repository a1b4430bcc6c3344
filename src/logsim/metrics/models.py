"""Result dataclasses for a simulation run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from logsim.metrics.histogram import PublishLatencyHistogram

if TYPE_CHECKING:
    from collections.abc import Sequence

    from logsim.engine.worker import UserState

__all__ = [
    "RunSummary",
    "UserResult",
]


@dataclass
class UserResult:
    """Outcome of one simulated user, filled in as it runs.

    Attributes:
        user_id: Spawn index of the user.
        client_address: Simulated client IP address.
        session_id: Session token of the user.
        state: Last lifecycle state reached.
        events_published: Events the sink accepted.
        publish_failures: Events the sink rejected.
        error_message: Why the user stopped early, if it did.
        latency: Publish latency histogram.
    """

    user_id: int
    client_address: str
    session_id: str
    state: UserState
    events_published: int = 0
    publish_failures: int = 0
    error_message: str | None = None
    latency: PublishLatencyHistogram = field(default_factory=PublishLatencyHistogram)

    @property
    def failed(self) -> bool:
        """Return True if the user stopped because of an unexpected error."""
        return self.error_message is not None


@dataclass(frozen=True)
class RunSummary:
    """Aggregate result of a whole run, built once every user has stopped.

    Attributes:
        users: Number of simulated users spawned.
        duration_seconds: Wall-clock seconds from spawn to last stop.
        events_published: Events accepted across all users.
        publish_failures: Events rejected across all users.
        failed_users: Users that stopped on an unexpected error.
        latency_p50: Median publish latency (ms).
        latency_p95: 95th percentile publish latency (ms).
        latency_p99: 99th percentile publish latency (ms).
        latency_max: Slowest publish (ms).
        user_results: Per-user results in spawn order.
    """

    users: int
    duration_seconds: float
    events_published: int
    publish_failures: int
    failed_users: int
    latency_p50: float
    latency_p95: float
    latency_p99: float
    latency_max: float
    user_results: tuple[UserResult, ...] = ()

    @property
    def events_per_second(self) -> float:
        """Return the average publish rate over the run."""
        if self.duration_seconds <= 0:
            return 0.0
        return self.events_published / self.duration_seconds

    @classmethod
    def from_results(
        cls,
        results: Sequence[UserResult],
        duration_seconds: float,
    ) -> RunSummary:
        """Merge per-user results into a run summary.

        Args:
            results: One result per spawned user.
            duration_seconds: Wall-clock run duration.

        Returns:
            The aggregated RunSummary.
        """
        merged = PublishLatencyHistogram()
        for result in results:
            merged.add(result.latency)

        return cls(
            users=len(results),
            duration_seconds=duration_seconds,
            events_published=sum(r.events_published for r in results),
            publish_failures=sum(r.publish_failures for r in results),
            failed_users=sum(1 for r in results if r.failed),
            latency_p50=merged.percentile(50.0),
            latency_p95=merged.percentile(95.0),
            latency_p99=merged.percentile(99.0),
            latency_max=merged.max(),
            user_results=tuple(results),
        )
