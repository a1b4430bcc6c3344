"""HDR histogram of publish latencies.

Wraps ``hdrh.histogram.HdrHistogram`` with a millisecond API. Values are
stored as integer microseconds because the HDR histogram only accepts
integers.
"""

from __future__ import annotations

from hdrh.histogram import HdrHistogram  # type: ignore[import-untyped]

# 1 microsecond up to 5 minutes, well past any sane publish timeout.
_LOWEST_TRACKABLE_US = 1
_HIGHEST_TRACKABLE_US = 300_000_000
_SIGNIFICANT_DIGITS = 3


class PublishLatencyHistogram:
    """Latency distribution of one simulated user's publish calls.

    Each user records into its own instance without locking; the
    coordinator merges them with :meth:`add` once every user has stopped.
    All public methods accept and return milliseconds.
    """

    def __init__(self) -> None:
        self._histogram: HdrHistogram = HdrHistogram(  # type: ignore[no-any-unimported]
            _LOWEST_TRACKABLE_US, _HIGHEST_TRACKABLE_US, _SIGNIFICANT_DIGITS
        )

    @property
    def count(self) -> int:
        """Return the number of recorded publishes."""
        return int(self._histogram.total_count)

    def record(self, latency_ms: float) -> None:
        """Record one publish latency, clamped to the trackable range.

        Args:
            latency_ms: Time the publish call took, in milliseconds.
        """
        value_us = int(latency_ms * 1000)
        value_us = max(_LOWEST_TRACKABLE_US, min(value_us, _HIGHEST_TRACKABLE_US))
        self._histogram.record_value(value_us)

    def percentile(self, percentile: float) -> float:
        """Return the latency at ``percentile`` (0-100), or 0.0 when empty."""
        if self.count == 0:
            return 0.0
        return float(self._histogram.get_value_at_percentile(percentile)) / 1000.0

    def max(self) -> float:
        """Return the slowest recorded publish, or 0.0 when empty."""
        if self.count == 0:
            return 0.0
        return float(self._histogram.get_max_value()) / 1000.0

    def add(self, other: PublishLatencyHistogram) -> None:
        """Merge another user's histogram into this one."""
        self._histogram.add(other._histogram)
