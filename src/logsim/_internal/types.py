"""Shared type aliases for logsim."""

from __future__ import annotations

from collections.abc import Callable

# Think time range (min_seconds, max_seconds).
ThinkTime = tuple[float, float]

# Receives one formatted access-log line per simulated action.
MessageCallback = Callable[[str], None]
