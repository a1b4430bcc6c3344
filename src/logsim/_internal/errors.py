"""Custom exception hierarchy for logsim."""

from __future__ import annotations


class LogSimError(Exception):
    """Base exception for all logsim errors.

    All custom exceptions in logsim inherit from this class, making it easy
    to catch any logsim-specific error with a single except clause.
    """


class ConfigError(LogSimError):
    """Raised when run configuration is invalid or missing.

    Raised before any simulated user starts and is fatal to the whole run.

    Examples:
        - No broker endpoints were given.
        - User count or run duration is not positive.
        - Minimum think time is greater than maximum think time.
    """


class PublishError(LogSimError):
    """Raised when an event cannot be handed off to the publish sink.

    Covers broker connectivity, serialization and broker rejection, as well
    as a publish call that overruns its timeout. A simulated user recovers
    from it locally and moves on to its next iteration.
    """
