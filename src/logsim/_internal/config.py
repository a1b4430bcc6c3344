"""Run configuration for logsim."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from logsim._internal.errors import ConfigError

if TYPE_CHECKING:
    from logsim._internal.types import ThinkTime

DEFAULT_TOPIC = "weblogs"
DEFAULT_USERS = 10
DEFAULT_RUN_SECONDS = 120.0
DEFAULT_THINK_TIME: ThinkTime = (5.0, 10.0)
DEFAULT_PUBLISH_TIMEOUT = 10.0
DEFAULT_HEARTBEAT_INTERVAL = 2.0


@dataclass(frozen=True)
class RunConfig:
    """Process-wide configuration of one simulation run.

    Set once before any simulated user starts and read-only afterwards.
    Construction validates the structural invariants and raises
    ``ConfigError`` when one does not hold.

    Attributes:
        brokers: Kafka bootstrap servers as ``host:port`` strings.
        topic: Destination topic for access-log lines.
        users: Number of simulated users to spawn.
        run_seconds: How long each simulated user keeps generating events.
        think_time: Pause range (min, max) in seconds between two actions.
        silent: Suppress event lines and progress output.
        publish_timeout: Seconds to wait for the broker to acknowledge a send.
        heartbeat_interval: Seconds between "waiting for N users" lines.
        seed: Optional base seed; user ``i`` gets ``seed + i``.
    """

    brokers: tuple[str, ...]
    topic: str = DEFAULT_TOPIC
    users: int = DEFAULT_USERS
    run_seconds: float = DEFAULT_RUN_SECONDS
    think_time: ThinkTime = DEFAULT_THINK_TIME
    silent: bool = False
    publish_timeout: float = DEFAULT_PUBLISH_TIMEOUT
    heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL
    seed: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.brokers, str):
            object.__setattr__(self, "brokers", parse_brokers(self.brokers))
        else:
            object.__setattr__(self, "brokers", tuple(self.brokers))

        if not self.brokers:
            msg = "at least one broker endpoint is required"
            raise ConfigError(msg)
        if not self.topic:
            msg = "topic must not be empty"
            raise ConfigError(msg)
        if self.users < 1:
            msg = f"users must be >= 1, got: {self.users}"
            raise ConfigError(msg)
        if self.run_seconds <= 0:
            msg = f"run_seconds must be positive, got: {self.run_seconds}"
            raise ConfigError(msg)

        min_t, max_t = self.think_time
        if min_t <= 0 or max_t <= 0:
            msg = f"think time bounds must be positive, got: {self.think_time}"
            raise ConfigError(msg)
        if min_t > max_t:
            msg = f"minimum think time {min_t} exceeds maximum {max_t}"
            raise ConfigError(msg)

        if self.publish_timeout <= 0:
            msg = f"publish_timeout must be positive, got: {self.publish_timeout}"
            raise ConfigError(msg)
        if self.heartbeat_interval <= 0:
            msg = f"heartbeat_interval must be positive, got: {self.heartbeat_interval}"
            raise ConfigError(msg)


def parse_brokers(value: str) -> tuple[str, ...]:
    """Split a comma-separated ``HOST1:PORT1,HOST2:PORT2`` list.

    Blank entries are dropped, so ``""`` yields an empty tuple.
    """
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        msg = f"{name} must be an integer, got: {raw!r}"
        raise ConfigError(msg) from None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        msg = f"{name} must be a number, got: {raw!r}"
        raise ConfigError(msg) from None


def load_config() -> RunConfig:
    """Load a run configuration from environment variables with defaults.

    Environment variables:
        LOGSIM_BROKERS: Comma-separated bootstrap servers (required).
        LOGSIM_TOPIC: Destination topic (default: weblogs).
        LOGSIM_USERS: Number of simulated users (default: 10).
        LOGSIM_RUN_SECONDS: Run duration in seconds (default: 120).
        LOGSIM_THINK_MIN: Minimum think time in seconds (default: 5).
        LOGSIM_THINK_MAX: Maximum think time in seconds (default: 10).
        LOGSIM_PUBLISH_TIMEOUT: Send acknowledgement timeout (default: 10).

    Returns:
        Validated RunConfig instance.

    Raises:
        ConfigError: If a variable is missing or has an invalid value.
    """
    brokers = parse_brokers(os.environ.get("LOGSIM_BROKERS", ""))
    if not brokers:
        msg = "LOGSIM_BROKERS must list at least one host:port"
        raise ConfigError(msg)

    return RunConfig(
        brokers=brokers,
        topic=os.environ.get("LOGSIM_TOPIC", DEFAULT_TOPIC),
        users=_env_int("LOGSIM_USERS", DEFAULT_USERS),
        run_seconds=_env_float("LOGSIM_RUN_SECONDS", DEFAULT_RUN_SECONDS),
        think_time=(
            _env_float("LOGSIM_THINK_MIN", DEFAULT_THINK_TIME[0]),
            _env_float("LOGSIM_THINK_MAX", DEFAULT_THINK_TIME[1]),
        ),
        publish_timeout=_env_float("LOGSIM_PUBLISH_TIMEOUT", DEFAULT_PUBLISH_TIMEOUT),
    )
