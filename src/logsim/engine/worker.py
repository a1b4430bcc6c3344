"""Simulated user: one thread generating and publishing access-log events."""

from __future__ import annotations

import random
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import TYPE_CHECKING

from logsim._internal.errors import PublishError
from logsim._internal.logging import get_logger
from logsim.events.generator import format_event, next_event
from logsim.metrics.models import UserResult

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable

    from logsim._internal.config import RunConfig
    from logsim._internal.types import MessageCallback, ThinkTime
    from logsim.engine.counter import ActiveUserCounter
    from logsim.sinks.base import PublishSink, SinkFactory

logger = get_logger("engine.worker")

ADDRESS_PREFIX = "192.168.1."


class UserState(Enum):
    """Lifecycle of a simulated user."""

    STARTING = auto()
    RUNNING = auto()
    DRAINING = auto()
    STOPPED = auto()


@dataclass(frozen=True)
class SimulatedUser:
    """Identity of one simulated user, fixed for its whole lifetime.

    Attributes:
        user_id: Spawn index, used in thread names and log lines.
        client_address: Simulated client IP; also the partition key.
        session_id: Unique session token.
        run_duration: Seconds the user keeps generating events.
    """

    user_id: int
    client_address: str
    session_id: str
    run_duration: float


def random_client_address(rng: random.Random) -> str:
    """Draw a client address in ``192.168.1.0/24``."""
    return f"{ADDRESS_PREFIX}{rng.randrange(256)}"


def new_session_id() -> str:
    """Return a fresh unique session token."""
    return str(uuid.uuid4())


def draw_think_time(rng: random.Random, think_time: ThinkTime) -> float:
    """Draw a pause length uniformly from ``[min, max]`` seconds."""
    min_t, max_t = think_time
    return rng.uniform(min_t, max_t)


def run_user(
    user: SimulatedUser,
    config: RunConfig,
    *,
    counter: ActiveUserCounter,
    sink_factory: SinkFactory,
    stop_event: threading.Event,
    rng: random.Random | None = None,
    on_message: MessageCallback | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> UserResult:
    """Run one simulated user from STARTING to STOPPED.

    The caller must already have registered the user with ``counter``;
    this function always unregisters it on the way out, whatever happens.

    A rejected publish is logged and counted and the loop moves on to its
    next iteration. Any other error, including failing to acquire the sink,
    is logged at the user boundary and ends the loop early. Nothing is
    re-raised, so one user can never take down the others.

    Args:
        user: Identity of this user.
        config: Run configuration.
        counter: Active user counter to decrement on exit.
        sink_factory: Builds the sink this user owns.
        stop_event: Cancellation token; set it to end the run early.
        rng: Private random source. Defaults to a fresh unseeded one.
        on_message: Receives each access-log line unless ``config.silent``.
        clock: Wall-clock source for event timestamps.

    Returns:
        The user's final UserResult.
    """
    rng = rng if rng is not None else random.Random()  # noqa: S311
    result = UserResult(
        user_id=user.user_id,
        client_address=user.client_address,
        session_id=user.session_id,
        state=UserState.STARTING,
    )
    sink: PublishSink | None = None

    try:
        if not config.silent:
            logger.info(
                "Starting user simulator: IP=%s, sessionId=%s, timeToRun=%.1fs",
                user.client_address,
                user.session_id,
                user.run_duration,
            )

        sink = sink_factory(config)
        result.state = UserState.RUNNING
        _run_loop(user, config, sink, result, stop_event, rng, on_message, clock)

    except Exception as exc:
        result.error_message = str(exc) or type(exc).__name__
        logger.exception("User %d (%s) failed", user.user_id, user.session_id)
    finally:
        result.state = UserState.DRAINING
        if sink is not None:
            try:
                sink.close()
            except Exception:
                logger.warning(
                    "Closing sink failed for user %d", user.user_id, exc_info=True
                )

        if not config.silent:
            logger.info("Stopping user simulator with sessionId %s", user.session_id)

        result.state = UserState.STOPPED
        counter.decrement()

    return result


def _run_loop(
    user: SimulatedUser,
    config: RunConfig,
    sink: PublishSink,
    result: UserResult,
    stop_event: threading.Event,
    rng: random.Random,
    on_message: MessageCallback | None,
    clock: Callable[[], datetime],
) -> None:
    start = time.monotonic()

    while not stop_event.is_set():
        if time.monotonic() - start >= user.run_duration:
            break

        event = next_event(rng, user, clock())
        line = format_event(event)

        if on_message is not None and not config.silent:
            on_message(line)

        publish_start = time.perf_counter()
        try:
            sink.publish(config.topic, user.client_address, line.encode("utf-8"))
        except PublishError:
            result.publish_failures += 1
            logger.warning(
                "Publish failed for user %d (%s)",
                user.user_id,
                user.session_id,
                exc_info=True,
            )
        else:
            result.events_published += 1
            result.latency.record((time.perf_counter() - publish_start) * 1000.0)

        # Returns early when cancelled; the loop condition then exits.
        stop_event.wait(draw_think_time(rng, config.think_time))
