"""Synthetic access-log event generation.

Every function here is pure apart from the random source it is handed.
Each simulated user passes its own ``random.Random`` so sequences stay
independent between users and reproducible when seeded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import random
    from datetime import datetime

    from logsim.engine.worker import SimulatedUser

ROOT_URL = "/"

# (threshold, url): first threshold strictly below the draw wins.
AD_URLS: tuple[tuple[float, str], ...] = (
    (0.9, "sia.org/ads/1/123/clickfw"),
    (0.8, "sia.org/ads/2/234/clickfw"),
    (0.7, "sia.org/ads/3/56/clickfw"),
)

STATUS_OK = 200
STATUS_NOT_FOUND = 404
ERROR_THRESHOLD = 0.98

METHOD = "GET"
LATENCY_MS = 500


@dataclass(frozen=True)
class LogEvent:
    """One simulated access-log record.

    Attributes:
        timestamp: Wall-clock time the action happened.
        client_address: Simulated client IP address.
        session_id: Session token of the simulated user.
        url: Requested URL (root path or an ad click-through).
        status_code: HTTP status, 200 or 404.
        method: HTTP method, always GET.
        latency_ms: Response time field, always 500.
    """

    timestamp: datetime
    client_address: str
    session_id: str
    url: str
    status_code: int
    method: str = METHOD
    latency_ms: int = LATENCY_MS


def next_url(rng: random.Random) -> str:
    """Pick the URL of the next simulated click.

    One uniform draw decides: above 0.9, 0.8 and 0.7 select ad categories
    1, 2 and 3 (10% each); everything else requests the root path (70%).

    Args:
        rng: Random source owned by the calling user.

    Returns:
        The selected URL.
    """
    value = rng.random()
    for threshold, url in AD_URLS:
        if value > threshold:
            return url
    return ROOT_URL


def next_status(rng: random.Random) -> int:
    """Pick the response status: 404 for 2% of draws, 200 otherwise."""
    if rng.random() > ERROR_THRESHOLD:
        return STATUS_NOT_FOUND
    return STATUS_OK


def next_event(
    rng: random.Random,
    user: SimulatedUser,
    timestamp: datetime,
) -> LogEvent:
    """Generate the next event for a simulated user.

    The URL is drawn before the status code.

    Args:
        rng: Random source owned by ``user``.
        user: Identity stamped onto the event.
        timestamp: Time of the action.

    Returns:
        A fresh LogEvent.
    """
    url = next_url(rng)
    status = next_status(rng)
    return LogEvent(
        timestamp=timestamp,
        client_address=user.client_address,
        session_id=user.session_id,
        url=url,
        status_code=status,
    )


def format_timestamp(timestamp: datetime) -> str:
    """Render ``YYYY-MM-DD HH:MM:SS.mmm``."""
    return timestamp.isoformat(sep=" ", timespec="milliseconds")


def format_event(event: LogEvent) -> str:
    """Render an event as one space-separated access-log line.

    Field order: date time address session url method status latency.
    Downstream log parsers split on single spaces, so the order and the
    separators must not change.

    Args:
        event: Event to render.

    Returns:
        The access-log line, without a trailing newline.
    """
    return " ".join(
        (
            format_timestamp(event.timestamp),
            event.client_address,
            event.session_id,
            event.url,
            event.method,
            str(event.status_code),
            str(event.latency_ms),
        )
    )
