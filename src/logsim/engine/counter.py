"""Active simulated user counter with wait-for-zero support."""

from __future__ import annotations

import threading


class ActiveUserCounter:
    """Thread-safe count of simulated users that have not stopped yet.

    Works like a wait group: the coordinator calls :meth:`increment` before
    starting each user thread, the user calls :meth:`decrement` when it
    stops, and the coordinator blocks in :meth:`wait_for_zero`. Every
    decrement notifies waiters, so the transition to zero is never missed.

    The count can never go negative; a decrement at zero raises.
    """

    def __init__(self) -> None:
        self._count = 0
        self._condition = threading.Condition()

    @property
    def value(self) -> int:
        """Return the current number of active users."""
        with self._condition:
            return self._count

    def increment(self) -> int:
        """Register one more active user and return the new count."""
        with self._condition:
            self._count += 1
            return self._count

    def decrement(self) -> int:
        """Unregister one user, wake waiters, and return the new count.

        Raises:
            RuntimeError: If no user is registered.
        """
        with self._condition:
            if self._count == 0:
                msg = "active user count would become negative"
                raise RuntimeError(msg)
            self._count -= 1
            self._condition.notify_all()
            return self._count

    def wait_for_zero(self, timeout: float | None = None) -> bool:
        """Block until no user is active or ``timeout`` seconds pass.

        Args:
            timeout: Maximum seconds to wait. None waits indefinitely.

        Returns:
            True if the count is zero, False if the wait timed out first.
        """
        with self._condition:
            return self._condition.wait_for(lambda: self._count == 0, timeout=timeout)
