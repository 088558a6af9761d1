"""Graceful shutdown coordination.

Tracks in-flight requests so the lifespan shutdown can wait for them, with a
fixed upper bound, before the process exits.
"""

import asyncio
import logging
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger("gardensite.server")

SHUTDOWN_TIMEOUT = 5.0


class ShutdownTimeout(Exception):  # noqa: N818
    """In-flight requests were still running when the drain deadline passed."""

    def __init__(self, pending: int, timeout: float) -> None:
        super().__init__(f"{pending} request(s) still in flight after {timeout:g}s")
        self.pending = pending
        self.timeout = timeout


class ShutdownCoordinator:
    """In-flight request counter with a draining flag.

    Thread safety:
        The counter and flag are guarded by one lock, so worker threads
        entering and leaving ``track()`` never race the drain check.

    Usage::

        coordinator = ShutdownCoordinator()

        with coordinator.track() as accepted:
            if not accepted:
                ...  # refuse: shutting down

        coordinator.begin()
        await coordinator.drain()
    """

    __slots__ = ("_draining", "_in_flight", "_lock")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_flight = 0
        self._draining = False

    @property
    def draining(self) -> bool:
        with self._lock:
            return self._draining

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @contextmanager
    def track(self) -> Iterator[bool]:
        """Count a request for the duration of the block.

        Yields ``False`` (and counts nothing) once draining has begun.
        """
        with self._lock:
            if self._draining:
                accepted = False
            else:
                accepted = True
                self._in_flight += 1
        try:
            yield accepted
        finally:
            if accepted:
                with self._lock:
                    self._in_flight -= 1

    def begin(self) -> None:
        """Stop admitting requests."""
        with self._lock:
            self._draining = True

    async def drain(self, timeout: float = SHUTDOWN_TIMEOUT, *, poll: float = 0.01) -> None:
        """Wait until no requests are in flight.

        Raises:
            ShutdownTimeout: If requests are still running after *timeout*.
        """
        self.begin()
        deadline = time.monotonic() + timeout
        while True:
            pending = self.in_flight
            if pending == 0:
                return
            if time.monotonic() >= deadline:
                raise ShutdownTimeout(pending, timeout)
            await asyncio.sleep(poll)
