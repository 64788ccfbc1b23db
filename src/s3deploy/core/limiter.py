"""Counting permit pool bounding in-flight transfers."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from s3deploy.core.exceptions import ConfigurationError


class Permit:
    """
    One slot of a ConcurrencyLimiter.

    Released when the ``with`` block exits or ``release()`` is called;
    further releases are no-ops so a permit is returned exactly once.
    """

    __slots__ = ("_limiter", "_released")

    def __init__(self, limiter: "ConcurrencyLimiter"):
        self._limiter = limiter
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._limiter._release()

    def __enter__(self) -> "Permit":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Any,
    ) -> None:
        self.release()


class ConcurrencyLimiter:
    """
    Fixed-capacity permit pool.

    At most ``capacity`` permits are held at any instant; ``acquire`` waits
    while the pool is exhausted.
    """

    def __init__(self, capacity: int = 10):
        """
        Args:
            capacity: Maximum number of simultaneously held permits (>= 1).
        """
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ConfigurationError(f"max parallel must be an integer >= 1, got {capacity!r}")
        self.capacity = capacity
        self._semaphore = asyncio.Semaphore(capacity)
        self._in_flight = 0
        self._peak = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def peak(self) -> int:
        """Highest number of permits held at once since creation."""
        return self._peak

    async def acquire(self) -> Permit:
        await self._semaphore.acquire()
        self._in_flight += 1
        self._peak = max(self._peak, self._in_flight)
        return Permit(self)

    def _release(self) -> None:
        self._in_flight -= 1
        self._semaphore.release()


__all__ = ["ConcurrencyLimiter", "Permit"]
