"""Clock used for timestamps and timing build steps."""

import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TypeVar

T = TypeVar("T")


class Clock:
    """Wall clock with an injectable time source for tests."""

    def __init__(self, now: Callable[[], datetime] | None = None):
        self._now = now or (lambda: datetime.now(timezone.utc))

    def now(self) -> datetime:
        return self._now()

    def measure(self, func: Callable[[], T]) -> tuple[float, T]:
        """Run a function and time it.

        Args:
            func: Zero-argument callable to run

        Returns:
            Tuple of (duration in seconds, return value of func)
        """
        start_time = time.time()
        result = func()
        duration = time.time() - start_time
        return duration, result
