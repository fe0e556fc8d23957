"""Client-side request pacing for API clients."""

import time
from collections import deque
from collections.abc import Callable


class RateLimiter:
    """Sliding-window limiter that keeps outbound requests evenly paced.

    This is independent of the quota the server reports; it only makes sure a
    burst of issue lookups never exceeds ``requests_per_period`` within any
    ``period_seconds`` window.

    Example:
        >>> limiter = RateLimiter(requests_per_period=60, period_seconds=60)
        >>> limiter.wait_if_needed()  # Sleeps only if the window is full
    """

    def __init__(
        self,
        requests_per_period: int,
        period_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize rate limiter.

        Args:
            requests_per_period: Maximum requests per window; 0 disables pacing
            period_seconds: Window length in seconds
            clock: Time source (injectable for tests)
            sleep: Sleep function (injectable for tests)
        """
        self.requests_per_period = requests_per_period
        self.period_seconds = period_seconds
        self._clock = clock
        self._sleep = sleep
        self.request_times: deque[float] = deque()

    @property
    def enabled(self) -> bool:
        return self.requests_per_period > 0

    def _expire(self, now: float) -> None:
        while self.request_times and self.request_times[0] <= now - self.period_seconds:
            self.request_times.popleft()

    def wait_if_needed(self) -> float:
        """Block until another request fits in the window, then record it.

        Returns:
            Seconds slept (0 when no wait was needed)
        """
        if not self.enabled:
            return 0.0

        now = self._clock()
        self._expire(now)

        slept = 0.0
        if len(self.request_times) >= self.requests_per_period:
            slept = self.period_seconds - (now - self.request_times[0])
            if slept > 0:
                self._sleep(slept)
            now = self._clock()
            self._expire(now)
            # Clock may not have moved (tests); drop the request we waited on
            while len(self.request_times) >= self.requests_per_period:
                self.request_times.popleft()

        self.request_times.append(now)
        return max(slept, 0.0)

    def reset(self) -> None:
        """Forget all recorded requests."""
        self.request_times.clear()
