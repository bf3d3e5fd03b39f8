"""
Randomized delay between jobs.
Jittered timing is harder to fingerprint than a fixed cadence.
"""

import logging
import random
import time
from typing import Callable, Optional

from ..config import RateLimitConfig

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sleeps a uniformly random duration after each completed job."""

    def __init__(
        self,
        config: Optional[RateLimitConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize rate limiter with configuration.

        Args:
            config: RateLimitConfig instance, uses defaults if None
            sleep: Sleep function, replaceable in tests
            rng: Random source, replaceable in tests
        """
        self.config = config or RateLimitConfig()
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._armed = False
        self._jobs_completed = 0
        self._total_waited = 0.0
        self._last_delay: Optional[float] = None

    def next_delay(self) -> float:
        """Draw a delay in seconds from [min_delay, max_delay]."""
        return self._rng.uniform(self.config.min_delay, self.config.max_delay)

    def record_job(self):
        """Record a finished job; the next wait() will sleep."""
        self._jobs_completed += 1
        self._armed = True

    def wait(self) -> float:
        """
        Sleep before the next dequeue if a job finished since the last wait.

        Returns:
            Seconds slept (0.0 before the first job)
        """
        if not self._armed:
            return 0.0

        delay = self.next_delay()
        self._armed = False
        self._last_delay = delay
        logger.info("Waiting for %d seconds before processing the next video...", round(delay))
        self._sleep(delay)
        self._total_waited += delay
        return delay

    def get_stats(self) -> dict:
        """
        Get rate limiter statistics.

        Returns:
            Dict with current state info
        """
        return {
            'jobs_completed': self._jobs_completed,
            'last_delay': self._last_delay,
            'total_waited': self._total_waited,
            'min_delay': self.config.min_delay,
            'max_delay': self.config.max_delay
        }

    def reset(self):
        """Reset rate limiter to initial state."""
        self._armed = False
        self._jobs_completed = 0
        self._total_waited = 0.0
        self._last_delay = None
