"""
Tests for the randomized inter-job delay.
"""

import random
from unittest.mock import Mock

from transcript_scraper.config import RateLimitConfig
from transcript_scraper.resilience.rate_limiter import RateLimiter


class TestRateLimiter:

    def setup_method(self):
        self.sleep = Mock()
        self.limiter = RateLimiter(
            config=RateLimitConfig(min_delay=11.0, max_delay=73.0),
            sleep=self.sleep,
            rng=random.Random(1234)
        )

    def test_draws_stay_within_bounds(self):
        draws = [self.limiter.next_delay() for _ in range(1000)]
        assert all(11.0 <= d <= 73.0 for d in draws)
        # Jittered, not a fixed cadence
        assert len(set(draws)) > 1

    def test_no_delay_before_first_job(self):
        assert self.limiter.wait() == 0.0
        self.sleep.assert_not_called()

    def test_one_delay_per_completed_job(self):
        self.limiter.record_job()
        delay = self.limiter.wait()

        assert 11.0 <= delay <= 73.0
        self.sleep.assert_called_once_with(delay)

        # Not armed again until another job completes
        assert self.limiter.wait() == 0.0
        assert self.sleep.call_count == 1

    def test_stats_and_reset(self):
        self.limiter.record_job()
        delay = self.limiter.wait()

        stats = self.limiter.get_stats()
        assert stats['jobs_completed'] == 1
        assert stats['last_delay'] == delay
        assert stats['total_waited'] == delay

        self.limiter.reset()
        assert self.limiter.get_stats()['jobs_completed'] == 0
        assert self.limiter.wait() == 0.0

    def test_fixed_delay_when_bounds_match(self):
        limiter = RateLimiter(config=RateLimitConfig(min_delay=5.0, max_delay=5.0), sleep=self.sleep)
        limiter.record_job()
        assert limiter.wait() == 5.0
