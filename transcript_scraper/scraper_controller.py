"""
Main orchestrator for the channel transcript scraper.
Discovers a channel's videos and works through them one at a time:
idempotency check, transcript pipeline, save, randomized delay.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from .config import ScraperConfig
from .exceptions import PersistenceError
from .models import CrawlResult, CrawlState, VideoTask
from .resilience.content_discovery import ChannelDiscovery
from .resilience.frontier import Frontier
from .resilience.rate_limiter import RateLimiter
from .storage import TranscriptStore
from .transcript_pipeline import TranscriptPipeline, build_pipeline
from .utils import channel_url
from .youtube_browser import YouTubeBrowser

logger = logging.getLogger(__name__)


class ScraperController:
    """Main orchestrator that coordinates all scraper components."""

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        browser: Optional[YouTubeBrowser] = None,
        store: Optional[TranscriptStore] = None,
        pipeline: Optional[TranscriptPipeline] = None,
        discovery: Optional[ChannelDiscovery] = None,
        rate_limiter: Optional[RateLimiter] = None,
        should_continue: Optional[Callable[[], bool]] = None
    ):
        """
        Initialize controller with configuration.

        Components not passed in are built from the configuration. The
        browser only starts when something first needs it.

        Args:
            config: ScraperConfig instance, uses defaults if None
            should_continue: Checked before every dequeue; returning False
                ends the crawl at the job boundary
        """
        self.config = config or ScraperConfig()
        self.browser = browser or YouTubeBrowser(self.config.browser)
        self.store = store or TranscriptStore(self.config.storage)
        self.pipeline = pipeline or build_pipeline(self.config, self.browser)
        self.discovery = discovery or ChannelDiscovery(
            self.browser,
            scroll_pause=self.config.browser.scroll_pause,
            max_scrolls=self.config.browser.max_scrolls
        )
        self.rate_limiter = rate_limiter or RateLimiter(config=self.config.rate_limit)
        self.frontier = Frontier(max_jobs=self.config.max_videos)
        self.crawl_state = CrawlState()

        self._should_continue = should_continue
        self._stopped = False
        self._started_at: Optional[str] = None

    def run(self, channel_handle: str) -> CrawlResult:
        """
        Discover a channel's videos and crawl them.

        Args:
            channel_handle: Handle such as @somechannel

        Returns:
            CrawlResult with statistics
        """
        self._started_at = datetime.now().isoformat()
        logger.info("Starting crawl for profile: %s", channel_handle)

        video_ids = self.discovery.get_video_ids(channel_url(channel_handle))
        logger.info("Found %d videos for the profile.", len(video_ids))
        return self.crawl(channel_handle, video_ids)

    def crawl(self, channel_handle: str, video_ids: List[str]) -> CrawlResult:
        """
        Core crawl loop. One video is fully resolved before the next starts.

        Args:
            channel_handle: Channel the videos belong to
            video_ids: Discovered ids, in discovery order

        Returns:
            CrawlResult
        """
        if self._started_at is None:
            self._started_at = datetime.now().isoformat()

        self.frontier.seed(video_ids)
        completed = 0
        skipped = 0
        failed = 0
        no_transcript: List[str] = []

        while self._keep_going():
            video_id = self.frontier.dequeue()
            if video_id is None:
                break
            self.frontier.mark_visited(video_id)

            task = VideoTask(video_id=video_id, channel_handle=channel_handle)
            logger.info("Processing video: %s", task.url)

            if not self.config.force and self.store.exists(channel_handle, video_id):
                logger.info("-> Transcript already exists for %s. Skipping.", video_id)
                skipped += 1
                # Only processed videos count against max_videos
                self.frontier.release(video_id)
                continue

            # Must be visible to the shutdown handler before the pipeline starts
            self.crawl_state.begin(task)
            result = self.pipeline.acquire(video_id)

            if result.found:
                try:
                    artifact = self.store.save(channel_handle, video_id, result.transcript)
                    self.crawl_state.mark_saved()
                    completed += 1
                    logger.info("-> Transcript found for %s [saved to %s]", video_id, artifact.path)
                except PersistenceError as e:
                    failed += 1
                    logger.error("-> Could not save transcript for %s: %s", video_id, e)
            else:
                no_transcript.append(video_id)
                logger.info("-> No transcript available.")

            self.crawl_state.clear()
            self.rate_limiter.record_job()

            if self.frontier.has_pending() and self._keep_going():
                self.rate_limiter.wait()

        if self._stopped:
            logger.info("Crawl stopped by user")

        result = self._create_result(
            channel_handle=channel_handle,
            total_discovered=len(video_ids),
            total_completed=completed,
            total_skipped=skipped,
            total_failed=failed,
            no_transcript=no_transcript
        )
        logger.info("Crawling finished. Processed %d videos.", result.total_processed)
        return result

    def stop(self):
        """Stop at the next job boundary."""
        self._stopped = True

    def close(self):
        """Release the browser."""
        self.browser.close()

    def get_status(self) -> dict:
        """
        Get current crawl status and statistics.

        Returns:
            Dict with status info
        """
        return {
            'frontier': self.frontier.get_stats(),
            'rate_limiter': self.rate_limiter.get_stats(),
            'storage': self.store.get_stats(),
            'current_video': self.crawl_state.current_video_id,
            'stopped': self._stopped
        }

    def _keep_going(self) -> bool:
        if self._stopped:
            return False
        if self._should_continue is not None and not self._should_continue():
            self._stopped = True
            return False
        return True

    def _create_result(
        self,
        channel_handle: str,
        total_discovered: int,
        total_completed: int,
        total_skipped: int,
        total_failed: int,
        no_transcript: List[str]
    ) -> CrawlResult:
        """Create CrawlResult with calculated fields."""
        completed_at = datetime.now().isoformat()

        duration = 0.0
        if self._started_at:
            start = datetime.fromisoformat(self._started_at)
            end = datetime.fromisoformat(completed_at)
            duration = (end - start).total_seconds()

        videos_per_hour = 0.0
        if duration > 0:
            videos_per_hour = total_completed / (duration / 3600)

        return CrawlResult(
            success=not self._stopped and total_failed == 0,
            channel_handle=channel_handle,
            started_at=self._started_at or completed_at,
            completed_at=completed_at,
            total_discovered=total_discovered,
            total_completed=total_completed,
            total_skipped=total_skipped,
            total_failed=total_failed,
            no_transcript=no_transcript,
            stopped=self._stopped,
            duration_seconds=duration,
            videos_per_hour=videos_per_hour
        )
