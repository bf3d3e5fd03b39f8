"""
Graceful shutdown on SIGINT/SIGTERM.

The signal handler unwinds the crawl by raising ShutdownRequested. The entry
point then calls shutdown(), which finishes the video that was in flight,
consolidates everything on disk and reports the exit code.

States only move forward: RUNNING -> SHUTTING_DOWN -> TERMINATED.
"""

import logging
import signal
import sys
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from ..exceptions import ShutdownRequested
from ..models import CrawlState

if TYPE_CHECKING:
    from ..storage import TranscriptStore
    from ..transcript_pipeline import TranscriptPipeline

logger = logging.getLogger(__name__)

RUNNING = "running"
SHUTTING_DOWN = "shutting_down"
TERMINATED = "terminated"


class ShutdownCoordinator:
    """Drains the in-flight job and consolidates before the process exits."""

    def __init__(
        self,
        crawl_state: CrawlState,
        pipeline: "TranscriptPipeline",
        store: "TranscriptStore",
        consolidated_path: Optional[Path] = None,
        force: bool = False
    ):
        """
        Args:
            crawl_state: Cell written by the crawl loop
            pipeline: Pipeline used to finish the in-flight video
            store: Where the drained transcript is saved and consolidated from
            consolidated_path: Export file, defaults to the store's setting
            force: Save the drained video even if a transcript already exists
        """
        self.crawl_state = crawl_state
        self.pipeline = pipeline
        self.store = store
        self.consolidated_path = consolidated_path
        self.force = force
        self._status = RUNNING
        self.drained_video_id: Optional[str] = None

    @property
    def status(self) -> str:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status == RUNNING

    def install(self):
        """Register the handler for SIGINT, and SIGTERM where supported."""
        signal.signal(signal.SIGINT, self.handle_signal)
        # SIGTERM is not reliably available on Windows
        if hasattr(signal, 'SIGTERM') and sys.platform != 'win32':
            signal.signal(signal.SIGTERM, self.handle_signal)

    def handle_signal(self, signum, frame):
        """Signal handler: leave RUNNING and unwind the crawl."""
        if self._status != RUNNING:
            logger.warning("Shutdown already in progress, ignoring signal %s", signum)
            return

        print("\n\n" + "=" * 60)
        print("STOP SIGNAL RECEIVED - COMPLETING CURRENT VIDEO BEFORE EXITING")
        print("=" * 60)
        self._status = SHUTTING_DOWN
        raise ShutdownRequested(signum)

    def shutdown(self) -> int:
        """
        Finish the in-flight video, consolidate, and terminate.

        Never raises; every failure is logged.

        Returns:
            Process exit code
        """
        if self._status == TERMINATED:
            return 0
        self._status = SHUTTING_DOWN

        try:
            self._drain()
        except Exception as e:
            logger.error("Error while finishing in-flight video: %s", e)

        try:
            self.store.consolidate(self.consolidated_path)
        except Exception as e:
            logger.error("Error during consolidation: %s", e)

        self._status = TERMINATED
        logger.info("Exiting program.")
        return 0

    def _drain(self):
        task = self.crawl_state.snapshot()
        if task is None:
            logger.info("No video in flight")
            return

        if self.crawl_state.saved:
            logger.info("Transcript for %s was saved before the interrupt", task.video_id)
            self.crawl_state.clear()
            return

        if not self.force and self.store.exists(task.channel_handle, task.video_id):
            # Saved by an earlier run
            logger.info("Transcript for %s already saved", task.video_id)
            self.crawl_state.clear()
            return

        logger.info("Finishing transcript download for video ID: %s", task.video_id)
        self.drained_video_id = task.video_id
        result = self.pipeline.acquire(task.video_id)
        if result.found:
            self.store.save(task.channel_handle, task.video_id, result.transcript)
        else:
            logger.info("No transcript available for %s", task.video_id)
        self.crawl_state.clear()
