"""
Data models for the channel transcript scraper.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .utils import video_url


@dataclass(frozen=True)
class VideoTask:
    """One discovered video waiting for a transcript."""
    video_id: str
    channel_handle: str

    @property
    def url(self) -> str:
        return video_url(self.video_id)


@dataclass
class TranscriptArtifact:
    """A transcript persisted to disk."""
    channel_handle: str
    video_id: str
    content: str
    created_at: str
    path: Optional[Path] = None


@dataclass
class ExtractionAttempt:
    """Outcome of one strategy for one video. Never persisted."""
    strategy: str
    success: bool
    reason: str = ""
    duration_seconds: float = 0.0


@dataclass
class AcquisitionResult:
    """Result of running the whole fallback chain for one video."""
    video_id: str
    transcript: Optional[str] = None
    strategy: Optional[str] = None
    attempts: List[ExtractionAttempt] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.transcript)


class CrawlState:
    """
    The video the crawl loop is working on right now.

    Written only by the crawl loop and read by the shutdown handler. There is
    a single thread of control, so no lock is taken; ``begin`` must be called
    before the pipeline runs so an interrupt never sees a stale task.
    """

    def __init__(self):
        self._current: Optional[VideoTask] = None
        self._saved = False

    def begin(self, task: VideoTask):
        self._current = task
        self._saved = False

    def mark_saved(self):
        """The current task's transcript has been written."""
        self._saved = True

    def clear(self):
        self._current = None
        self._saved = False

    def snapshot(self) -> Optional[VideoTask]:
        """Return the in-flight task (immutable) or None."""
        return self._current

    @property
    def saved(self) -> bool:
        return self._saved

    @property
    def current_video_id(self) -> Optional[str]:
        return self._current.video_id if self._current else None

    @property
    def current_channel_handle(self) -> Optional[str]:
        return self._current.channel_handle if self._current else None


@dataclass
class CrawlResult:
    """Summary of one crawl run."""
    success: bool
    channel_handle: str
    started_at: str
    completed_at: str
    total_discovered: int
    total_completed: int
    total_skipped: int
    total_failed: int
    no_transcript: List[str] = field(default_factory=list)
    stopped: bool = False
    duration_seconds: float = 0.0
    videos_per_hour: float = 0.0

    @property
    def total_processed(self) -> int:
        """Jobs that went through the pipeline (saved, failed to save or missing)."""
        return self.total_completed + self.total_failed + len(self.no_transcript)
