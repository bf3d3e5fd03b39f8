"""
Frontier of discovered video ids for the current run.
FIFO, de-duplicated, never re-enqueues, bounded by a job cap.
"""

from collections import deque
from typing import Deque, Iterable, Optional, Set


class Frontier:
    """Queue of video ids that have not been processed yet."""

    def __init__(self, max_jobs: int = 100):
        """
        Initialize an empty frontier.

        Args:
            max_jobs: Maximum number of dequeues allowed in this run
        """
        self.max_jobs = max_jobs
        self._queue: Deque[str] = deque()
        self._queued: Set[str] = set()
        self._visited: Set[str] = set()
        self._dequeued = 0

    def seed(self, ids: Iterable[str]) -> int:
        """
        Add ids in order, dropping any already queued or visited.

        Returns:
            Number of ids actually added
        """
        added = 0
        for video_id in ids:
            if not video_id or video_id in self._queued or video_id in self._visited:
                continue
            self._queue.append(video_id)
            self._queued.add(video_id)
            added += 1
        return added

    def dequeue(self) -> Optional[str]:
        """
        Next unvisited id in first-seen order.

        Returns:
            The id, or None when the queue is empty or the job cap is reached
        """
        if self._dequeued >= self.max_jobs:
            return None

        while self._queue:
            video_id = self._queue.popleft()
            self._queued.discard(video_id)
            if video_id in self._visited:
                continue
            self._dequeued += 1
            return video_id
        return None

    def release(self, video_id: str):
        """
        Give back the job slot of a dequeued id that needed no work.

        The id stays visited; only the cap counter is returned.
        """
        if self._dequeued > 0:
            self._dequeued -= 1

    def mark_visited(self, video_id: str):
        """Record an id as processed so it is never yielded again this run."""
        self._visited.add(video_id)
        if video_id in self._queued:
            self._queued.discard(video_id)
            self._queue.remove(video_id)

    def has_pending(self) -> bool:
        """True if another dequeue() would return an id."""
        if self._dequeued >= self.max_jobs:
            return False
        return any(v not in self._visited for v in self._queue)

    def is_visited(self, video_id: str) -> bool:
        return video_id in self._visited

    @property
    def visited(self) -> Set[str]:
        return set(self._visited)

    def __len__(self) -> int:
        return len(self._queue)

    def get_stats(self) -> dict:
        return {
            'pending': len(self._queue),
            'visited': len(self._visited),
            'dequeued': self._dequeued,
            'max_jobs': self.max_jobs,
        }
