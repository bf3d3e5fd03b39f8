"""
Tests for the crawl frontier: ordering, de-duplication and the job cap.
"""

from transcript_scraper.resilience.frontier import Frontier


def drain(frontier):
    ids = []
    while True:
        video_id = frontier.dequeue()
        if video_id is None:
            return ids
        frontier.mark_visited(video_id)
        ids.append(video_id)


class TestFrontier:

    def test_yields_unique_ids_in_first_seen_order(self):
        frontier = Frontier(max_jobs=100)
        frontier.seed(["aaa", "bbb", "aaa", "ccc", "bbb"])

        assert drain(frontier) == ["aaa", "bbb", "ccc"]
        assert frontier.visited == {"aaa", "bbb", "ccc"}

    def test_seed_returns_number_added(self):
        frontier = Frontier()
        assert frontier.seed(["a", "b", "a"]) == 2
        assert frontier.seed(["b", "c"]) == 1

    def test_reseeding_visited_ids_is_ignored(self):
        frontier = Frontier()
        frontier.seed(["a", "b"])
        drain(frontier)

        assert frontier.seed(["a", "b", "c"]) == 1
        assert drain(frontier) == ["c"]

    def test_job_cap_bounds_dequeues(self):
        frontier = Frontier(max_jobs=2)
        frontier.seed(["a", "b", "c"])

        assert drain(frontier) == ["a", "b"]
        assert frontier.dequeue() is None
        assert not frontier.is_visited("c")
        assert len(frontier) == 1

    def test_has_pending_respects_cap(self):
        frontier = Frontier(max_jobs=1)
        frontier.seed(["a", "b"])
        assert frontier.has_pending()

        frontier.mark_visited(frontier.dequeue())
        assert not frontier.has_pending()

    def test_released_slot_is_reusable(self):
        frontier = Frontier(max_jobs=1)
        frontier.seed(["a", "b"])

        skipped = frontier.dequeue()
        frontier.mark_visited(skipped)
        frontier.release(skipped)

        assert frontier.has_pending()
        assert drain(frontier) == ["b"]
        assert frontier.is_visited("a")
        assert frontier.dequeue() is None

    def test_mark_visited_removes_queued_id(self):
        frontier = Frontier()
        frontier.seed(["a", "b"])
        frontier.mark_visited("b")

        assert drain(frontier) == ["a"]

    def test_empty_frontier(self):
        frontier = Frontier()
        assert frontier.dequeue() is None
        assert not frontier.has_pending()
        assert frontier.get_stats() == {'pending': 0, 'visited': 0, 'dequeued': 0, 'max_jobs': 100}
