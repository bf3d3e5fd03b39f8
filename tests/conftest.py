import pytest

from transcript_scraper.config import StorageConfig
from transcript_scraper.exceptions import StrategyError
from transcript_scraper.storage import TranscriptStore
from transcript_scraper.transcript_pipeline import TranscriptStrategy


class FakeStrategy(TranscriptStrategy):
    """Strategy returning canned text per video id, failing otherwise."""

    def __init__(self, name, results=None, default=None):
        self.name = name
        self.results = results or {}
        self.default = default
        self.calls = []

    def __call__(self, video_id):
        self.calls.append(video_id)
        text = self.results.get(video_id, self.default)
        if text is None:
            raise StrategyError(self.name, "no transcript")
        return text


@pytest.fixture
def storage_config(tmp_path):
    return StorageConfig(
        output_dir=str(tmp_path / "TRANSCRIPTIONS"),
        consolidated_file=str(tmp_path / "consolidated_transcripts.txt"),
    )


@pytest.fixture
def store(storage_config):
    return TranscriptStore(storage_config)
