"""
Channel transcript scraper: crawl a YouTube channel and save a transcript per video.
"""

from .config import ScraperConfig, RateLimitConfig, BrowserConfig, StorageConfig
from .scraper_controller import ScraperController
from .storage import TranscriptStore
from .transcript_pipeline import TranscriptPipeline, build_pipeline

__version__ = "0.1.0"

__all__ = [
    'ScraperConfig',
    'RateLimitConfig',
    'BrowserConfig',
    'StorageConfig',
    'ScraperController',
    'TranscriptStore',
    'TranscriptPipeline',
    'build_pipeline',
]
