"""
Configuration dataclasses for the channel transcript scraper.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, List


@dataclass
class RateLimitConfig:
    """Bounds for the randomized delay between jobs (seconds)."""
    min_delay: float = 11.0
    max_delay: float = 73.0


@dataclass
class BrowserConfig:
    """Browser automation settings and UI wait policy."""
    headless: bool = True
    page_load_wait: float = 3.0
    affordance_timeout: float = 5.0
    ui_settle: float = 1.0

    # Discovery scrolling stops once two consecutive heights match
    scroll_pause: float = 2.0
    max_scrolls: int = 500


@dataclass
class StorageConfig:
    """Where artifacts and the consolidated export are written."""
    output_dir: str = "TRANSCRIPTIONS"
    consolidated_file: str = "consolidated_transcripts.txt"
    manifest_file: str = "manifest.json"


@dataclass
class ScraperConfig:
    """Main configuration for the scraper system."""
    # Job cap per run
    max_videos: int = 100

    # Save again even when a transcript already exists
    force: bool = False

    languages: List[str] = field(default_factory=lambda: ['en'])

    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    # External fallback extractor (command takes precedence over URL)
    fallback_command: Optional[str] = None
    fallback_url: Optional[str] = None
    fallback_timeout: float = 120.0

    # Only used by metadata lookups, which this tool does not perform
    youtube_api_key: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ScraperConfig":
        """
        Build a configuration from environment variables.

        Call after load_dotenv() so values from .env are visible.
        """
        config = cls()
        output_dir = os.getenv('TRANSCRIPTS_DIR')
        if output_dir:
            config.storage.output_dir = output_dir
        config.fallback_command = os.getenv('FALLBACK_EXTRACTOR_CMD') or None
        config.fallback_url = os.getenv('FALLBACK_EXTRACTOR_URL') or None
        config.youtube_api_key = os.getenv('YOUTUBE_API_KEY') or None
        return config

    def validate(self):
        """Raise ValueError for settings the crawl cannot run with."""
        if self.max_videos <= 0:
            raise ValueError(f"max_videos must be positive, got {self.max_videos}")
        if self.rate_limit.min_delay < 0:
            raise ValueError("min_delay cannot be negative")
        if self.rate_limit.min_delay > self.rate_limit.max_delay:
            raise ValueError(
                f"min_delay ({self.rate_limit.min_delay}) is greater than "
                f"max_delay ({self.rate_limit.max_delay})"
            )
        if self.browser.affordance_timeout <= 0:
            raise ValueError("affordance_timeout must be positive")
