"""
Main entry point for the channel transcript scraper.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .config import ScraperConfig
from .exceptions import ShutdownRequested
from .models import CrawlResult
from .resilience.shutdown import ShutdownCoordinator
from .scraper_controller import ScraperController
from .storage import TranscriptStore
from .utils import HANDLE_SIGIL, is_valid_handle

logger = logging.getLogger(__name__)

NOISY_LOGGERS = ('urllib3', 'selenium', 'seleniumbase', 'undetected_chromedriver')


def setup_logging(level: str = "INFO"):
    """Console logging for the scraper; third-party chatter kept at WARNING."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s %(levelname)-7s %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def load_environment(env_path: Optional[Path] = None):
    """Load variables from .env if present, otherwise rely on the process environment."""
    env_path = env_path or Path.cwd() / '.env'
    if env_path.exists():
        load_dotenv(env_path)
        logger.debug("Loaded environment from %s", env_path)
    else:
        logger.debug("No .env file at %s, using system environment", env_path)


def prompt_for_handle() -> str:
    """Ask the operator for the channel handle to crawl."""
    try:
        return input(
            f"Enter the YouTube profile handle to start (e.g., {HANDLE_SIGIL}someyoutubechannel): "
        ).strip()
    except (EOFError, KeyboardInterrupt):
        print()
        return ""


def build_config(args: argparse.Namespace) -> ScraperConfig:
    """Environment defaults, overridden by command-line flags."""
    config = ScraperConfig.from_env()
    config.max_videos = args.max_videos
    config.force = args.force
    config.rate_limit.min_delay = args.min_delay
    config.rate_limit.max_delay = args.max_delay
    config.browser.headless = not args.visible
    if args.output_dir:
        config.storage.output_dir = args.output_dir
    if args.consolidated_file:
        config.storage.consolidated_file = args.consolidated_file
    if args.fallback_cmd:
        config.fallback_command = args.fallback_cmd
    if args.fallback_url:
        config.fallback_url = args.fallback_url
    if args.language:
        config.languages = args.language
    return config


def print_summary(result: CrawlResult):
    print("\n" + "=" * 60)
    print("CRAWL COMPLETE")
    print("=" * 60)
    print(f"Channel:       {result.channel_handle}")
    print(f"Success:       {result.success}")
    print(f"Duration:      {result.duration_seconds / 60:.1f} minutes")
    print(f"Discovered:    {result.total_discovered}")
    print(f"Saved:         {result.total_completed}")
    print(f"Skipped:       {result.total_skipped}")
    print(f"No transcript: {len(result.no_transcript)}")
    print(f"Save errors:   {result.total_failed}")
    print(f"Speed:         {result.videos_per_hour:.1f} videos/hour")

    if result.no_transcript:
        print(f"\nVideos without transcript ({len(result.no_transcript)}):")
        for video_id in result.no_transcript[:10]:
            print(f"  - {video_id}")
        if len(result.no_transcript) > 10:
            print(f"  ... and {len(result.no_transcript) - 10} more")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='YouTube channel transcript crawler',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Prompt for a handle, crawl up to 100 videos
  channel-transcripts

  # Crawl a channel with a visible browser
  channel-transcripts @somechannel --visible

  # Shorter delays and a bigger cap
  channel-transcripts @somechannel --max-videos 300 --min-delay 5 --max-delay 20

  # Only merge existing transcripts into one file
  channel-transcripts --consolidate-only

Press Ctrl+C to stop; the current video is finished before exiting.
"""
    )

    parser.add_argument(
        'handle',
        nargs='?',
        help=f'Channel handle starting with {HANDLE_SIGIL} (prompted for if omitted)'
    )

    # Crawl limits
    parser.add_argument(
        '--max-videos',
        type=int,
        default=100,
        help='Maximum videos to process in this run (default: 100)'
    )
    parser.add_argument(
        '--force',
        action='store_true',
        help='Save transcripts again even if they already exist'
    )

    # Rate limiting
    parser.add_argument(
        '--min-delay',
        type=float,
        default=11.0,
        help='Minimum delay between videos in seconds (default: 11)'
    )
    parser.add_argument(
        '--max-delay',
        type=float,
        default=73.0,
        help='Maximum delay between videos in seconds (default: 73)'
    )

    # Storage
    parser.add_argument(
        '--output-dir',
        type=str,
        help='Directory for transcript files (default: $TRANSCRIPTS_DIR or TRANSCRIPTIONS)'
    )
    parser.add_argument(
        '--consolidated-file',
        type=str,
        help='Path of the consolidated export (default: consolidated_transcripts.txt)'
    )
    parser.add_argument(
        '--consolidate-only',
        action='store_true',
        help='Merge existing transcripts and exit without crawling'
    )

    # Transcript sources
    parser.add_argument(
        '--language',
        action='append',
        help='Preferred caption language, repeatable (default: en)'
    )
    parser.add_argument(
        '--fallback-cmd',
        type=str,
        help='External extractor command; receives the video id, prints JSON'
    )
    parser.add_argument(
        '--fallback-url',
        type=str,
        help='External extractor HTTP endpoint accepting JSON POSTs'
    )

    # Browser settings
    parser.add_argument(
        '--visible',
        action='store_true',
        help='Show the browser window (default: headless)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Debug logging'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = 'DEBUG' if args.verbose else os.getenv('SCRAPER_LOG_LEVEL', 'INFO')
    setup_logging(level)
    load_environment()

    if args.consolidate_only:
        config = build_config(args)
        store = TranscriptStore(config.storage)
        output = store.consolidate()
        print(f"Consolidated transcripts saved to {output}")
        return 0

    print("YouTube Transcript Crawler")
    handle = args.handle or prompt_for_handle()
    if not is_valid_handle(handle):
        print(f"Invalid profile handle format. It should start with '{HANDLE_SIGIL}'. Exiting.")
        return 1

    config = build_config(args)
    try:
        config.validate()
    except ValueError as e:
        print(f"Invalid configuration: {e}")
        return 1

    if config.youtube_api_key:
        logger.debug("YOUTUBE_API_KEY is set; the transcript pipeline does not use it")

    coordinator: Optional[ShutdownCoordinator] = None
    controller = ScraperController(
        config,
        should_continue=lambda: coordinator is None or coordinator.is_running
    )
    coordinator = ShutdownCoordinator(
        controller.crawl_state,
        controller.pipeline,
        controller.store,
        force=config.force
    )
    coordinator.install()

    print("Press Ctrl+C to stop (the current video is finished first)\n")
    try:
        result = controller.run(handle)
        print_summary(result)
        return coordinator.shutdown()
    except ShutdownRequested:
        return coordinator.shutdown()
    finally:
        controller.close()


if __name__ == '__main__':
    sys.exit(main())
