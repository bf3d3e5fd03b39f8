"""
Simple runner - just run: python run_scraper.py

Usage:
    python run_scraper.py                     # Prompt for a channel handle
    python run_scraper.py @somechannel        # Crawl a channel
    python run_scraper.py @somechannel --visible   # Show browser window
    python run_scraper.py --consolidate-only  # Merge saved transcripts
"""
import sys

from transcript_scraper.main import main


if __name__ == '__main__':
    sys.exit(main())
