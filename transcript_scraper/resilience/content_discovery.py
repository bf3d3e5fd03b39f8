"""
Content discovery for finding every video on a channel.
Scrolls the channel's Videos tab until it stops growing, then reads the links.
"""

import logging
import time
from typing import List, TYPE_CHECKING

from bs4 import BeautifulSoup

from ..exceptions import DiscoveryError
from ..utils import extract_video_id_from_url

if TYPE_CHECKING:
    from ..youtube_browser import YouTubeBrowser

logger = logging.getLogger(__name__)


def extract_video_ids(html: str) -> List[str]:
    """
    Collect unique video ids from watch links, in page order.

    Args:
        html: Page source

    Returns:
        List of 11-character video ids
    """
    soup = BeautifulSoup(html, 'html.parser')
    video_ids = []
    seen = set()
    for link in soup.select('a[href*="/watch?v="]'):
        video_id = extract_video_id_from_url(link['href'])
        if video_id and video_id not in seen:
            seen.add(video_id)
            video_ids.append(video_id)
    return video_ids


class ChannelDiscovery:
    """Discovers all video ids on a channel's Videos page."""

    def __init__(
        self,
        browser: "YouTubeBrowser",
        scroll_pause: float = 2.0,
        max_scrolls: int = 500
    ):
        """
        Initialize with the browser used for page fetching.

        Args:
            browser: YouTubeBrowser instance
            scroll_pause: Seconds to let new content load after each scroll
            max_scrolls: Upper bound on scroll operations per channel
        """
        self.browser = browser
        self.scroll_pause = scroll_pause
        self.max_scrolls = max_scrolls

    def scroll_until_stable(self) -> int:
        """
        Scroll to the bottom until two consecutive heights are equal.

        Returns:
            Number of scroll operations performed
        """
        scrolls = 0
        while scrolls < self.max_scrolls:
            previous_height = self.browser.scroll_height()
            self.browser.scroll_to_bottom()
            time.sleep(self.scroll_pause)
            scrolls += 1
            new_height = self.browser.scroll_height()
            if new_height == previous_height:
                break
        else:
            logger.warning("Stopped scrolling after %d scrolls; the page kept growing", scrolls)
        return scrolls

    def get_video_ids(self, channel_url: str) -> List[str]:
        """
        Enumerate a channel's videos, top of the page first.

        Any failure is logged and yields an empty list, so the crawl simply
        has nothing to do.
        """
        try:
            return self._discover(channel_url)
        except Exception as e:
            logger.error("Discovery failed for %s: %s", channel_url, e)
            return []

    def _discover(self, channel_url: str) -> List[str]:
        videos_page = channel_url.rstrip('/') + '/videos'
        try:
            self.browser.open(videos_page)
        except Exception as e:
            raise DiscoveryError(f"Could not open {videos_page}: {e}") from e

        try:
            scrolls = self.scroll_until_stable()
            logger.debug("Scrolled %d times on %s", scrolls, videos_page)
        except Exception as e:
            # Keep whatever loaded before scrolling broke
            logger.error("Error during scrolling: %s", e)

        video_ids = extract_video_ids(self.browser.page_source)
        logger.info("Found %d videos on %s", len(video_ids), videos_page)
        return video_ids
