"""
YouTube browser session.
Thin wrapper around a SeleniumBase driver (UC mode) used by discovery and the
rendered-page transcript strategy.
"""

import logging
import os
import sys
import time
from typing import List, Optional

from seleniumbase import Driver
from selenium.common.exceptions import (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    TimeoutException,
    WebDriverException,
)
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from .config import BrowserConfig
from .utils import BASE_URL, extract_video_id_from_url

logger = logging.getLogger(__name__)


class YouTubeBrowser:
    """Lazily started browser shared by every browser-backed component."""

    def __init__(self, config: Optional[BrowserConfig] = None):
        self.config = config or BrowserConfig()
        self.driver = None
        self._snapshot_video_id: Optional[str] = None
        self._snapshot_html: Optional[str] = None

    def _init_driver(self):
        """Initialize SeleniumBase Driver with UC mode"""
        if self.driver is not None:
            return

        logger.info("Initializing browser (headless=%s)...", self.config.headless)
        if sys.platform.startswith('linux'):
            # Snap-packaged Chromium breaks undetected-chromedriver
            os.environ['SNAP_NAME'] = ''
            os.environ['SNAP'] = ''
            os.environ['SNAP_INSTANCE_NAME'] = ''

        self.driver = Driver(uc=True, headless=self.config.headless)
        self.driver.get(BASE_URL)
        time.sleep(self.config.page_load_wait)

    def _ensure_driver(self):
        """Ensure driver is alive, recreate if needed"""
        if self.driver is None:
            self._init_driver()
            return
        try:
            self.driver.current_url
        except (ConnectionRefusedError, OSError, WebDriverException) as e:
            logger.warning("Browser connection lost (%s), restarting...", type(e).__name__)
            self._close_driver()
            self._init_driver()

    def _close_driver(self):
        """Close WebDriver"""
        if self.driver:
            try:
                self.driver.quit()
            except (WebDriverException, OSError) as e:
                logger.debug("Error while quitting driver: %s", e)
            self.driver = None

    def open(self, url: str):
        """Navigate to a URL and give the page time to render."""
        self._ensure_driver()
        logger.info("Navigating to %s", url)
        self.driver.get(url)
        time.sleep(self.config.page_load_wait)

        video_id = extract_video_id_from_url(url)
        if video_id:
            self._snapshot_video_id = video_id
            self._snapshot_html = None

    @property
    def page_source(self) -> str:
        self._ensure_driver()
        return self.driver.page_source

    def capture_snapshot(self, video_id: str) -> Optional[str]:
        """Remember the current page HTML as the snapshot for a video."""
        if self.driver is None or self._snapshot_video_id != video_id:
            return None
        try:
            self._snapshot_html = self.driver.page_source
        except WebDriverException as e:
            logger.debug("Could not capture page snapshot for %s: %s", video_id, e)
            self._snapshot_html = None
        return self._snapshot_html

    def snapshot_for(self, video_id: str) -> Optional[str]:
        """HTML captured for this video by the last page visit, if any."""
        if self._snapshot_video_id != video_id:
            return None
        return self._snapshot_html

    def scroll_height(self) -> int:
        return int(self.driver.execute_script("return document.documentElement.scrollHeight") or 0)

    def scroll_to_bottom(self):
        self.driver.execute_script("window.scrollTo(0, document.documentElement.scrollHeight);")

    def wait_for_clickable(self, selector: str, timeout: Optional[float] = None):
        """
        Wait for a clickable element.

        Returns:
            The element, or None if it did not appear within the timeout
        """
        timeout = timeout or self.config.affordance_timeout
        try:
            return WebDriverWait(self.driver, timeout).until(
                EC.element_to_be_clickable((By.CSS_SELECTOR, selector))
            )
        except TimeoutException:
            return None

    def wait_for_present(self, selector: str, timeout: Optional[float] = None):
        """Like wait_for_clickable, for elements that only need to exist."""
        timeout = timeout or self.config.affordance_timeout
        try:
            return WebDriverWait(self.driver, timeout).until(
                EC.presence_of_element_located((By.CSS_SELECTOR, selector))
            )
        except TimeoutException:
            return None

    def find_all(self, selector: str) -> List:
        return self.driver.find_elements(By.CSS_SELECTOR, selector)

    def click(self, element) -> bool:
        """Click an element, falling back to a JavaScript click."""
        try:
            element.click()
        except (ElementClickInterceptedException, ElementNotInteractableException):
            try:
                self.driver.execute_script("arguments[0].click();", element)
            except WebDriverException as e:
                logger.debug("JavaScript click failed: %s", e)
                return False
        time.sleep(self.config.ui_settle)
        return True

    def close(self):
        """Clean up resources"""
        self._close_driver()
        self._snapshot_video_id = None
        self._snapshot_html = None
