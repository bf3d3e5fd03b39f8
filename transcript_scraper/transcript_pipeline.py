"""
Transcript acquisition pipeline.

Strategies are tried in a fixed order and the first non-empty transcript wins:

    transcript_api -> rendered_ui (action menu, then description panel) -> external_tool

A failing strategy is logged and skipped; when every strategy fails the
result carries no transcript and nothing gets persisted.
"""

import logging
import time
from typing import List, Optional, Sequence, TYPE_CHECKING

from bs4 import BeautifulSoup

from .collaborators import (
    FallbackExtractor,
    TranscriptFetcher,
    YouTubeTranscriptApiFetcher,
    create_fallback_extractor,
)
from .exceptions import AffordanceNotFound, StrategyError
from .models import AcquisitionResult, ExtractionAttempt
from .utils import video_url

if TYPE_CHECKING:
    from .config import ScraperConfig
    from .youtube_browser import YouTubeBrowser

logger = logging.getLogger(__name__)

TRANSCRIPT_PANEL_SELECTOR = 'ytd-transcript-renderer'
TRANSCRIPT_SEGMENT_SELECTOR = 'ytd-transcript-segment-renderer'


def parse_transcript_panel(html: str) -> Optional[str]:
    """
    Pull transcript text out of a rendered watch page.

    Each segment becomes one "timestamp text" line. If the page has a panel
    but no segments, the panel's whole text is used.
    """
    soup = BeautifulSoup(html, 'html.parser')

    lines = []
    for segment in soup.select(TRANSCRIPT_SEGMENT_SELECTOR):
        text_elem = segment.select_one('.segment-text')
        text = (text_elem or segment).get_text(' ', strip=True)
        if not text:
            continue
        timestamp_elem = segment.select_one('.segment-timestamp')
        timestamp = timestamp_elem.get_text(strip=True) if timestamp_elem and text_elem else ''
        lines.append(f"{timestamp} {text}" if timestamp else text)

    if lines:
        return '\n'.join(lines)

    panel = soup.select_one(TRANSCRIPT_PANEL_SELECTOR)
    if panel:
        text = panel.get_text('\n', strip=True)
        return text or None
    return None


class TranscriptStrategy:
    """One way of getting a transcript. Returns text or raises StrategyError."""

    name = "strategy"

    def __call__(self, video_id: str) -> str:
        raise NotImplementedError

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"


class StructuredServiceStrategy(TranscriptStrategy):
    """Single call to the structured transcript service. Fast, easily blocked."""

    name = "transcript_api"

    def __init__(self, fetcher: TranscriptFetcher):
        self.fetcher = fetcher

    def __call__(self, video_id: str) -> str:
        try:
            text = self.fetcher.fetch_transcript(video_id)
        except Exception as e:
            raise StrategyError(self.name, f"{type(e).__name__}: {e}") from e
        if not text or not text.strip():
            raise StrategyError(self.name, "service returned an empty transcript")
        return text


# ----------------------------------------------------------------------
# Rendered page
# ----------------------------------------------------------------------

class UiPath:
    """A sequence of clicks that opens the transcript panel."""

    name = "ui_path"

    def open_transcript(self, browser: "YouTubeBrowser"):
        """Open the panel or raise AffordanceNotFound."""
        raise NotImplementedError


class ActionMenuPath(UiPath):
    """Current layout: "More actions" menu -> "Show transcript" item."""

    name = "action_menu"
    MENU_BUTTON = (
        'ytd-watch-metadata button[aria-label="More actions"], '
        '#actions button[aria-label="More actions"]'
    )
    MENU_ITEMS = 'ytd-menu-service-item-renderer, tp-yt-paper-listbox tp-yt-paper-item'

    def open_transcript(self, browser: "YouTubeBrowser"):
        button = browser.wait_for_clickable(self.MENU_BUTTON)
        if button is None:
            raise AffordanceNotFound(self.name, "'More actions' button not found")
        browser.click(button)

        if browser.wait_for_present(self.MENU_ITEMS) is None:
            raise AffordanceNotFound(self.name, "action menu did not open")

        for item in browser.find_all(self.MENU_ITEMS):
            if 'transcript' in (item.text or '').lower():
                browser.click(item)
                return
        raise AffordanceNotFound(self.name, "no transcript item in action menu")


class DescriptionPanelPath(UiPath):
    """Legacy layout: expand the description, then "Show transcript"."""

    name = "description_panel"
    EXPAND_BUTTON = (
        'tp-yt-paper-button#expand, tp-yt-paper-button#more, '
        '#description-inline-expander #expand'
    )
    SHOW_TRANSCRIPT_BUTTON = (
        'ytd-video-description-transcript-section-renderer button, '
        'button[aria-label*="Show transcript"], '
        'tp-yt-paper-button[aria-label*="Show transcript"]'
    )

    def open_transcript(self, browser: "YouTubeBrowser"):
        expand = browser.wait_for_clickable(self.EXPAND_BUTTON)
        if expand is not None:
            browser.click(expand)
        else:
            # Some layouts show the transcript button without expanding
            logger.debug("Description 'more' button not found")

        button = browser.wait_for_clickable(self.SHOW_TRANSCRIPT_BUTTON)
        if button is None:
            raise AffordanceNotFound(self.name, "'Show transcript' button not found")
        browser.click(button)


class RenderedPageStrategy(TranscriptStrategy):
    """Open the watch page and read the transcript panel through the UI."""

    name = "rendered_ui"

    def __init__(self, browser: "YouTubeBrowser", paths: Optional[Sequence[UiPath]] = None):
        self.browser = browser
        self.paths = list(paths) if paths is not None else [ActionMenuPath(), DescriptionPanelPath()]

    def __call__(self, video_id: str) -> str:
        try:
            self.browser.open(video_url(video_id))
        except Exception as e:
            raise StrategyError(self.name, f"navigation failed: {e}") from e
        self.browser.capture_snapshot(video_id)

        reasons = []
        for path in self.paths:
            try:
                path.open_transcript(self.browser)
                logger.debug("Opened transcript panel via %s", path.name)
                break
            except StrategyError as e:
                reasons.append(f"{path.name}: {e.reason}")
            except Exception as e:
                reasons.append(f"{path.name}: {type(e).__name__}: {e}")
            logger.info("  UI path %s unavailable for %s", path.name, video_id)
        else:
            raise StrategyError(self.name, "; ".join(reasons) or "no UI paths configured")

        if self.browser.wait_for_present(TRANSCRIPT_SEGMENT_SELECTOR) is None:
            raise AffordanceNotFound(self.name, "transcript panel did not load")

        text = parse_transcript_panel(self.browser.page_source)
        if not text:
            raise StrategyError(self.name, "transcript panel was empty")
        return text


# ----------------------------------------------------------------------
# External tool
# ----------------------------------------------------------------------

def transcript_from_response(response: dict) -> Optional[str]:
    """
    Read the transcript field of a fallback response.

    Accepts a string, or a list of strings / {"text": ...} segments.
    """
    value = response.get('transcript')
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, list):
        parts = []
        for item in value:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and isinstance(item.get('text'), str):
                parts.append(item['text'])
        text = '\n'.join(p for p in parts if p.strip())
        return text or None
    return None


class ExternalFallbackStrategy(TranscriptStrategy):
    """Hand the video id (and page snapshot, if any) to an external extractor."""

    name = "external_tool"

    def __init__(self, extractor: Optional[FallbackExtractor], browser: Optional["YouTubeBrowser"] = None):
        self.extractor = extractor
        self.browser = browser

    def __call__(self, video_id: str) -> str:
        if self.extractor is None:
            raise StrategyError(self.name, "no fallback extractor configured")

        html = self.browser.snapshot_for(video_id) if self.browser else None
        try:
            response = self.extractor.extract(video_id, html=html)
        except Exception as e:
            raise StrategyError(self.name, f"{type(e).__name__}: {e}") from e

        text = transcript_from_response(response)
        if not text:
            raise StrategyError(self.name, "response has no transcript field")
        return text


# ----------------------------------------------------------------------
# Pipeline
# ----------------------------------------------------------------------

class TranscriptPipeline:
    """Runs strategies in order, stopping at the first transcript."""

    def __init__(self, strategies: Sequence[TranscriptStrategy]):
        self.strategies = list(strategies)

    def acquire(self, video_id: str) -> AcquisitionResult:
        """
        Try each strategy once.

        Returns:
            AcquisitionResult; ``transcript`` is None when every strategy failed
        """
        result = AcquisitionResult(video_id=video_id)

        for strategy in self.strategies:
            started = time.monotonic()
            try:
                text = strategy(video_id)
            except StrategyError as e:
                reason = e.reason
            except Exception as e:
                reason = f"{type(e).__name__}: {e}"
            else:
                if text and text.strip():
                    result.attempts.append(ExtractionAttempt(
                        strategy=strategy.name,
                        success=True,
                        duration_seconds=time.monotonic() - started,
                    ))
                    result.transcript = text
                    result.strategy = strategy.name
                    logger.info("Transcript for %s acquired via %s", video_id, strategy.name)
                    return result
                reason = "empty result"

            result.attempts.append(ExtractionAttempt(
                strategy=strategy.name,
                success=False,
                reason=reason,
                duration_seconds=time.monotonic() - started,
            ))
            logger.warning("  %s failed for %s: %s", strategy.name, video_id, reason)

        logger.info("No transcript available for %s", video_id)
        return result


def build_pipeline(
    config: "ScraperConfig",
    browser: "YouTubeBrowser",
    fetcher: Optional[TranscriptFetcher] = None,
    extractor: Optional[FallbackExtractor] = None
) -> TranscriptPipeline:
    """Assemble the default three-tier pipeline from configuration."""
    if fetcher is None:
        fetcher = YouTubeTranscriptApiFetcher(languages=config.languages)
    if extractor is None:
        extractor = create_fallback_extractor(
            config.fallback_command, config.fallback_url, timeout=config.fallback_timeout
        )

    return TranscriptPipeline([
        StructuredServiceStrategy(fetcher),
        RenderedPageStrategy(browser),
        ExternalFallbackStrategy(extractor, browser=browser),
    ])
