"""
Tests for the transcript fallback chain and its strategies.

Order under test: transcript_api -> rendered_ui -> external_tool
"""

from unittest.mock import Mock

import pytest

from transcript_scraper.config import ScraperConfig
from transcript_scraper.exceptions import AffordanceNotFound, ShutdownRequested, StrategyError
from transcript_scraper.transcript_pipeline import (
    ActionMenuPath,
    DescriptionPanelPath,
    ExternalFallbackStrategy,
    RenderedPageStrategy,
    StructuredServiceStrategy,
    TranscriptPipeline,
    build_pipeline,
    parse_transcript_panel,
    transcript_from_response,
)

from .conftest import FakeStrategy

VIDEO_ID = "dQw4w9WgXcQ"

PANEL_HTML = """
<html><body>
<ytd-transcript-renderer>
  <ytd-transcript-segment-renderer>
    <div class="segment-timestamp">0:01</div>
    <yt-formatted-string class="segment-text">never gonna give you up</yt-formatted-string>
  </ytd-transcript-segment-renderer>
  <ytd-transcript-segment-renderer>
    <div class="segment-timestamp">0:04</div>
    <yt-formatted-string class="segment-text">never gonna let you down</yt-formatted-string>
  </ytd-transcript-segment-renderer>
</ytd-transcript-renderer>
</body></html>
"""


class TestTranscriptPipeline:

    def test_first_success_short_circuits(self):
        first = FakeStrategy("transcript_api")
        second = FakeStrategy("rendered_ui", default="from the page")
        third = FakeStrategy("external_tool", default="from the tool")
        pipeline = TranscriptPipeline([first, second, third])

        result = pipeline.acquire(VIDEO_ID)

        assert result.transcript == "from the page"
        assert result.strategy == "rendered_ui"
        assert third.calls == []
        assert [a.success for a in result.attempts] == [False, True]

    def test_all_strategies_failing_is_absent(self):
        strategies = [FakeStrategy(n) for n in ("transcript_api", "rendered_ui", "external_tool")]
        pipeline = TranscriptPipeline(strategies)

        result = pipeline.acquire(VIDEO_ID)

        assert result.transcript is None
        assert not result.found
        assert [a.strategy for a in result.attempts] == ["transcript_api", "rendered_ui", "external_tool"]
        assert all(a.reason for a in result.attempts)

    def test_unexpected_exception_falls_through(self):
        broken = Mock(side_effect=RuntimeError("boom"))
        broken.name = "transcript_api"
        backup = FakeStrategy("rendered_ui", default="text")

        result = TranscriptPipeline([broken, backup]).acquire(VIDEO_ID)

        assert result.transcript == "text"
        assert "boom" in result.attempts[0].reason

    def test_blank_result_counts_as_failure(self):
        blank = FakeStrategy("transcript_api", default="   ")
        backup = FakeStrategy("rendered_ui", default="text")

        result = TranscriptPipeline([blank, backup]).acquire(VIDEO_ID)

        assert result.strategy == "rendered_ui"

    def test_shutdown_is_not_swallowed(self):
        interrupted = Mock(side_effect=ShutdownRequested(2))
        interrupted.name = "transcript_api"
        later = FakeStrategy("rendered_ui", default="text")

        with pytest.raises(ShutdownRequested):
            TranscriptPipeline([interrupted, later]).acquire(VIDEO_ID)
        assert later.calls == []

    def test_build_pipeline_order(self):
        pipeline = build_pipeline(ScraperConfig(), browser=Mock(), fetcher=Mock(), extractor=Mock())
        assert [s.name for s in pipeline.strategies] == ["transcript_api", "rendered_ui", "external_tool"]


class TestStructuredServiceStrategy:

    def test_returns_fetched_text(self):
        fetcher = Mock()
        fetcher.fetch_transcript.return_value = "hello"
        assert StructuredServiceStrategy(fetcher)(VIDEO_ID) == "hello"
        fetcher.fetch_transcript.assert_called_once_with(VIDEO_ID)

    def test_service_error_becomes_strategy_error(self):
        fetcher = Mock()
        fetcher.fetch_transcript.side_effect = ValueError("blocked")
        with pytest.raises(StrategyError) as exc:
            StructuredServiceStrategy(fetcher)(VIDEO_ID)
        assert "blocked" in exc.value.reason


class TestParseTranscriptPanel:

    def test_segments_with_timestamps(self):
        assert parse_transcript_panel(PANEL_HTML) == (
            "0:01 never gonna give you up\n0:04 never gonna let you down"
        )

    def test_panel_without_segments(self):
        html = "<ytd-transcript-renderer><p>plain text</p></ytd-transcript-renderer>"
        assert parse_transcript_panel(html) == "plain text"

    def test_no_panel(self):
        assert parse_transcript_panel("<html><body>nothing</body></html>") is None


def make_browser(html=PANEL_HTML):
    browser = Mock()
    browser.page_source = html
    browser.wait_for_present.return_value = object()
    return browser


class TestRenderedPageStrategy:

    def test_primary_path_success(self):
        browser = make_browser()
        primary = Mock(spec=ActionMenuPath)
        primary.name = "action_menu"
        secondary = Mock(spec=DescriptionPanelPath)
        secondary.name = "description_panel"

        text = RenderedPageStrategy(browser, paths=[primary, secondary])(VIDEO_ID)

        assert "never gonna give you up" in text
        browser.open.assert_called_once_with(f"https://www.youtube.com/watch?v={VIDEO_ID}")
        browser.capture_snapshot.assert_called_once_with(VIDEO_ID)
        secondary.open_transcript.assert_not_called()

    def test_falls_back_to_secondary_path(self):
        browser = make_browser()
        primary = Mock(spec=ActionMenuPath)
        primary.name = "action_menu"
        primary.open_transcript.side_effect = AffordanceNotFound("action_menu", "no button")
        secondary = Mock(spec=DescriptionPanelPath)
        secondary.name = "description_panel"

        text = RenderedPageStrategy(browser, paths=[primary, secondary])(VIDEO_ID)

        assert text
        secondary.open_transcript.assert_called_once_with(browser)

    def test_no_path_available(self):
        browser = make_browser()
        paths = []
        for name in ("action_menu", "description_panel"):
            path = Mock(spec=ActionMenuPath)
            path.name = name
            path.open_transcript.side_effect = AffordanceNotFound(name, "missing")
            paths.append(path)

        with pytest.raises(StrategyError) as exc:
            RenderedPageStrategy(browser, paths=paths)(VIDEO_ID)
        assert "action_menu" in exc.value.reason
        assert "description_panel" in exc.value.reason

    def test_panel_never_loads(self):
        browser = make_browser()
        browser.wait_for_present.return_value = None
        path = Mock(spec=ActionMenuPath)
        path.name = "action_menu"

        with pytest.raises(AffordanceNotFound):
            RenderedPageStrategy(browser, paths=[path])(VIDEO_ID)

    def test_navigation_failure(self):
        browser = make_browser()
        browser.open.side_effect = RuntimeError("net::ERR")

        with pytest.raises(StrategyError):
            RenderedPageStrategy(browser)(VIDEO_ID)


class TestUiPaths:

    def test_action_menu_clicks_transcript_item(self):
        browser = Mock()
        other = Mock(text="Save")
        transcript_item = Mock(text="Show transcript")
        browser.find_all.return_value = [other, transcript_item]

        ActionMenuPath().open_transcript(browser)

        browser.click.assert_called_with(transcript_item)

    def test_action_menu_without_button(self):
        browser = Mock()
        browser.wait_for_clickable.return_value = None
        with pytest.raises(AffordanceNotFound):
            ActionMenuPath().open_transcript(browser)

    def test_action_menu_without_transcript_item(self):
        browser = Mock()
        browser.find_all.return_value = [Mock(text="Report")]
        with pytest.raises(AffordanceNotFound):
            ActionMenuPath().open_transcript(browser)

    def test_description_panel_tolerates_missing_expand(self):
        browser = Mock()
        show = Mock()
        browser.wait_for_clickable.side_effect = [None, show]

        DescriptionPanelPath().open_transcript(browser)

        browser.click.assert_called_once_with(show)

    def test_description_panel_without_show_transcript(self):
        browser = Mock()
        browser.wait_for_clickable.side_effect = [Mock(), None]
        with pytest.raises(AffordanceNotFound):
            DescriptionPanelPath().open_transcript(browser)


class TestExternalFallbackStrategy:

    def test_passes_snapshot(self):
        browser = Mock()
        browser.snapshot_for.return_value = "<html/>"
        extractor = Mock()
        extractor.extract.return_value = {"transcript": "tool text"}

        assert ExternalFallbackStrategy(extractor, browser=browser)(VIDEO_ID) == "tool text"
        extractor.extract.assert_called_once_with(VIDEO_ID, html="<html/>")

    def test_missing_field_is_failure(self):
        extractor = Mock()
        extractor.extract.return_value = {"status": "ok"}
        with pytest.raises(StrategyError):
            ExternalFallbackStrategy(extractor)(VIDEO_ID)

    def test_not_configured(self):
        with pytest.raises(StrategyError) as exc:
            ExternalFallbackStrategy(None)(VIDEO_ID)
        assert "not configured" in exc.value.reason or "no fallback" in exc.value.reason

    def test_transcript_from_segments(self):
        response = {"transcript": [{"text": "a"}, "b", {"start": 1}]}
        assert transcript_from_response(response) == "a\nb"

    def test_transcript_wrong_type(self):
        assert transcript_from_response({"transcript": 42}) is None
        assert transcript_from_response({"transcript": ""}) is None
