"""
External transcript sources.

Each source sits behind a small interface so the pipeline does not care
whether it is an in-process library call, a child process or an HTTP service.
"""

import json
import logging
import shlex
import subprocess
from typing import List, Optional

import requests
from youtube_transcript_api import YouTubeTranscriptApi
from youtube_transcript_api.formatters import TextFormatter

from .exceptions import ScraperError

logger = logging.getLogger(__name__)


class CollaboratorError(ScraperError):
    """An external transcript source failed or answered nonsense."""


class TranscriptFetcher:
    """Structured transcript service: video id in, plain text out."""

    def fetch_transcript(self, video_id: str) -> str:
        raise NotImplementedError


class FallbackExtractor:
    """Out-of-process extractor returning a JSON object with a transcript field."""

    def extract(self, video_id: str, html: Optional[str] = None) -> dict:
        raise NotImplementedError


class YouTubeTranscriptApiFetcher(TranscriptFetcher):
    """Fetches captions in-process with youtube-transcript-api."""

    def __init__(self, languages: Optional[List[str]] = None, api: Optional[YouTubeTranscriptApi] = None):
        self.languages = languages or ['en']
        self._api = api
        self.formatter = TextFormatter()

    @property
    def api(self) -> YouTubeTranscriptApi:
        if self._api is None:
            self._api = YouTubeTranscriptApi()
        return self._api

    def fetch_transcript(self, video_id: str) -> str:
        logger.info("Fetching transcript for video ID: %s", video_id)
        fetched = self.api.fetch(video_id, languages=self.languages)
        return self.formatter.format_transcript(fetched)


def parse_fallback_response(payload) -> dict:
    """Decode a fallback response body into a dict, or raise CollaboratorError."""
    if isinstance(payload, (bytes, str)):
        try:
            payload = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CollaboratorError(f"Malformed response: {e}") from e
    if not isinstance(payload, dict):
        raise CollaboratorError(f"Expected a JSON object, got {type(payload).__name__}")
    return payload


class SubprocessFallbackExtractor(FallbackExtractor):
    """
    Runs an extraction command per video.

    The video id is appended to the command line, the page snapshot (if any)
    is written to stdin, and stdout must be a JSON object.
    """

    def __init__(self, command: str, timeout: float = 120.0):
        self.command = shlex.split(command)
        self.timeout = timeout

    def extract(self, video_id: str, html: Optional[str] = None) -> dict:
        args = self.command + [video_id]
        logger.info("Running fallback extractor: %s", ' '.join(args))
        try:
            result = subprocess.run(
                args,
                input=html or '',
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CollaboratorError(f"Extractor timed out after {self.timeout}s") from e
        except OSError as e:
            raise CollaboratorError(f"Could not start extractor: {e}") from e

        if result.returncode != 0:
            stderr = (result.stderr or '').strip()[:200]
            raise CollaboratorError(f"Extractor exited with {result.returncode}: {stderr}")

        return parse_fallback_response(result.stdout)


class HttpFallbackExtractor(FallbackExtractor):
    """Posts the video id and snapshot to an extraction service."""

    def __init__(self, url: str, timeout: float = 120.0, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def extract(self, video_id: str, html: Optional[str] = None) -> dict:
        body = {'video_id': video_id}
        if html:
            body['html'] = html
        try:
            response = self.session.post(self.url, json=body, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise CollaboratorError(f"Extractor request failed: {e}") from e

        return parse_fallback_response(response.content)


def create_fallback_extractor(command: Optional[str], url: Optional[str], timeout: float = 120.0) -> Optional[FallbackExtractor]:
    """
    Build the configured fallback extractor.

    Returns:
        An extractor, or None if neither a command nor a URL is configured
    """
    if command:
        return SubprocessFallbackExtractor(command, timeout=timeout)
    if url:
        return HttpFallbackExtractor(url, timeout=timeout)
    return None
