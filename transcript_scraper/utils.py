"""
Shared utility functions for the scraper.
"""

import re
from typing import Optional

BASE_URL = "https://www.youtube.com"
HANDLE_SIGIL = "@"

VIDEO_ID_RE = re.compile(r'^[A-Za-z0-9_-]{11}$')
_WATCH_PARAM_RE = re.compile(r'[?&]v=([^&#]+)')


def extract_video_id_from_url(url: str) -> Optional[str]:
    """
    Extract the video id from a watch URL.

    Args:
        url: Watch URL (e.g., https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=1s)

    Returns:
        The 11-character video id, or None if the URL has none
    """
    match = _WATCH_PARAM_RE.search(url)
    if not match:
        return None

    video_id = match.group(1)
    if not VIDEO_ID_RE.match(video_id):
        return None
    return video_id


def video_url(video_id: str) -> str:
    """Watch page URL for a video id."""
    return f"{BASE_URL}/watch?v={video_id}"


def channel_url(handle: str) -> str:
    """Channel base URL for a handle such as @somechannel."""
    return f"{BASE_URL}/{handle}"


def is_valid_handle(handle: str) -> bool:
    """A handle must start with the sigil and carry a name after it."""
    return handle.startswith(HANDLE_SIGIL) and len(handle.strip()) > len(HANDLE_SIGIL)


def sanitize_name(value: str) -> str:
    """
    Make a value safe for use in a file name.

    Every non-alphanumeric character becomes an underscore, so
    "@my.channel" becomes "_my_channel".
    """
    return re.sub(r'[^a-zA-Z0-9]', '_', value)
