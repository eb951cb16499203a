"""URL classification and video ID parsing."""

from __future__ import annotations

import re

from content_service.services.extractors.base import ContentType

# Known watch/short/embed URL shapes, then a bare 11-character video ID
VIDEO_ID_PATTERNS = (
    re.compile(
        r"(?:youtube\.com/(?:watch\?(?:[^#]*&)?v=|embed/|shorts/|live/|v/)|youtu\.be/)"
        r"([A-Za-z0-9_-]{11})",
        re.IGNORECASE,
    ),
    re.compile(r"^([A-Za-z0-9_-]{11})$"),
)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


def parse_video_id(url: str) -> str | None:
    """Return the 11-character video ID embedded in ``url``, if any."""
    candidate = url.strip()
    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(candidate)
        if match:
            return match.group(1)
    return None


def classify(url: str) -> ContentType:
    """Decide which extraction pipeline applies to ``url``.

    Never raises: anything that is not a recognizable video link falls
    back to WEBPAGE.
    """
    if parse_video_id(url) is not None:
        return ContentType.VIDEO
    return ContentType.WEBPAGE


def watch_url(video_id: str) -> str:
    """Canonical watch URL for a video ID."""
    return WATCH_URL.format(video_id=video_id)
