"""YouTube transcript extractor using the InnerTube player API.

The player endpoint is queried with an ordered list of client profiles.
Different profiles get different availability answers for the same video,
so a profile that is refused is followed by the next one, and the whole
sequence is retried with linear backoff before giving up.
"""

from __future__ import annotations

import asyncio
import html as html_lib
import logging
import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from content_service.services.extractors.base import (
    CaptionTrack,
    ContentRecord,
    ContentType,
    ExtractionConfig,
)
from content_service.services.extractors.classifier import parse_video_id, watch_url
from content_service.services.extractors.exceptions import (
    EmptyTranscriptError,
    InvalidInputError,
    NoCaptionsError,
    ServiceError,
    UnreachableError,
    VideoUnavailableError,
)

logger = logging.getLogger(__name__)

TEXT_ELEMENT_RE = re.compile(r"<text\b[^>]*>(.*?)</text>", re.DOTALL)
TAG_RE = re.compile(r"<[^>]*>")
WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ClientProfile:
    """A client identity presented to the player API."""

    name: str
    client_version: str
    platform: str
    user_agent: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def build_context(self, locale: str, region: str, user_agent: str) -> dict[str, Any]:
        """Build the ``context`` object sent with a player request."""
        client: dict[str, Any] = {
            "clientName": self.name,
            "clientVersion": self.client_version,
            "hl": locale,
            "gl": region,
            "userAgent": self.user_agent or user_agent,
            "platform": self.platform,
            **self.extra,
        }
        return {"client": client}


WEB_PROFILE = ClientProfile(
    name="WEB",
    client_version="2.20250122.01.00",
    platform="DESKTOP",
    extra={"originalUrl": "https://www.youtube.com"},
)

ANDROID_PROFILE = ClientProfile(
    name="ANDROID",
    client_version="19.09.37",
    platform="MOBILE",
    user_agent="com.google.android.youtube/19.09.37 (Linux; U; Android 11) gzip",
    extra={"androidSdkVersion": 30},
)

# Tried in order on every attempt
DEFAULT_CLIENT_PROFILES: tuple[ClientProfile, ...] = (WEB_PROFILE, ANDROID_PROFILE)


def format_duration(seconds: int) -> str:
    """Format seconds as ``H:MM:SS`` (with hours) or ``M:SS``."""
    if seconds < 0:
        seconds = 0
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def parse_caption_xml(xml: str) -> str:
    """Flatten timed-text XML into a single line of plain text.

    Each ``<text>`` element's body has nested tags stripped and entities
    decoded; non-blank fragments are joined with spaces and runs of
    whitespace collapse to one space.
    """
    parts: list[str] = []
    for match in TEXT_ELEMENT_RE.finditer(xml):
        text = html_lib.unescape(TAG_RE.sub("", match.group(1)))
        if text.strip():
            parts.append(text)
    return WHITESPACE_RE.sub(" ", " ".join(parts)).strip()


def strip_srv3_format(caption_url: str) -> str:
    """Drop a ``fmt=srv3`` query parameter so the default XML shape is served."""
    parts = urlsplit(caption_url)
    params = parse_qsl(parts.query, keep_blank_values=True)
    query = [(key, value) for key, value in params if (key, value) != ("fmt", "srv3")]
    if len(query) == len(params):
        return caption_url
    return urlunsplit(parts._replace(query=urlencode(query)))


def parse_caption_tracks(player_data: dict[str, Any]) -> list[CaptionTrack]:
    """Read caption tracks from a player response, preserving platform order."""
    captions = player_data.get("captions")
    if not isinstance(captions, dict):
        return []

    tracks: list[CaptionTrack] = []
    for renderer in captions.values():
        if not isinstance(renderer, dict):
            continue
        raw_tracks = renderer.get("captionTracks")
        if not isinstance(raw_tracks, list):
            continue
        for raw in raw_tracks:
            if not isinstance(raw, dict) or not raw.get("baseUrl"):
                continue
            name = raw.get("name") or {}
            tracks.append(
                CaptionTrack(
                    base_url=str(raw["baseUrl"]),
                    language_code=str(raw.get("languageCode") or ""),
                    name=name.get("simpleText", "") if isinstance(name, dict) else "",
                    is_auto_generated=(
                        raw.get("kind") == "asr"
                        or str(raw.get("vssId", "")).startswith("a.")
                    ),
                )
            )
    return tracks


class YouTubeExtractor:
    """Extract transcripts and metadata for videos."""

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        profiles: tuple[ClientProfile, ...] = DEFAULT_CLIENT_PROFILES,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.profiles = profiles

    async def extract(self, url: str) -> ContentRecord:
        """Extract the transcript of a video.

        Args:
            url: Watch, short, or embed link, or a bare video ID

        Returns:
            ContentRecord of type VIDEO with duration and caption language

        Raises:
            InvalidInputError: If no video ID can be parsed from the URL
            VideoUnavailableError: If no client profile can play the video
            NoCaptionsError: If the video has no caption tracks
            EmptyTranscriptError: If the caption track yields no text
            UnreachableError: If the caption track cannot be fetched
            ServiceError: If the caption endpoint returns an error status
        """
        video_id = parse_video_id(url)
        if video_id is None:
            raise InvalidInputError("Invalid YouTube URL")

        logger.info("Getting transcript for %s", video_id)

        async with httpx.AsyncClient(follow_redirects=True) as client:
            player_data = await self._fetch_player_data(client, video_id)

            details = player_data.get("videoDetails")
            if not isinstance(details, dict):
                details = {}
            title = str(details.get("title") or "Untitled")
            channel = str(details.get("author") or "Unknown")
            duration = format_duration(self._parse_seconds(details.get("lengthSeconds")))

            tracks = parse_caption_tracks(player_data)
            if not tracks:
                raise NoCaptionsError()

            track = tracks[0]
            logger.info(
                "Using caption track: %s (%s)",
                track.language_code,
                track.name or ("auto" if track.is_auto_generated else "default"),
            )

            transcript = await self._fetch_transcript(client, track)

        if not transcript:
            raise EmptyTranscriptError()

        logger.info("Extracted %d chars of transcript for %s", len(transcript), video_id)

        return ContentRecord(
            url=watch_url(video_id),
            type=ContentType.VIDEO,
            source_id=video_id,
            title=title,
            source_name=channel,
            content=transcript,
            metadata={"duration": duration, "language": track.language_code},
        )

    async def _fetch_player_data(
        self, client: httpx.AsyncClient, video_id: str
    ) -> dict[str, Any]:
        """Query every client profile in order, retrying the sequence with backoff.

        Raises:
            VideoUnavailableError: If every attempt is refused
        """
        last_reason = "Unknown error"

        for attempt in range(1, self.config.max_attempts + 1):
            for profile in self.profiles:
                data, reason = await self._try_profile(client, video_id, profile)
                if data is not None:
                    return data
                last_reason = reason

            if attempt < self.config.max_attempts:
                delay = attempt * self.config.retry_backoff_ms / 1000
                logger.info(
                    "Attempt %d failed for %s. Retrying in %dms...",
                    attempt,
                    video_id,
                    attempt * self.config.retry_backoff_ms,
                )
                await asyncio.sleep(delay)

        raise VideoUnavailableError(f"Video not available: {last_reason}")

    async def _try_profile(
        self, client: httpx.AsyncClient, video_id: str, profile: ClientProfile
    ) -> tuple[dict[str, Any] | None, str]:
        """Request player data with one profile.

        Returns:
            Tuple of (player_data, reason); player_data is None when the
            profile was refused, in which case reason says why.
        """
        endpoint = f"{self.config.youtube_api_base_url}/player"
        payload = {
            "context": profile.build_context(
                self.config.locale, self.config.region, self.config.user_agent
            ),
            "videoId": video_id,
        }
        headers = {
            "Content-Type": "application/json",
            "Accept": "*/*",
            "Accept-Language": f"{self.config.locale}-{self.config.region},{self.config.locale};q=0.9",
            "Origin": "https://www.youtube.com",
            "Referer": "https://www.youtube.com/",
            "User-Agent": profile.user_agent or self.config.user_agent,
        }

        try:
            response = await client.post(
                endpoint,
                params={"key": self.config.youtube_api_key},
                json=payload,
                headers=headers,
                timeout=self.config.player_timeout_seconds,
            )
        except httpx.TimeoutException:
            logger.info("%s client timed out", profile.name)
            return None, f"{profile.name} client timed out"
        except httpx.RequestError as e:
            logger.info("%s client error: %s", profile.name, e)
            return None, str(e) or f"{profile.name} client error"

        if not response.is_success:
            logger.info("%s client returned %d", profile.name, response.status_code)
            return None, f"{profile.name} client returned {response.status_code}"

        try:
            data = response.json()
        except ValueError:
            logger.info("%s client returned invalid JSON", profile.name)
            return None, f"{profile.name} client returned invalid JSON"

        if not isinstance(data, dict):
            return None, f"{profile.name} client returned invalid JSON"

        playability = data.get("playabilityStatus")
        if not isinstance(playability, dict):
            logger.info("%s client returned no playability status", profile.name)
            return None, f"{profile.name} client returned no playability status"

        if playability.get("status") == "OK":
            return data, ""

        reason = str(playability.get("reason") or "Unknown error")
        logger.info("%s client: %s", profile.name, reason)
        return None, reason

    async def _fetch_transcript(
        self, client: httpx.AsyncClient, track: CaptionTrack
    ) -> str:
        """Download a caption track and flatten it to plain text.

        Raises:
            UnreachableError: On timeout or network failure
            ServiceError: If the caption endpoint returns an error status
        """
        url = strip_srv3_format(track.base_url)

        try:
            response = await client.get(url, timeout=self.config.caption_timeout_seconds)
        except httpx.TimeoutException as e:
            raise UnreachableError(
                f"Caption fetch timed out ({self.config.caption_timeout_seconds}s)"
            ) from e
        except httpx.RequestError as e:
            raise UnreachableError(f"Caption fetch failed: {e}") from e

        if not response.is_success:
            raise ServiceError(
                response.status_code,
                f"Caption fetch returned {response.status_code}",
            )

        return parse_caption_xml(response.text)

    @staticmethod
    def _parse_seconds(value: Any) -> int:
        try:
            return int(value or 0)
        except (TypeError, ValueError):
            return 0
