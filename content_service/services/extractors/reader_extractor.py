"""Web page extractor backed by a reader service (Jina Reader JSON mode).

The reader fetches the page and returns readability-extracted text. It
sometimes answers HTTP 200 for pages that were really an error, a CAPTCHA
wall, or an anti-bot interstitial, so every response passes a quality
gate before it becomes a ContentRecord:

1. the reader's warning mentions a 4xx/5xx from the target or a CAPTCHA
2. the title looks like a block/error page and the page is nearly empty
3. the body is shorter than the minimum content length

Any single signal is enough to reject the page.
"""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import quote, urlparse

import httpx

from content_service.services.extractors.base import (
    ContentRecord,
    ContentType,
    ExtractionConfig,
)
from content_service.services.extractors.exceptions import (
    ContentTooShortError,
    ExtractionError,
    InvalidInputError,
    InvalidResponseError,
    InvalidUrlError,
    PageBlockedError,
    PageInaccessibleError,
    PageLoadFailedError,
    ServiceError,
    SiteBlockedError,
    UnreachableError,
)

logger = logging.getLogger(__name__)

# Warnings that mean the reader never saw the real page
BLOCKING_WARNING_PATTERNS = (
    re.compile(r"Target URL returned error [45]\d\d", re.IGNORECASE),
    re.compile(r"requir(?:es|ing) (?:a )?CAPTCHA", re.IGNORECASE),
)

# Lower-case title fragments of anti-bot and error pages
SUSPECT_TITLES = (
    "just a moment",
    "access denied",
    "attention required",
    "please verify",
    "verify you are human",
    "page not found",
    "403 forbidden",
    "404 not found",
    "blocked",
)

STATUS_ERRORS = {
    400: InvalidUrlError,
    422: PageLoadFailedError,
    451: SiteBlockedError,
}


class ReaderExtractor:
    """Extract readable page content through the reader service."""

    def __init__(self, config: ExtractionConfig | None = None) -> None:
        self.config = config or ExtractionConfig()

    async def extract(self, url: str) -> ContentRecord:
        """Extract the main text of a web page.

        Args:
            url: http(s) URL of the page

        Returns:
            ContentRecord of type WEBPAGE

        Raises:
            InvalidInputError: If the URL has no http(s) scheme or host
            UnreachableError: If the reader service cannot be reached
            InvalidUrlError, SiteBlockedError, PageLoadFailedError, ServiceError:
                If the reader service answers with an error status
            InvalidResponseError: If the reader response is unusable
            PageInaccessibleError, PageBlockedError, ContentTooShortError:
                If the page fails the quality gate
        """
        try:
            parsed = urlparse(url)
            hostname = parsed.hostname
        except ValueError as e:
            raise InvalidInputError(f"Invalid URL: {url}") from e
        if parsed.scheme not in ("http", "https") or not hostname:
            raise InvalidInputError(f"Invalid URL: {url}")

        logger.info("Extracting content from %s", url)

        payload = await self._fetch_reader_json(url)
        data = payload.get("data")
        if not isinstance(data, dict) or not data.get("content"):
            raise InvalidResponseError("No content found on this page")

        content = str(data["content"])
        title = str(data.get("title") or "")
        self._check_quality(url, data, title, content)

        domain = hostname.removeprefix("www.")
        logger.info("Extracted %d chars from %s", len(content), domain)

        return ContentRecord(
            url=url,
            type=ContentType.WEBPAGE,
            source_id=None,
            title=title or self._title_from_path(parsed.path),
            source_name=domain,
            content=content,
        )

    async def _fetch_reader_json(self, url: str) -> dict[str, Any]:
        """Request the JSON rendering of ``url`` from the reader service.

        Raises:
            UnreachableError: On timeout or network failure
            InvalidResponseError: If the body is not a JSON object
            ExtractionError subclass: For error statuses (see STATUS_ERRORS)
        """
        reader_url = f"{self.config.reader_base_url.rstrip('/')}/{quote(url, safe='')}"

        try:
            async with httpx.AsyncClient(
                timeout=self.config.reader_timeout_seconds,
                follow_redirects=True,
            ) as client:
                response = await client.get(
                    reader_url,
                    headers={"Accept": "application/json"},
                )
        except httpx.TimeoutException as e:
            raise UnreachableError(
                f"Page extraction timed out ({self.config.reader_timeout_seconds}s)"
            ) from e
        except httpx.RequestError as e:
            raise UnreachableError(f"Could not reach page: {str(e) or 'Network error'}") from e

        if not response.is_success:
            raise self._status_error(response)

        try:
            payload = response.json()
        except ValueError as e:
            raise InvalidResponseError() from e

        if not isinstance(payload, dict):
            raise InvalidResponseError()
        return payload

    def _status_error(self, response: httpx.Response) -> ExtractionError:
        """Map a reader error status to the matching extraction error."""
        message: str | None = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("readableMessage") or body.get("message")

        status = response.status_code
        logger.warning("Reader service returned %d: %s", status, message)

        error_cls = STATUS_ERRORS.get(status)
        if error_cls is None:
            return ServiceError(status, message)
        return error_cls(message)

    def _check_quality(
        self, url: str, data: dict[str, Any], title: str, content: str
    ) -> None:
        """Reject block pages, CAPTCHA walls, and stub error pages.

        Raises:
            PageInaccessibleError: If the reader warning reports an error or CAPTCHA
            PageBlockedError: If the title is suspect and token usage is low
            ContentTooShortError: If the trimmed body is below the minimum length
        """
        warning = data.get("warning")
        if isinstance(warning, str) and warning:
            if any(pattern.search(warning) for pattern in BLOCKING_WARNING_PATTERNS):
                first_line = warning.split("\n")[0].strip()
                logger.warning("Page inaccessible %s: %s", url, first_line)
                raise PageInaccessibleError(f"Page inaccessible: {first_line}")

        title_lower = title.lower()
        is_suspect_title = any(s in title_lower for s in SUSPECT_TITLES)
        if is_suspect_title and self._token_count(data) < self.config.block_token_threshold:
            logger.warning("Suspect title for %s: %r", url, title)
            raise PageBlockedError(f'Page blocked or inaccessible: "{title}"')

        length = len(content.strip())
        if length < self.config.min_content_length:
            logger.warning(
                "Content too short for %s: %d chars (minimum: %d)",
                url,
                length,
                self.config.min_content_length,
            )
            raise ContentTooShortError()

    @staticmethod
    def _token_count(data: dict[str, Any]) -> int:
        usage = data.get("usage")
        if not isinstance(usage, dict):
            return 0
        try:
            return int(usage.get("tokens") or 0)
        except (TypeError, ValueError):
            return 0

    @staticmethod
    def _title_from_path(path: str) -> str:
        """Last URL path segment, or "Untitled" when the path ends in a slash."""
        return path.split("/")[-1] or "Untitled"
