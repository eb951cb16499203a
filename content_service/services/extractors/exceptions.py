"""Exception hierarchy for content extraction.

Every failure carries a stable ``code`` for API consumers and a
human-readable message. The message is taken from the upstream service
when one is available, otherwise the class default is used.
"""

from __future__ import annotations


class ExtractionError(Exception):
    """Base exception for all extraction errors."""

    code = "EXTRACTION_ERROR"
    default_message = "Content extraction failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(ExtractionError):
    """Raised when a URL does not resolve to an extractable ID or shape."""

    code = "INVALID_INPUT"
    default_message = "Invalid URL"


class UnreachableError(ExtractionError):
    """Raised when an upstream service cannot be reached (timeout, connection, DNS)."""

    code = "UNREACHABLE"
    default_message = "Could not reach page: Network error"


class ServiceError(ExtractionError):
    """Raised when an upstream service returns an unmapped error status."""

    code = "SERVICE_ERROR"

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"Could not access page ({status_code})")


class InvalidUrlError(ExtractionError):
    """Raised when the reader service rejects the target URL (HTTP 400)."""

    code = "INVALID_URL"
    default_message = "Invalid URL"


class SiteBlockedError(ExtractionError):
    """Raised when the reader service refuses the site (HTTP 451)."""

    code = "SITE_BLOCKED"
    default_message = "This site is blocked"


class PageLoadFailedError(ExtractionError):
    """Raised when the reader service could not load the page (HTTP 422)."""

    code = "PAGE_LOAD_FAILED"
    default_message = "Could not load page"


class InvalidResponseError(ExtractionError):
    """Raised for malformed or incomplete upstream JSON."""

    code = "INVALID_RESPONSE"
    default_message = "Invalid response from content extraction service"


class VideoUnavailableError(ExtractionError):
    """Raised when no client profile can play the video after all retries."""

    code = "UNAVAILABLE"
    default_message = "Video not available"


class NoCaptionsError(ExtractionError):
    """Raised when the video exposes no caption tracks."""

    code = "NO_CAPTIONS"
    default_message = "No captions available for this video"


class EmptyTranscriptError(ExtractionError):
    """Raised when the selected caption track yields no text."""

    code = "EMPTY_TRANSCRIPT"
    default_message = "Could not extract transcript"


class PageInaccessibleError(ExtractionError):
    """Raised when the reader reports the target page errored or needs a CAPTCHA."""

    code = "PAGE_INACCESSIBLE"
    default_message = "Page inaccessible"


class PageBlockedError(ExtractionError):
    """Raised when the page title looks like a block or error page."""

    code = "PAGE_BLOCKED"
    default_message = "Page blocked or inaccessible"


class ContentTooShortError(ExtractionError):
    """Raised when extraction produces insufficient content."""

    code = "CONTENT_TOO_SHORT"
    default_message = "Page content too short - may be blocked or empty"
