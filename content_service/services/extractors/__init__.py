"""Content extraction module for videos and web pages.

URLs are classified and routed to one of two extractors:
1. YouTubeExtractor - transcript via the InnerTube player API, with
   client-profile fallback and bounded retry
2. ReaderExtractor - page text via the reader service, behind a
   block/CAPTCHA quality gate

The ExtractionPipeline is the single entry point.

Usage:
    from content_service.services.extractors import ExtractionPipeline

    pipeline = ExtractionPipeline()
    record = await pipeline.extract("https://www.youtube.com/watch?v=dQw4w9WgXcQ")
    print(record.content)
"""

from content_service.services.extractors.base import (
    CaptionTrack,
    ContentExtractor,
    ContentRecord,
    ContentType,
    ExtractionConfig,
    estimate_tokens,
)
from content_service.services.extractors.classifier import classify, parse_video_id
from content_service.services.extractors.exceptions import (
    ContentTooShortError,
    EmptyTranscriptError,
    ExtractionError,
    InvalidInputError,
    InvalidResponseError,
    InvalidUrlError,
    NoCaptionsError,
    PageBlockedError,
    PageInaccessibleError,
    PageLoadFailedError,
    ServiceError,
    SiteBlockedError,
    UnreachableError,
    VideoUnavailableError,
)
from content_service.services.extractors.pipeline import (
    BatchExtractionResult,
    ExtractionPipeline,
    FailedExtraction,
)
from content_service.services.extractors.reader_extractor import ReaderExtractor
from content_service.services.extractors.youtube_extractor import (
    DEFAULT_CLIENT_PROFILES,
    ClientProfile,
    YouTubeExtractor,
)

__all__ = [
    # Base classes
    "CaptionTrack",
    "ContentExtractor",
    "ContentRecord",
    "ContentType",
    "ExtractionConfig",
    "estimate_tokens",
    # Classification
    "classify",
    "parse_video_id",
    # Extractors
    "ClientProfile",
    "DEFAULT_CLIENT_PROFILES",
    "YouTubeExtractor",
    "ReaderExtractor",
    "ExtractionPipeline",
    "BatchExtractionResult",
    "FailedExtraction",
    # Exceptions
    "ExtractionError",
    "InvalidInputError",
    "UnreachableError",
    "ServiceError",
    "InvalidUrlError",
    "SiteBlockedError",
    "PageLoadFailedError",
    "InvalidResponseError",
    "VideoUnavailableError",
    "NoCaptionsError",
    "EmptyTranscriptError",
    "PageInaccessibleError",
    "PageBlockedError",
    "ContentTooShortError",
]
