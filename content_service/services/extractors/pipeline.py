"""Extraction pipeline dispatching URLs to the matching extractor."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from content_service.services.extractors.base import (
    ContentExtractor,
    ContentRecord,
    ContentType,
    ExtractionConfig,
)
from content_service.services.extractors.classifier import classify
from content_service.services.extractors.exceptions import ExtractionError
from content_service.services.extractors.reader_extractor import ReaderExtractor
from content_service.services.extractors.youtube_extractor import YouTubeExtractor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FailedExtraction:
    """A URL that could not be extracted, with the reason."""

    url: str
    code: str
    message: str


@dataclass
class BatchExtractionResult:
    """Outcome of extracting several URLs, in input order."""

    items: list[ContentRecord | FailedExtraction] = field(default_factory=list)

    @property
    def succeeded(self) -> list[ContentRecord]:
        return [item for item in self.items if isinstance(item, ContentRecord)]

    @property
    def failed(self) -> list[FailedExtraction]:
        return [item for item in self.items if isinstance(item, FailedExtraction)]


class ExtractionPipeline:
    """Single entry point for turning a URL into a ContentRecord.

    Classifies the URL and hands it to the video or page extractor.
    Extractor errors propagate unchanged.
    """

    def __init__(self, config: ExtractionConfig | None = None) -> None:
        self.config = config or ExtractionConfig()
        self.video_extractor: ContentExtractor = YouTubeExtractor(self.config)
        self.page_extractor: ContentExtractor = ReaderExtractor(self.config)

    async def extract(self, url: str) -> ContentRecord:
        """Extract content from URL using the extractor for its type.

        Args:
            url: Video link, bare video ID, or web page URL

        Returns:
            ContentRecord produced by the selected extractor

        Raises:
            ExtractionError: Whatever the selected extractor raised
        """
        content_type = classify(url)
        logger.debug("Classified %s as %s", url, content_type.value)

        if content_type is ContentType.VIDEO:
            return await self.video_extractor.extract(url)
        return await self.page_extractor.extract(url)

    async def extract_many(self, urls: list[str]) -> BatchExtractionResult:
        """Extract each URL in turn, collecting failures instead of raising.

        URLs are processed sequentially so a batch never bursts the
        upstream services.
        """
        result = BatchExtractionResult()

        for url in urls:
            try:
                record = await self.extract(url)
            except ExtractionError as e:
                logger.warning("Extraction failed: %s [%s] - %s", url, e.code, e.message)
                result.items.append(FailedExtraction(url=url, code=e.code, message=e.message))
                continue
            result.items.append(record)

        return result
