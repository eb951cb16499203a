"""Tests for extraction pipeline."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from content_service.services.extractors.base import (
    ContentRecord,
    ContentType,
    ExtractionConfig,
)
from content_service.services.extractors.exceptions import (
    NoCaptionsError,
    PageInaccessibleError,
    SiteBlockedError,
)
from content_service.services.extractors.pipeline import (
    ExtractionPipeline,
    FailedExtraction,
)
from content_service.services.extractors.reader_extractor import ReaderExtractor
from content_service.services.extractors.youtube_extractor import YouTubeExtractor

VIDEO_RECORD = ContentRecord(
    url="https://www.youtube.com/watch?v=dQw4w9WgXcQ",
    type=ContentType.VIDEO,
    source_id="dQw4w9WgXcQ",
    title="Never Gonna Give You Up",
    source_name="Rick Astley",
    content="We're no strangers to love",
    metadata={"duration": "3:33", "language": "en"},
)

PAGE_RECORD = ContentRecord(
    url="https://example.com/article",
    type=ContentType.WEBPAGE,
    source_id=None,
    title="Article",
    source_name="example.com",
    content="Article body " * 20,
)


class TestExtractionPipelineDispatch:
    """Test suite for routing URLs to extractors."""

    @pytest.mark.asyncio
    async def test_video_url_uses_video_extractor(self) -> None:
        pipeline = ExtractionPipeline()

        with (
            patch.object(
                YouTubeExtractor, "extract", new_callable=AsyncMock, return_value=VIDEO_RECORD
            ) as mock_video,
            patch.object(ReaderExtractor, "extract", new_callable=AsyncMock) as mock_page,
        ):
            record = await pipeline.extract("https://youtu.be/dQw4w9WgXcQ")

        assert record is VIDEO_RECORD
        mock_video.assert_awaited_once_with("https://youtu.be/dQw4w9WgXcQ")
        mock_page.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bare_id_uses_video_extractor(self) -> None:
        pipeline = ExtractionPipeline()

        with patch.object(
            YouTubeExtractor, "extract", new_callable=AsyncMock, return_value=VIDEO_RECORD
        ) as mock_video:
            await pipeline.extract("dQw4w9WgXcQ")

        mock_video.assert_awaited_once_with("dQw4w9WgXcQ")

    @pytest.mark.asyncio
    async def test_page_url_uses_page_extractor(self) -> None:
        pipeline = ExtractionPipeline()

        with (
            patch.object(YouTubeExtractor, "extract", new_callable=AsyncMock) as mock_video,
            patch.object(
                ReaderExtractor, "extract", new_callable=AsyncMock, return_value=PAGE_RECORD
            ) as mock_page,
        ):
            record = await pipeline.extract("https://example.com/article")

        assert record is PAGE_RECORD
        mock_page.assert_awaited_once_with("https://example.com/article")
        mock_video.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_errors_propagate_unchanged(self) -> None:
        """The pipeline neither wraps nor reclassifies extractor errors."""
        pipeline = ExtractionPipeline()
        error = SiteBlockedError("Domain blocked")

        with patch.object(
            ReaderExtractor, "extract", new_callable=AsyncMock, side_effect=error
        ):
            with pytest.raises(SiteBlockedError) as exc_info:
                await pipeline.extract("https://example.com/article")

        assert exc_info.value is error


class TestExtractionPipelineEndToEnd:
    """Test suite running the real extractors against mocked upstreams."""

    @pytest.mark.asyncio
    async def test_blocked_page_warning(self) -> None:
        """HTTP 200 with an error warning from the target is inaccessible."""
        pipeline = ExtractionPipeline()
        response = httpx.Response(
            200,
            json={
                "code": 200,
                "status": 20000,
                "data": {
                    "title": "Forbidden",
                    "url": "https://example.com/blocked",
                    "content": "Forbidden " * 20,
                    "warning": "Target URL returned error 403: Forbidden\nmore detail",
                },
            },
        )

        with patch.object(httpx.AsyncClient, "get", return_value=response):
            with pytest.raises(PageInaccessibleError) as exc_info:
                await pipeline.extract("https://example.com/blocked")

        assert "Target URL returned error 403: Forbidden" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_video_fallback_end_to_end(self) -> None:
        """A refused desktop profile falls back to the mobile profile."""
        pipeline = ExtractionPipeline()
        refused = httpx.Response(
            200, json={"playabilityStatus": {"status": "UNPLAYABLE", "reason": "Blocked"}}
        )
        playable = httpx.Response(
            200,
            json={
                "playabilityStatus": {"status": "OK"},
                "videoDetails": {"title": "Talk", "author": "Speaker", "lengthSeconds": "75"},
                "captions": {
                    "playerCaptionsTracklistRenderer": {
                        "captionTracks": [
                            {"baseUrl": "https://www.youtube.com/api/timedtext?v=x", "languageCode": "en"}
                        ]
                    }
                },
            },
        )
        captions = httpx.Response(200, text="<text>Hello &amp; welcome</text><text>to the show</text>")

        with (
            patch.object(httpx.AsyncClient, "post", side_effect=[refused, playable]),
            patch.object(httpx.AsyncClient, "get", return_value=captions),
        ):
            record = await pipeline.extract("https://www.youtube.com/watch?v=dQw4w9WgXcQ")

        assert record.content == "Hello & welcome to the show"
        assert record.metadata["duration"] == "1:15"
        assert record.source_name == "Speaker"


class TestExtractionPipelineBatch:
    """Test suite for extract_many."""

    @pytest.mark.asyncio
    async def test_collects_successes_and_failures_in_order(self) -> None:
        pipeline = ExtractionPipeline()

        with (
            patch.object(
                YouTubeExtractor,
                "extract",
                new_callable=AsyncMock,
                side_effect=[VIDEO_RECORD, NoCaptionsError()],
            ),
            patch.object(
                ReaderExtractor, "extract", new_callable=AsyncMock, return_value=PAGE_RECORD
            ),
        ):
            result = await pipeline.extract_many(
                [
                    "https://youtu.be/dQw4w9WgXcQ",
                    "https://example.com/article",
                    "https://youtu.be/aaaaaaaaaaa",
                ]
            )

        assert result.items[0] is VIDEO_RECORD
        assert result.items[1] is PAGE_RECORD
        assert result.items[2] == FailedExtraction(
            url="https://youtu.be/aaaaaaaaaaa",
            code="NO_CAPTIONS",
            message="No captions available for this video",
        )
        assert result.succeeded == [VIDEO_RECORD, PAGE_RECORD]
        assert len(result.failed) == 1

    @pytest.mark.asyncio
    async def test_malformed_url_does_not_abort_batch(self) -> None:
        """An unparseable URL is recorded as invalid input and the batch goes on."""
        pipeline = ExtractionPipeline()
        response = httpx.Response(
            200,
            json={
                "code": 200,
                "status": 20000,
                "data": {"title": "Article", "content": "Article body " * 20},
            },
        )

        with patch.object(httpx.AsyncClient, "get", return_value=response) as mock_get:
            result = await pipeline.extract_many(["http://[::1", "https://example.com/article"])

        assert result.items[0] == FailedExtraction(
            url="http://[::1", code="INVALID_INPUT", message="Invalid URL: http://[::1"
        )
        assert result.succeeded[0].title == "Article"
        mock_get.assert_called_once()

    @pytest.mark.asyncio
    async def test_empty_batch(self) -> None:
        pipeline = ExtractionPipeline()

        result = await pipeline.extract_many([])

        assert result.items == []
        assert result.succeeded == []
        assert result.failed == []


class TestExtractionPipelineConfig:
    """Test suite for pipeline configuration."""

    def test_default_config(self) -> None:
        pipeline = ExtractionPipeline()

        assert pipeline.config.min_content_length == 100
        assert pipeline.config.max_attempts == 3

    def test_extractors_use_same_config(self) -> None:
        """Both extractors receive the pipeline config."""
        config = ExtractionConfig(min_content_length=500, max_attempts=1)
        pipeline = ExtractionPipeline(config)

        assert pipeline.page_extractor.config.min_content_length == 500
        assert pipeline.video_extractor.config.max_attempts == 1
