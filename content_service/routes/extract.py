"""Content extraction REST endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from content_service.core.config import settings
from content_service.schemas.extract import (
    BatchExtractItemResponse,
    BatchExtractRequest,
    BatchExtractResponse,
    ContentRecordResponse,
    ExtractRequest,
)
from content_service.services.extractors import (
    ContentRecord,
    ExtractionConfig,
    ExtractionError,
    ExtractionPipeline,
    InvalidInputError,
    InvalidResponseError,
    InvalidUrlError,
    ServiceError,
    SiteBlockedError,
    UnreachableError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/extract", tags=["extract"])

# Extraction failures not listed here are reported as 422
ERROR_STATUS_CODES: dict[type[ExtractionError], int] = {
    InvalidInputError: 400,
    InvalidUrlError: 400,
    SiteBlockedError: 451,
    UnreachableError: 502,
    ServiceError: 502,
    InvalidResponseError: 502,
}


def build_extraction_config() -> ExtractionConfig:
    """Build an extraction config from the current settings."""
    return ExtractionConfig(
        reader_base_url=settings.reader_base_url,
        reader_timeout_seconds=settings.reader_timeout,
        youtube_api_base_url=settings.youtube_api_base_url,
        youtube_api_key=settings.youtube_api_key,
        player_timeout_seconds=settings.youtube_player_timeout,
        caption_timeout_seconds=settings.youtube_caption_timeout,
        max_attempts=settings.youtube_max_attempts,
        retry_backoff_ms=settings.youtube_retry_backoff_ms,
        locale=settings.youtube_locale,
        region=settings.youtube_region,
        min_content_length=settings.extraction_min_content_length,
        block_token_threshold=settings.extraction_block_token_threshold,
    )


def get_error_status(error: ExtractionError) -> int:
    """Map an extraction error to the HTTP status returned to clients."""
    for error_cls, status_code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_cls):
            return status_code
    return 422


@router.post("", response_model=ContentRecordResponse)
async def extract_content(request: ExtractRequest) -> ContentRecordResponse:
    """Extract a video transcript or web page text from a URL.

    Args:
        request: Contains the URL to extract.

    Returns:
        ContentRecordResponse with the normalized content.

    Raises:
        HTTPException: With the extraction error code and message.
    """
    pipeline = ExtractionPipeline(build_extraction_config())

    try:
        record = await pipeline.extract(request.url.strip())
    except ExtractionError as e:
        logger.warning("Extraction failed for %s [%s]: %s", request.url, e.code, e.message)
        raise HTTPException(
            status_code=get_error_status(e),
            detail={
                "error": {
                    "code": e.code,
                    "message": e.message,
                }
            },
        )

    return ContentRecordResponse.from_record(record)


@router.post("/batch", response_model=BatchExtractResponse)
async def extract_batch(request: BatchExtractRequest) -> BatchExtractResponse:
    """Extract several URLs, reporting each one's outcome.

    A failing URL does not fail the request; its error is reported in
    the matching item.
    """
    pipeline = ExtractionPipeline(build_extraction_config())
    urls = [url.strip() for url in request.urls]
    result = await pipeline.extract_many(urls)

    items: list[BatchExtractItemResponse] = []
    for url, item in zip(urls, result.items):
        if isinstance(item, ContentRecord):
            items.append(
                BatchExtractItemResponse(
                    url=url,
                    status="success",
                    record=ContentRecordResponse.from_record(item),
                )
            )
        else:
            items.append(
                BatchExtractItemResponse(
                    url=url,
                    status="error",
                    error={"code": item.code, "message": item.message},
                )
            )

    return BatchExtractResponse(
        total_count=len(items),
        success_count=len(result.succeeded),
        error_count=len(result.failed),
        items=items,
    )
