"""Pydantic v2 schemas for the extraction endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from content_service.core.config import settings
from content_service.services.extractors import ContentRecord


# -----------------------------------------------------------------------------
# Request Schemas
# -----------------------------------------------------------------------------


class ExtractRequest(BaseModel):
    """Request body for POST /api/v1/extract."""

    url: str = Field(
        ...,
        min_length=1,
        max_length=2048,
        description="Video link, bare video ID, or web page URL",
    )


class BatchExtractRequest(BaseModel):
    """Request body for POST /api/v1/extract/batch."""

    urls: list[str] = Field(..., min_length=1, description="URLs to extract")

    @field_validator("urls")
    @classmethod
    def validate_batch_size(cls, v: list[str]) -> list[str]:
        """Keep a batch within the size of one collection."""
        if len(v) > settings.batch_max_urls:
            raise ValueError(
                f"At most {settings.batch_max_urls} URLs can be extracted at once"
            )
        if any(not url.strip() for url in v):
            raise ValueError("URLs must not be blank")
        return v


# -----------------------------------------------------------------------------
# Response Schemas
# -----------------------------------------------------------------------------


class ContentRecordResponse(BaseModel):
    """A normalized content record."""

    url: str = Field(..., description="Canonical source URL")
    type: Literal["video", "webpage"] = Field(..., description="Content type")
    source_id: str | None = Field(
        default=None, description="Video ID for video content, null for pages"
    )
    title: str = Field(..., description="Human-readable title")
    source_name: str = Field(..., description="Channel name or bare domain")
    metadata: dict[str, str] = Field(
        default_factory=dict, description="Type-specific metadata (duration, language)"
    )
    content: str = Field(..., description="Transcript or page text")
    token_count: int = Field(..., ge=0, description="Estimated token count")

    @classmethod
    def from_record(cls, record: ContentRecord) -> ContentRecordResponse:
        return cls(
            url=record.url,
            type=record.type.value,
            source_id=record.source_id,
            title=record.title,
            source_name=record.source_name,
            metadata=dict(record.metadata),
            content=record.content,
            token_count=record.token_count,
        )


class BatchExtractItemResponse(BaseModel):
    """Result for a single URL in a batch extraction."""

    url: str = Field(..., description="The URL that was processed")
    status: Literal["success", "error"] = Field(..., description="Processing status")
    record: ContentRecordResponse | None = Field(
        default=None, description="Extracted record if successful"
    )
    error: dict[str, str] | None = Field(
        default=None, description="Error code and message if failed"
    )


class BatchExtractResponse(BaseModel):
    """Response for POST /api/v1/extract/batch."""

    total_count: int = Field(..., ge=0, description="Total URLs submitted")
    success_count: int = Field(..., ge=0, description="Number of successful extractions")
    error_count: int = Field(..., ge=0, description="Number of failed extractions")
    items: list[BatchExtractItemResponse] = Field(..., description="Per-URL results")
