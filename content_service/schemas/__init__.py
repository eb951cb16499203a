"""Pydantic schemas package."""

from content_service.schemas.common import HealthResponse  # noqa: F401
from content_service.schemas.extract import (  # noqa: F401
    BatchExtractItemResponse,
    BatchExtractRequest,
    BatchExtractResponse,
    ContentRecordResponse,
    ExtractRequest,
)
