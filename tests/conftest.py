"""Shared pytest fixtures for route tests.

Usage in new test files:
    def test_something(client):
        resp = client.post("/api/v1/extract", json={"url": "https://example.com"})
        ...
"""

from __future__ import annotations

from typing import Callable

import pytest
from fastapi.testclient import TestClient

from content_service.main import app
from content_service.services.extractors import ContentRecord, ContentType


@pytest.fixture()
def client() -> TestClient:
    """TestClient for the FastAPI app."""
    with TestClient(app) as tc:
        yield tc


@pytest.fixture()
def make_record() -> Callable[..., ContentRecord]:
    """Return a helper that builds a ContentRecord with sensible defaults."""

    def _make(
        content_type: ContentType = ContentType.WEBPAGE,
        url: str = "https://example.com/article",
        title: str = "Article",
        content: str = "Article body " * 20,
    ) -> ContentRecord:
        if content_type is ContentType.VIDEO:
            return ContentRecord(
                url=url,
                type=content_type,
                source_id="dQw4w9WgXcQ",
                title=title,
                source_name="Rick Astley",
                content=content,
                metadata={"duration": "3:33", "language": "en"},
            )
        return ContentRecord(
            url=url,
            type=content_type,
            source_id=None,
            title=title,
            source_name="example.com",
            content=content,
        )

    return _make
