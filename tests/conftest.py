"""Pytest configuration and fixtures."""

import pytest

from tests.fakes import MemoryBackend


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep host S3/deadline settings out of tests."""
    for name in (
        "S3_ENDPOINT",
        "S3_ACCESS_KEY",
        "S3_SECRET_KEY",
        "S3_REGION",
        "UPLOAD_TIMEOUT_SECONDS",
        "FETCH_TIMEOUT_SECONDS",
        "LIST_TIMEOUT_SECONDS",
        "LIST_PAGE_SIZE",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def backend():
    """In-memory backend with two names per listing page."""
    return MemoryBackend(page_size=2)
