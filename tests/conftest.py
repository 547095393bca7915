"""Shared pytest configuration and fixtures for the OCR service tests."""
from __future__ import annotations

import os

# Provide required env vars before any app module is imported
os.environ.setdefault("OCR_PROVIDER", "mock")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402

ENDPOINT = "https://example.cognitiveservices.azure.com"
ANALYZE_URL = f"{ENDPOINT}/vision/v3.2/read/analyze"
OPERATION_URL = f"{ENDPOINT}/vision/v3.2/read/analyzeResults/op-123"


def read_result(*pages: list[str], status: str = "succeeded") -> dict:
    """Build a Read API poll body whose analyzeResult holds *pages* of line texts."""
    return {
        "status": status,
        "analyzeResult": {
            "readResults": [
                {"page": number, "lines": [{"text": text} for text in lines]}
                for number, lines in enumerate(pages, start=1)
            ]
        },
    }


@pytest.fixture()
def png_bytes() -> bytes:
    return b"\x89PNG\r\n\x1a\nfake page"
