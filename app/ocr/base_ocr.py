from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any

from app.core.errors import ImageValidationError


class PollStatus(str, Enum):
    NOT_STARTED = "notStarted"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PollStatus.SUCCEEDED, PollStatus.FAILED)


@dataclass(frozen=True)
class OcrRequest:
    image: bytes
    mime_type: str = "application/octet-stream"

    def __post_init__(self) -> None:
        if not self.image:
            raise ImageValidationError("Image payload is empty")


@dataclass(frozen=True)
class OcrResult:
    text: str
    status: PollStatus = PollStatus.SUCCEEDED
    line_count: int = 0
    confidence: float | None = None  # 0.0 to 1.0 when the vendor reports it
    provider: str = ""


class OCREngine:
    """Capability set every OCR provider implements."""

    name = "base"

    async def extract_text(
        self, request: OcrRequest, cancel: asyncio.Event | None = None
    ) -> OcrResult:
        raise NotImplementedError

    def parse_text(self, payload: dict[str, Any]) -> OcrResult:
        """Reshape the vendor's final JSON payload into an OcrResult."""
        raise NotImplementedError
