from __future__ import annotations

import asyncio
from typing import Any

from app.ocr.base_ocr import OCREngine, OcrRequest, OcrResult, PollStatus
from app.ocr.transport import ensure_not_cancelled

_SAMPLE_PAGE = ["IN THE CIRCUIT COURT", "Case No. 2024-CV-0001", "Plaintiff v. Defendant"]


class MockOCREngine(OCREngine):
    name = "mock"

    async def extract_text(
        self, request: OcrRequest, cancel: asyncio.Event | None = None
    ) -> OcrResult:
        # Mock OCR for development/testing
        ensure_not_cancelled(cancel)
        return self.parse_text({"lines": _SAMPLE_PAGE})

    def parse_text(self, payload: dict[str, Any]) -> OcrResult:
        lines = list(payload.get("lines") or [])
        return OcrResult(
            text="\n".join(lines),
            status=PollStatus.SUCCEEDED,
            line_count=len(lines),
            confidence=0.85,
            provider=self.name,
        )
