"""GoogleVisionEngine: Google Cloud Vision ``images:annotate`` (single call).

Config (via .env):
    OCR_PROVIDER=google_vision
    GOOGLE_VISION_API_KEY=...
    GOOGLE_VISION_FEATURE=DOCUMENT_TEXT_DETECTION   # or TEXT_DETECTION
"""
from __future__ import annotations

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from app.core.errors import ConfigurationError, OperationFailed, SubmissionFailed
from app.ocr.base_ocr import OCREngine, OcrRequest, OcrResult, PollStatus
from app.ocr.transport import ensure_not_cancelled, http_session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoogleVisionConfig:
    api_key: str | None
    endpoint: str = "https://vision.googleapis.com/v1/images:annotate"
    feature: str = "DOCUMENT_TEXT_DETECTION"
    timeout: float = 30.0

    def require(self) -> None:
        if not (self.api_key and self.api_key.strip()):
            logger.error("google_vision_config_missing")
            raise ConfigurationError(
                "Server misconfiguration: Google Vision API key missing",
                detail={"missing": ["GOOGLE_VISION_API_KEY"]},
            )


class GoogleVisionEngine(OCREngine):
    name = "google_vision"

    def __init__(
        self, config: GoogleVisionConfig, *, http_client: httpx.AsyncClient | None = None
    ) -> None:
        self._config = config
        self._http_client = http_client

    def _build_body(self, request: OcrRequest) -> dict[str, Any]:
        return {
            "requests": [
                {
                    "image": {"content": base64.b64encode(request.image).decode("ascii")},
                    "features": [{"type": self._config.feature}],
                }
            ]
        }

    async def extract_text(
        self, request: OcrRequest, cancel: asyncio.Event | None = None
    ) -> OcrResult:
        self._config.require()
        ensure_not_cancelled(cancel)

        async with http_session(self._http_client, self._config.timeout) as client:
            try:
                response = await client.post(
                    self._config.endpoint,
                    params={"key": self._config.api_key},
                    json=self._build_body(request),
                )
            except httpx.HTTPError as exc:
                logger.error("google_vision_error", extra={"error": str(exc)})
                raise SubmissionFailed("Google Vision request failed", detail=str(exc)) from exc

        if not response.is_success:
            logger.error(
                "google_vision_error",
                extra={"status_code": response.status_code, "body": response.text[:200]},
            )
            raise SubmissionFailed("Google Vision request failed", detail=response.text)

        try:
            result = self.parse_text(response.json())
        except (ValueError, AttributeError, TypeError) as exc:
            raise SubmissionFailed(
                "Google Vision returned an unreadable response", detail=response.text
            ) from exc

        logger.info("google_vision_complete", extra={"lines": result.line_count})
        return result

    def parse_text(self, payload: dict[str, Any]) -> OcrResult:
        first = (payload.get("responses") or [{}])[0]
        if first.get("error"):
            raise OperationFailed("Google Vision could not annotate the image", detail=first["error"])

        annotation = first.get("fullTextAnnotation") or {}
        text = annotation.get("text", "")
        confidences = [
            float(page["confidence"])
            for page in annotation.get("pages") or []
            if page.get("confidence") is not None
        ]
        return OcrResult(
            text=text,
            status=PollStatus.SUCCEEDED,
            line_count=len(text.splitlines()),
            confidence=sum(confidences) / len(confidences) if confidences else None,
            provider=self.name,
        )
