"""AzureReadEngine: Azure Computer Vision Read API (submit, then poll).

The Read API is asynchronous. The image is POSTed to ``/read/analyze``, the
service answers 202 with an ``Operation-Location`` header, and the result is
fetched by polling that URL until the operation reaches a terminal status.

Config (via .env):
    OCR_PROVIDER=azure_read
    AZURE_VISION_KEY=...            # Key 1 of the Computer Vision resource
    AZURE_VISION_ENDPOINT=https://<name>.cognitiveservices.azure.com
    AZURE_POLL_MAX_ATTEMPTS=20
    AZURE_POLL_INTERVAL_SECONDS=1.0
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_result, stop_after_attempt, wait_fixed

from app.core.errors import (
    ConfigurationError,
    MissingOperationHandle,
    OcrTimeout,
    OperationFailed,
    PollTransportError,
    SubmissionFailed,
)
from app.ocr.base_ocr import OCREngine, OcrRequest, OcrResult, PollStatus
from app.ocr.transport import ensure_not_cancelled, http_session, pause

logger = logging.getLogger(__name__)

_KEY_HEADER = "Ocp-Apim-Subscription-Key"


@dataclass(frozen=True)
class AzureReadConfig:
    key: str | None
    endpoint: str | None
    api_version: str = "v3.2"
    max_attempts: int = 20
    poll_interval: float = 1.0
    timeout: float = 30.0

    def require(self) -> None:
        missing = [
            name
            for name, value in (
                ("AZURE_VISION_KEY", self.key),
                ("AZURE_VISION_ENDPOINT", self.endpoint),
            )
            if not (value and value.strip())
        ]
        if missing:
            logger.error("azure_config_missing", extra={"missing": ",".join(missing)})
            raise ConfigurationError(
                "Server misconfiguration: Azure credentials missing",
                detail={"missing": missing},
            )
        if self.max_attempts < 1:
            raise ConfigurationError(
                "Server misconfiguration: AZURE_POLL_MAX_ATTEMPTS must be at least 1"
            )

    @property
    def analyze_url(self) -> str:
        return f"{(self.endpoint or '').rstrip('/')}/vision/{self.api_version}/read/analyze"


@dataclass(frozen=True)
class OperationHandle:
    url: str


@dataclass(frozen=True)
class PollResponse:
    status: PollStatus
    payload: dict[str, Any]


def flatten_read_result(payload: dict[str, Any]) -> tuple[list[str], list[float]]:
    """Return the line texts (page order, then line order) and all word confidences."""
    analyze_result = payload.get("analyzeResult") or {}

    lines: list[str] = []
    confidences: list[float] = []
    for page in analyze_result.get("readResults") or []:
        for line in page.get("lines") or []:
            lines.append(line.get("text", ""))
            confidences.extend(
                float(word["confidence"])
                for word in line.get("words") or []
                if word.get("confidence") is not None
            )
    return lines, confidences


class AzureReadEngine(OCREngine):
    name = "azure_read"

    def __init__(
        self, config: AzureReadConfig, *, http_client: httpx.AsyncClient | None = None
    ) -> None:
        self._config = config
        self._http_client = http_client

    async def extract_text(
        self, request: OcrRequest, cancel: asyncio.Event | None = None
    ) -> OcrResult:
        self._config.require()
        ensure_not_cancelled(cancel)

        async with http_session(self._http_client, self._config.timeout) as client:
            handle = await self.submit(client, request)
            poll = await self.wait_for_result(client, handle, cancel)

        result = self.parse_text(poll.payload)
        logger.info(
            "azure_read_complete",
            extra={"lines": result.line_count, "confidence": result.confidence},
        )
        return result

    # ------------------------------------------------------------------ #
    #  Step 1: submit                                                      #
    # ------------------------------------------------------------------ #

    async def submit(self, client: httpx.AsyncClient, request: OcrRequest) -> OperationHandle:
        url = self._config.analyze_url
        headers = {_KEY_HEADER: self._config.key or "", "Content-Type": request.mime_type}
        try:
            response = await client.post(url, headers=headers, content=request.image)
        except httpx.HTTPError as exc:
            logger.error("azure_read_submit_error", extra={"error": str(exc)})
            raise SubmissionFailed("Azure OCR submission failed", detail=str(exc)) from exc

        if not response.is_success:
            logger.error(
                "azure_read_submit_error",
                extra={"status_code": response.status_code, "body": response.text[:200]},
            )
            raise SubmissionFailed("Azure OCR submission failed", detail=response.text)

        location = response.headers.get("Operation-Location")
        if not location:
            raise MissingOperationHandle("Azure did not return an Operation-Location header")

        handle = OperationHandle(url=str(httpx.URL(url).join(location)))
        logger.info("azure_read_submitted", extra={"bytes": len(request.image)})
        return handle

    # ------------------------------------------------------------------ #
    #  Step 2: poll                                                        #
    # ------------------------------------------------------------------ #

    async def poll(self, client: httpx.AsyncClient, handle: OperationHandle) -> PollResponse:
        try:
            response = await client.get(handle.url, headers={_KEY_HEADER: self._config.key or ""})
        except httpx.HTTPError as exc:
            logger.error("azure_read_poll_error", extra={"error": str(exc)})
            raise PollTransportError("Azure OCR polling failed", detail=str(exc)) from exc

        if not response.is_success:
            logger.error(
                "azure_read_poll_error",
                extra={"status_code": response.status_code, "body": response.text[:200]},
            )
            raise PollTransportError("Azure OCR polling failed", detail=response.text)

        try:
            payload = response.json()
            status = PollStatus(payload.get("status"))
        except (ValueError, AttributeError) as exc:
            raise PollTransportError(
                "Azure OCR polling returned an unreadable status", detail=response.text
            ) from exc

        logger.debug("azure_read_poll", extra={"status": status.value})
        return PollResponse(status=status, payload=payload)

    async def wait_for_result(
        self,
        client: httpx.AsyncClient,
        handle: OperationHandle,
        cancel: asyncio.Event | None = None,
    ) -> PollResponse:
        """Poll *handle* until succeeded, failed, or the attempt budget runs out.

        Every attempt is preceded by a ``poll_interval`` wait. Only non-terminal
        statuses lead to another attempt; exceptions raised by :meth:`poll`
        propagate immediately.
        """

        async def _wait(seconds: float) -> None:
            await pause(seconds, cancel)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._config.max_attempts),
            wait=wait_fixed(self._config.poll_interval),
            retry=retry_if_result(lambda polled: not polled.status.is_terminal),
            retry_error_callback=lambda state: state.outcome.result(),
            sleep=_wait,
        )

        await _wait(self._config.poll_interval)
        polled: PollResponse = await retrying(self.poll, client, handle)

        if polled.status is PollStatus.FAILED:
            raise OperationFailed("Azure OCR operation failed", detail=polled.payload)
        if polled.status is not PollStatus.SUCCEEDED:
            logger.warning(
                "azure_read_timeout", extra={"attempts": self._config.max_attempts}
            )
            raise OcrTimeout(
                "Azure OCR timed out", detail={"attempts": self._config.max_attempts}
            )
        return polled

    # ------------------------------------------------------------------ #
    #  Step 3: extract                                                     #
    # ------------------------------------------------------------------ #

    def parse_text(self, payload: dict[str, Any]) -> OcrResult:
        lines, confidences = flatten_read_result(payload)
        return OcrResult(
            text="\n".join(lines),
            status=PollStatus.SUCCEEDED,
            line_count=len(lines),
            confidence=sum(confidences) / len(confidences) if confidences else None,
            provider=self.name,
        )
