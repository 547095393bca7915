"""GoogleVisionEngine tests — images:annotate is faked with httpx.MockTransport."""
from __future__ import annotations

import asyncio
import base64
import json

import httpx
import pytest

from app.core.errors import ConfigurationError, OcrCancelled, OperationFailed, SubmissionFailed
from app.ocr.base_ocr import OcrRequest
from app.ocr.google_vision import GoogleVisionConfig, GoogleVisionEngine


def _engine(response: httpx.Response, calls: list[httpx.Request], **overrides) -> GoogleVisionEngine:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return response

    config = GoogleVisionConfig(**{"api_key": "g-key", **overrides})
    return GoogleVisionEngine(config, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
async def test_single_call_returns_full_text_annotation() -> None:
    calls: list[httpx.Request] = []
    body = {
        "responses": [
            {
                "fullTextAnnotation": {
                    "text": "Hello\nWorld",
                    "pages": [{"confidence": 0.96}],
                }
            }
        ]
    }
    engine = _engine(httpx.Response(200, json=body), calls)

    result = await engine.extract_text(OcrRequest(image=b"page", mime_type="image/png"))

    assert result.text == "Hello\nWorld"
    assert result.line_count == 2
    assert result.confidence == pytest.approx(0.96)
    assert result.provider == "google_vision"
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_request_carries_image_feature_and_key() -> None:
    calls: list[httpx.Request] = []
    engine = _engine(httpx.Response(200, json={"responses": [{}]}), calls, feature="TEXT_DETECTION")

    await engine.extract_text(OcrRequest(image=b"\x01\x02"))

    sent = calls[0]
    assert sent.url.params["key"] == "g-key"
    payload = json.loads(sent.content)
    entry = payload["requests"][0]
    assert entry["image"]["content"] == base64.b64encode(b"\x01\x02").decode("ascii")
    assert entry["features"] == [{"type": "TEXT_DETECTION"}]


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"responses": [{}]}, {"responses": []}, {}])
async def test_missing_annotation_defaults_to_empty_text(body: dict) -> None:
    engine = _engine(httpx.Response(200, json=body), [])

    result = await engine.extract_text(OcrRequest(image=b"blank page"))

    assert result.text == ""
    assert result.line_count == 0


@pytest.mark.asyncio
async def test_per_image_error_is_operation_failed() -> None:
    error = {"code": 3, "message": "Bad image data."}
    engine = _engine(httpx.Response(200, json={"responses": [{"error": error}]}), [])

    with pytest.raises(OperationFailed) as exc_info:
        await engine.extract_text(OcrRequest(image=b"garbage"))

    assert exc_info.value.detail == error


@pytest.mark.asyncio
async def test_http_error_is_submission_failed() -> None:
    engine = _engine(httpx.Response(403, text="API key not valid"), [])

    with pytest.raises(SubmissionFailed) as exc_info:
        await engine.extract_text(OcrRequest(image=b"page"))

    assert exc_info.value.detail == "API key not valid"


@pytest.mark.asyncio
@pytest.mark.parametrize("api_key", [None, "", "   "])
async def test_missing_key_is_configuration_error_without_network(api_key: str | None) -> None:
    calls: list[httpx.Request] = []
    engine = _engine(httpx.Response(200, json={}), calls, api_key=api_key)

    with pytest.raises(ConfigurationError):
        await engine.extract_text(OcrRequest(image=b"page"))

    assert calls == []


@pytest.mark.asyncio
async def test_cancelled_before_call() -> None:
    calls: list[httpx.Request] = []
    cancel = asyncio.Event()
    cancel.set()
    engine = _engine(httpx.Response(200, json={}), calls)

    with pytest.raises(OcrCancelled):
        await engine.extract_text(OcrRequest(image=b"page"), cancel)

    assert calls == []


@pytest.mark.asyncio
async def test_transport_error_is_submission_failed() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    engine = GoogleVisionEngine(
        GoogleVisionConfig(api_key="g-key"),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(refuse)),
    )

    with pytest.raises(SubmissionFailed) as exc_info:
        await engine.extract_text(OcrRequest(image=b"page"))

    assert "connection refused" in exc_info.value.detail


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>gateway</html>"),
        httpx.Response(200, json=None),
        httpx.Response(200, json=["not", "an", "object"]),
        httpx.Response(200, json={"responses": ["oops"]}),
        httpx.Response(200, json={"responses": [{"fullTextAnnotation": "flat"}]}),
    ],
)
async def test_unreadable_body_is_submission_failed(response: httpx.Response) -> None:
    engine = _engine(response, [])

    with pytest.raises(SubmissionFailed, match="unreadable response"):
        await engine.extract_text(OcrRequest(image=b"page"))
