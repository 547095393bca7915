from __future__ import annotations

import base64
import binascii
import logging
import re

from fastapi import APIRouter, Depends

from app.core.errors import ImageValidationError
from app.ocr.base_ocr import OCREngine, OcrRequest
from app.ocr.factory import get_ocr_engine
from app.schemas import ErrorResponse, OcrRequestIn, OcrResponse

logger = logging.getLogger(__name__)
router = APIRouter()

_ERROR_RESPONSES = {
    status: {"model": ErrorResponse} for status in (400, 499, 500, 502, 504)
}
_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def _decode_image(payload: OcrRequestIn) -> OcrRequest:
    """Turn the base64 body (optionally a ``data:<mime>;base64,`` URL) into an OcrRequest."""
    encoded = (payload.image_base64 or "").strip()
    if not encoded:
        raise ImageValidationError("Missing imageBase64 in request body")

    mime_type = payload.mime_type
    if encoded.startswith("data:") and "," in encoded:
        header, encoded = encoded.split(",", 1)
        declared = header[len("data:"):].split(";", 1)[0]
        mime_type = declared or mime_type

    # Line-wrapped, unpadded and URL-safe input decodes like standard base64
    encoded = re.sub(r"\s+", "", encoded).translate(_URLSAFE_TO_STANDARD).rstrip("=")
    encoded += "=" * (-len(encoded) % 4)
    try:
        image = base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise ImageValidationError("imageBase64 is not valid base64", detail=str(exc)) from exc

    return OcrRequest(image=image, mime_type=mime_type)


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/api/ocr", response_model=OcrResponse, responses=_ERROR_RESPONSES)
async def extract_text(
    payload: OcrRequestIn,
    engine: OCREngine = Depends(get_ocr_engine),
) -> OcrResponse:
    ocr_request = _decode_image(payload)
    result = await engine.extract_text(ocr_request)

    logger.info(
        "ocr_request_complete",
        extra={
            "provider": result.provider,
            "mime_type": ocr_request.mime_type,
            "lines": result.line_count,
        },
    )
    return OcrResponse(text=result.text)
