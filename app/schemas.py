from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class OcrRequestIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Optional so a missing field surfaces as our 400, not a framework 422
    image_base64: str | None = Field(default=None, alias="imageBase64")
    mime_type: str = Field(default="image/png", alias="mimeType")


class OcrResponse(BaseModel):
    text: str


class ErrorResponse(BaseModel):
    error: str
    kind: str | None = None
    detail: Any = None
