"""Error taxonomy shared by every OCR engine and the HTTP boundary.

Each error carries a stable ``kind`` tag and the HTTP status the API layer
answers with. Configuration problems map to 500, caller mistakes to 400,
vendor-side failures to 502 and an exhausted poll budget to 504.
"""
from __future__ import annotations

from typing import Any


class OcrError(Exception):
    kind = "ocr_error"
    http_status = 500

    def __init__(self, message: str, detail: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "kind": self.kind, "detail": self.detail}


class ConfigurationError(OcrError):
    """A required credential or endpoint is missing or blank."""

    kind = "configuration_error"
    http_status = 500


class ImageValidationError(OcrError):
    """The caller supplied no image, or an image that cannot be decoded."""

    kind = "validation_error"
    http_status = 400


class SubmissionFailed(OcrError):
    kind = "submission_failed"
    http_status = 502


class PollTransportError(OcrError):
    kind = "poll_transport_error"
    http_status = 502


class MissingOperationHandle(OcrError):
    kind = "missing_operation_handle"
    http_status = 502


class OperationFailed(OcrError):
    """The vendor explicitly reported the job as failed."""

    kind = "operation_failed"
    http_status = 502


class OcrTimeout(OcrError):
    kind = "timeout"
    http_status = 504


class OcrCancelled(OcrError):
    kind = "cancelled"
    http_status = 499  # client closed request
