from __future__ import annotations

from app.core.config import settings
from app.core.errors import ConfigurationError
from app.ocr.base_ocr import OCREngine
from app.ocr.mock_ocr import MockOCREngine


def get_ocr_engine() -> OCREngine:
    """Return the configured OCR engine instance.

    OCR_PROVIDER options:
        azure_read    — AzureReadEngine (submit + poll, AZURE_VISION_KEY/ENDPOINT)
        google_vision — GoogleVisionEngine (single call, GOOGLE_VISION_API_KEY)
        mock          — canned text (dev/test, no credentials required)
    """
    provider = settings.ocr_provider.lower().strip()

    if provider == "mock":
        return MockOCREngine()

    if provider == "azure_read":
        from app.ocr.azure_read import AzureReadConfig, AzureReadEngine
        return AzureReadEngine(
            AzureReadConfig(
                key=settings.azure_vision_key,
                endpoint=settings.azure_vision_endpoint,
                api_version=settings.azure_read_api_version,
                max_attempts=settings.azure_poll_max_attempts,
                poll_interval=settings.azure_poll_interval_seconds,
                timeout=settings.http_timeout_seconds,
            )
        )

    if provider == "google_vision":
        from app.ocr.google_vision import GoogleVisionConfig, GoogleVisionEngine
        return GoogleVisionEngine(
            GoogleVisionConfig(
                api_key=settings.google_vision_api_key,
                endpoint=settings.google_vision_endpoint,
                feature=settings.google_vision_feature,
                timeout=settings.http_timeout_seconds,
            )
        )

    raise ConfigurationError(f"Unknown OCR_PROVIDER={settings.ocr_provider!r}")
