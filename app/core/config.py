from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    # OCR provider: azure_read | google_vision | mock
    ocr_provider: str = "azure_read"

    # Azure Computer Vision Read API (ocr_provider=azure_read)
    azure_vision_key: str | None = None
    azure_vision_endpoint: str | None = None  # e.g. https://<name>.cognitiveservices.azure.com
    azure_read_api_version: str = "v3.2"
    azure_poll_max_attempts: int = 20
    azure_poll_interval_seconds: float = 1.0

    # Google Cloud Vision (ocr_provider=google_vision)
    google_vision_api_key: str | None = None
    google_vision_endpoint: str = "https://vision.googleapis.com/v1/images:annotate"
    google_vision_feature: str = "DOCUMENT_TEXT_DETECTION"

    http_timeout_seconds: float = 30.0
    cors_allow_origins: list[str] = ["*"]

    @field_validator("azure_vision_endpoint")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        return value.rstrip("/") if value else value


settings = Settings()
