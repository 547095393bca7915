from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import router
from app.core.config import settings
from app.core.errors import OcrError
from app.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="Document Page OCR", version="0.1.0")

    # Added before CORSMiddleware so that it runs inside the CORS layer
    @app.middleware("http")
    async def _unexpected_error(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("unexpected_error", extra={"path": request.url.path})
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "detail": str(exc)},
            )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.include_router(router)

    @app.get("/")
    async def root():
        return {
            "message": "Welcome to the Document Page OCR API",
            "docs": "/docs",
            "health": "/health",
        }

    @app.exception_handler(OcrError)
    async def _ocr_error(request: Request, exc: OcrError) -> JSONResponse:
        logger.warning(
            "ocr_request_failed",
            extra={"kind": exc.kind, "http_status": exc.http_status, "path": request.url.path},
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    return app


app = create_app()
