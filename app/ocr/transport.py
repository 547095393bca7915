from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from app.core.errors import OcrCancelled


@asynccontextmanager
async def http_session(
    client: httpx.AsyncClient | None, timeout: float
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client as-is, or open (and close) a private one."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=timeout) as owned:
        yield owned


def ensure_not_cancelled(cancel: asyncio.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise OcrCancelled("OCR request cancelled")


async def pause(seconds: float, cancel: asyncio.Event | None = None) -> None:
    """Suspend for *seconds*, waking early with OcrCancelled once *cancel* is set."""
    if cancel is None:
        await asyncio.sleep(seconds)
        return
    ensure_not_cancelled(cancel)
    if seconds <= 0:
        await asyncio.sleep(0)
        ensure_not_cancelled(cancel)
        return
    try:
        await asyncio.wait_for(cancel.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return
    raise OcrCancelled("OCR request cancelled")
