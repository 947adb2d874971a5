"""HTTP client helpers: submit content and poll its status until it settles."""

from __future__ import annotations

import asyncio
import mimetypes
from collections.abc import Awaitable, Callable
from pathlib import Path

import httpx

DEFAULT_BASE_URL = "http://localhost:5000"
DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_MAX_ATTEMPTS = 30

TERMINAL_STATUSES = frozenset({"completed", "error"})


async def submit_text(client: httpx.AsyncClient, text: str) -> str:
    response = await client.post("/api/analyze-text", json={"text": text})
    response.raise_for_status()
    return response.json()["submission_id"]


async def submit_file(client: httpx.AsyncClient, path: Path) -> str:
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    files = {"file": (path.name, path.read_bytes(), content_type)}
    response = await client.post("/api/upload", files=files)
    response.raise_for_status()
    return response.json()["submission_id"]


async def poll_until_terminal(
    client: httpx.AsyncClient,
    submission_id: str,
    interval: float = DEFAULT_POLL_INTERVAL,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> dict:
    """Re-request the submission status until it is terminal or attempts run out.

    Returns the last status payload; its ``status`` is non-terminal when the
    attempt budget was exhausted first.
    """
    data: dict = {}
    for attempt in range(1, max_attempts + 1):
        response = await client.get(f"/api/analysis-status/{submission_id}")
        response.raise_for_status()
        data = response.json()
        if data["status"] in TERMINAL_STATUSES:
            return data
        if attempt < max_attempts:
            await sleep(interval)
    return data
