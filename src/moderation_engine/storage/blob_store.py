"""Local filesystem blob store for uploaded files."""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path
from uuid import uuid4

from moderation_engine.exceptions import BlobNotFound
from moderation_engine.models.domain import Blob

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class LocalBlobStore:
    """Stores each upload as ``<ref>.bin`` plus a ``<ref>.json`` metadata sidecar."""

    def __init__(self, root_dir: str) -> None:
        self._root = Path(root_dir)

    def initialize(self) -> None:
        self._root.mkdir(parents=True, exist_ok=True)

    async def save(self, content: bytes, file_name: str, content_type: str) -> str:
        safe_name = _UNSAFE_CHARS.sub("_", Path(file_name).name) or "upload"
        reference = f"{uuid4().hex}_{safe_name}"
        meta = {"file_name": file_name, "content_type": content_type}
        await asyncio.to_thread(self._write, reference, content, meta)
        return reference

    async def fetch(self, reference: str) -> Blob:
        return await asyncio.to_thread(self._read, reference)

    def _paths(self, reference: str) -> tuple[Path, Path]:
        if Path(reference).name != reference:
            raise BlobNotFound(f"Invalid blob reference: {reference}")
        return self._root / f"{reference}.bin", self._root / f"{reference}.json"

    def _write(self, reference: str, content: bytes, meta: dict) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        data_path, meta_path = self._paths(reference)
        data_path.write_bytes(content)
        meta_path.write_text(json.dumps(meta), encoding="utf-8")

    def _read(self, reference: str) -> Blob:
        data_path, meta_path = self._paths(reference)
        if not data_path.exists() or not meta_path.exists():
            raise BlobNotFound(f"No blob stored for reference: {reference}")
        meta = json.loads(meta_path.read_text(encoding="utf-8"))
        return Blob(
            content=data_path.read_bytes(),
            file_name=meta["file_name"],
            content_type=meta["content_type"],
        )
