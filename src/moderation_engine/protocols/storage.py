"""Protocols for the record store and blob store collaborators."""

from __future__ import annotations

from typing import Protocol

from moderation_engine.models.domain import Blob, Submission, SubmissionStatus


class SubmissionStore(Protocol):
    async def initialize(self) -> None: ...

    async def create(self, submission: Submission) -> str: ...

    async def get(self, submission_id: str) -> Submission | None: ...

    async def update(
        self,
        submission_id: str,
        fields: dict,
        expected_status: SubmissionStatus,
    ) -> bool:
        """Apply ``fields`` only if the record is still in ``expected_status``."""
        ...

    async def list_recent(
        self, limit: int = 10, status: SubmissionStatus | None = None
    ) -> list[Submission]: ...


class BlobStore(Protocol):
    async def save(self, content: bytes, file_name: str, content_type: str) -> str: ...

    async def fetch(self, reference: str) -> Blob: ...
