"""SQLite-backed submission record store."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum

import aiosqlite

from moderation_engine.models.domain import (
    Classification,
    CyberbullyingResult,
    SourceKind,
    Submission,
    SubmissionStatus,
    ToxicitySignals,
)
from moderation_engine.storage.migrations import initialize_submission_db

# Fields a stage may write after creation. Identity fields never change.
MUTABLE_COLUMNS = frozenset(
    {
        "status",
        "extracted_text",
        "toxicity_signals",
        "cyberbullying",
        "contextual_assessment",
        "classification",
        "error_message",
    }
)


class SQLiteSubmissionStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        await initialize_submission_db(self._db_path)

    async def create(self, submission: Submission) -> str:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "INSERT INTO submissions "
                "(submission_id, source_kind, raw_reference, file_name, content_type, status, "
                "extracted_text, toxicity_signals, cyberbullying, contextual_assessment, "
                "classification, error_message, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    submission.submission_id,
                    submission.source_kind.value,
                    submission.raw_reference,
                    submission.file_name,
                    submission.content_type,
                    submission.status.value,
                    submission.extracted_text,
                    self._encode(submission.toxicity_signals),
                    self._encode(submission.cyberbullying),
                    submission.contextual_assessment,
                    self._encode(submission.classification),
                    submission.error_message,
                    submission.created_at.isoformat(),
                ),
            )
            await db.commit()
        return submission.submission_id

    async def update(
        self,
        submission_id: str,
        fields: dict,
        expected_status: SubmissionStatus,
    ) -> bool:
        """Compare-and-set update: one statement, applied only from ``expected_status``."""
        unknown = set(fields) - MUTABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update submission fields: {sorted(unknown)}")
        if not fields:
            return False

        columns = sorted(fields)
        assignments = ", ".join(f"{column} = ?" for column in columns)
        values = [self._encode(fields[column]) for column in columns]

        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute(
                f"UPDATE submissions SET {assignments} WHERE submission_id = ? AND status = ?",
                (*values, submission_id, expected_status.value),
            )
            await db.commit()
            return cursor.rowcount == 1

    async def get(self, submission_id: str) -> Submission | None:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM submissions WHERE submission_id = ?", (submission_id,)
            ) as cursor:
                row = await cursor.fetchone()
                if row is None:
                    return None
                return self._row_to_submission(row)

    async def list_recent(
        self, limit: int = 10, status: SubmissionStatus | None = None
    ) -> list[Submission]:
        query = "SELECT * FROM submissions"
        params: list = []
        if status is not None:
            query += " WHERE status = ?"
            params.append(status.value)
        query += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
        params.append(limit)

        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(query, params) as cursor:
                rows = await cursor.fetchall()
                return [self._row_to_submission(row) for row in rows]

    async def count_by_status(self) -> dict[str, int]:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute(
                "SELECT status, COUNT(*) FROM submissions GROUP BY status"
            ) as cursor:
                rows = await cursor.fetchall()
                return {row[0]: row[1] for row in rows}

    @staticmethod
    def _encode(value):
        if isinstance(value, (ToxicitySignals, CyberbullyingResult)):
            return json.dumps(value.to_dict())
        if isinstance(value, Enum):
            return value.value
        return value

    @staticmethod
    def _row_to_submission(row: aiosqlite.Row) -> Submission:
        signals = row["toxicity_signals"]
        cyberbullying = row["cyberbullying"]
        classification = row["classification"]
        return Submission(
            submission_id=row["submission_id"],
            source_kind=SourceKind(row["source_kind"]),
            raw_reference=row["raw_reference"],
            status=SubmissionStatus(row["status"]),
            file_name=row["file_name"],
            content_type=row["content_type"],
            extracted_text=row["extracted_text"],
            toxicity_signals=ToxicitySignals.from_dict(json.loads(signals)) if signals else None,
            cyberbullying=(
                CyberbullyingResult.from_dict(json.loads(cyberbullying)) if cyberbullying else None
            ),
            contextual_assessment=row["contextual_assessment"],
            classification=Classification(classification) if classification else None,
            error_message=row["error_message"],
            created_at=datetime.fromisoformat(row["created_at"]).replace(tzinfo=timezone.utc),
        )
