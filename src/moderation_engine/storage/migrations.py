"""Idempotent database schema creation."""

from __future__ import annotations

import aiosqlite

SUBMISSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS submissions (
    submission_id TEXT PRIMARY KEY,
    source_kind TEXT NOT NULL,
    raw_reference TEXT NOT NULL,
    file_name TEXT,
    content_type TEXT,
    status TEXT NOT NULL,
    extracted_text TEXT,
    toxicity_signals TEXT,
    cyberbullying TEXT,
    contextual_assessment TEXT,
    classification TEXT,
    error_message TEXT,
    created_at TEXT NOT NULL
)
"""

SUBMISSIONS_CREATED_INDEX = """
CREATE INDEX IF NOT EXISTS idx_submissions_created_at ON submissions(created_at)
"""

SUBMISSIONS_STATUS_INDEX = """
CREATE INDEX IF NOT EXISTS idx_submissions_status ON submissions(status)
"""


async def initialize_submission_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(SUBMISSIONS_TABLE)
        await db.execute(SUBMISSIONS_CREATED_INDEX)
        await db.execute(SUBMISSIONS_STATUS_INDEX)
        await db.commit()
