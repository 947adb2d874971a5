"""Shared test fixtures."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from moderation_engine.config.settings import Settings
from moderation_engine.models.domain import ToxicitySignals
from moderation_engine.storage.blob_store import LocalBlobStore
from moderation_engine.storage.sqlite_submission_store import SQLiteSubmissionStore


@pytest.fixture
def tmp_dir():
    """Create a temporary directory."""
    return tempfile.mkdtemp()


@pytest.fixture
def settings(tmp_dir):
    """Test settings with temp paths and no external credentials."""
    return Settings(
        google_api_key="",
        perspective_api_key="",
        sqlite_db_path=str(Path(tmp_dir) / "test_moderation.db"),
        blob_storage_dir=str(Path(tmp_dir) / "uploads"),
        contextual_backoff_seconds=0.0,
    )


@pytest.fixture
async def store(settings):
    s = SQLiteSubmissionStore(settings.sqlite_db_path)
    await s.initialize()
    return s


@pytest.fixture
def blob_store(settings):
    b = LocalBlobStore(settings.blob_storage_dir)
    b.initialize()
    return b


@pytest.fixture
def low_signals():
    """Sub-scores that classify as Safe."""
    return ToxicitySignals(
        toxicity=0.1,
        severe_toxicity=0.1,
        insult=0.1,
        threat=0.1,
        identity_attack=0.1,
        profanity=0.1,
        sexually_explicit=0.1,
        flirtation=0.1,
    )


@pytest.fixture
def insulting_signals():
    """Sub-scores that classify as Harmful via the toxicity-and-insult rule."""
    return ToxicitySignals(
        toxicity=0.85,
        severe_toxicity=0.2,
        insult=0.9,
        threat=0.1,
        identity_attack=0.1,
        profanity=0.6,
        sexually_explicit=0.0,
        flirtation=0.0,
    )
