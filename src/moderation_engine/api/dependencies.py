"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from moderation_engine.config.settings import Settings
from moderation_engine.pipeline.dispatcher import BackgroundDispatcher
from moderation_engine.pipeline.lifecycle import SubmissionLifecycleManager


def get_lifecycle(request: Request) -> SubmissionLifecycleManager:
    return request.app.state.lifecycle


def get_dispatcher(request: Request) -> BackgroundDispatcher:
    return request.app.state.dispatcher


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
