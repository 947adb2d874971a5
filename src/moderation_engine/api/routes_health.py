"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from moderation_engine.api.dependencies import get_dispatcher
from moderation_engine.models.schemas import HealthResponse
from moderation_engine.pipeline.dispatcher import BackgroundDispatcher

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(dispatcher: BackgroundDispatcher = Depends(get_dispatcher)) -> HealthResponse:
    return HealthResponse(status="ok", pending_pipelines=dispatcher.pending)
