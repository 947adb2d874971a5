"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import FastAPI

from moderation_engine.analysis.contextual import ContextualAnalyzer
from moderation_engine.analysis.gemini_provider import GeminiProvider
from moderation_engine.api.middleware import RequestContextMiddleware
from moderation_engine.api.routes_health import router as health_router
from moderation_engine.api.routes_submissions import router as submissions_router
from moderation_engine.config.settings import Settings
from moderation_engine.extraction.extractor_registry import create_default_registry
from moderation_engine.observability.logger import get_logger, setup_logging
from moderation_engine.pipeline.analysis_stage import AnalysisStage
from moderation_engine.pipeline.dispatcher import BackgroundDispatcher
from moderation_engine.pipeline.lifecycle import SubmissionLifecycleManager
from moderation_engine.scoring.harassment import HarassmentDetector
from moderation_engine.scoring.toxicity import PerspectiveToxicityScorer
from moderation_engine.storage.blob_store import LocalBlobStore
from moderation_engine.storage.sqlite_submission_store import SQLiteSubmissionStore

logger = get_logger("app")

SHUTDOWN_DRAIN_SECONDS = 30.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_json)

    # Ensure data directories exist
    Path(settings.sqlite_db_path).parent.mkdir(parents=True, exist_ok=True)

    # Storage
    store = SQLiteSubmissionStore(settings.sqlite_db_path)
    await store.initialize()
    blob_store = LocalBlobStore(settings.blob_storage_dir)
    blob_store.initialize()

    # Toxicity scoring (one shared HTTP client)
    perspective_client = httpx.AsyncClient(timeout=settings.perspective_timeout_seconds)
    toxicity_scorer = PerspectiveToxicityScorer(
        api_key=settings.perspective_api_key,
        url=settings.perspective_url,
        languages=settings.languages,
        timeout=settings.perspective_timeout_seconds,
        client=perspective_client,
    )

    # LLM (absent key -> analyzer reports "not configured")
    llm = (
        GeminiProvider(api_key=settings.google_api_key, model=settings.gemini_model)
        if settings.google_api_key
        else None
    )
    contextual_analyzer = ContextualAnalyzer(
        llm,
        max_attempts=settings.contextual_max_attempts,
        backoff_seconds=settings.contextual_backoff_seconds,
        timeout_seconds=settings.contextual_timeout_seconds,
        temperature=settings.gemini_temperature,
        max_tokens=settings.gemini_max_tokens,
    )

    # Pipeline
    analysis = AnalysisStage(
        toxicity_scorer=toxicity_scorer,
        harassment_detector=HarassmentDetector(),
        contextual_analyzer=contextual_analyzer,
    )
    dispatcher = BackgroundDispatcher(max_concurrency=settings.max_concurrent_pipelines)
    lifecycle = SubmissionLifecycleManager(
        store=store,
        blob_store=blob_store,
        extractors=create_default_registry(settings.ocr_language),
        analysis=analysis,
        dispatcher=dispatcher,
        text_preview_chars=settings.text_preview_chars,
    )

    # Attach to app state
    app.state.lifecycle = lifecycle
    app.state.dispatcher = dispatcher
    app.state.store = store

    logger.info(
        "startup_complete",
        submissions=await store.count_by_status(),
        toxicity_configured=bool(settings.perspective_api_key),
        contextual_configured=contextual_analyzer.configured,
    )

    yield

    # Shutdown: let in-flight pipelines reach a terminal status
    await dispatcher.drain(timeout=SHUTDOWN_DRAIN_SECONDS)
    await perspective_client.aclose()
    logger.info("shutdown_complete", pending=dispatcher.pending)


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(
        title="Content Moderation Engine",
        version="1.0.0",
        description="Multi-signal toxicity and harassment analysis for uploaded content",
        lifespan=lifespan,
    )
    app.state.settings = settings or Settings()
    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(submissions_router, tags=["submissions"])
    return app
