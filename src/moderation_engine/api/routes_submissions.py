"""Submission intake, status polling and recent-submission listing."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile

from moderation_engine.api.dependencies import get_lifecycle, get_settings
from moderation_engine.config.settings import Settings
from moderation_engine.exceptions import SubmissionNotFound
from moderation_engine.models.schemas import (
    AnalysisResult,
    RecentSubmissionItem,
    RecentSubmissionsResponse,
    StatusResponse,
    SubmitResponse,
    TextSubmissionRequest,
)
from moderation_engine.pipeline.lifecycle import SubmissionLifecycleManager

router = APIRouter(prefix="/api")


@router.post("/upload", response_model=SubmitResponse)
async def upload(
    file: UploadFile,
    lifecycle: SubmissionLifecycleManager = Depends(get_lifecycle),
) -> SubmitResponse:
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="No file uploaded")

    submission_id = await lifecycle.submit_file(
        content,
        file_name=file.filename or "upload",
        content_type=file.content_type,
    )
    return SubmitResponse(
        message="File uploaded successfully! Processing started.",
        submission_id=submission_id,
    )


@router.post("/analyze-text", response_model=SubmitResponse)
async def analyze_text(
    body: TextSubmissionRequest,
    lifecycle: SubmissionLifecycleManager = Depends(get_lifecycle),
) -> SubmitResponse:
    if not body.text.strip():
        raise HTTPException(status_code=400, detail="No text provided")

    submission_id = await lifecycle.submit_text(body.text)
    return SubmitResponse(
        message="Text received and processing started",
        submission_id=submission_id,
    )


@router.get("/analysis-status/{submission_id}", response_model=StatusResponse)
async def analysis_status(
    submission_id: str,
    lifecycle: SubmissionLifecycleManager = Depends(get_lifecycle),
) -> StatusResponse:
    try:
        view = await lifecycle.get_status(submission_id)
    except SubmissionNotFound:
        raise HTTPException(status_code=404, detail="Submission not found")

    return StatusResponse(
        submission_id=view.submission_id,
        status=view.status.value,
        result=AnalysisResult(**view.result) if view.result else None,
        error_message=view.error_message,
    )


@router.get("/recent-submissions", response_model=RecentSubmissionsResponse)
async def recent_submissions(
    limit: int | None = Query(None, ge=1, le=100),
    lifecycle: SubmissionLifecycleManager = Depends(get_lifecycle),
    settings: Settings = Depends(get_settings),
) -> RecentSubmissionsResponse:
    recent = await lifecycle.list_recent(limit or settings.recent_submissions_limit)
    return RecentSubmissionsResponse(
        submissions=[
            RecentSubmissionItem(
                id=r.submission_id,
                type=r.source_kind.value,
                created_at=r.created_at,
                classification=r.classification.value if r.classification else None,
                file_name=r.file_name,
                text_preview=r.text_preview,
            )
            for r in recent
        ]
    )
