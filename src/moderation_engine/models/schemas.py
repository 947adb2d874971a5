"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class TextSubmissionRequest(BaseModel):
    text: str = Field(..., description="Raw text to analyze")


class SubmitResponse(BaseModel):
    success: bool = True
    message: str
    submission_id: str


class ToxicityAnalysis(BaseModel):
    toxicity: float
    severe_toxicity: float
    insult: float
    threat: float
    identity_attack: float
    profanity: float
    sexually_explicit: float
    flirtation: float
    degraded: bool = False
    source: Literal["live", "fallback", "unavailable"] = "live"


class AnalysisResult(BaseModel):
    toxicity_analysis: ToxicityAnalysis
    cyberbullying_score: float
    cyberbullying_categories: dict[str, bool]
    cyberbullying_strategy: Literal["signal_fusion", "lexical"]
    contextual_analysis: str
    classification: Literal["Safe", "Potentially Harmful", "Harmful"]
    original_text: str | None = None


class StatusResponse(BaseModel):
    success: bool = True
    submission_id: str
    status: Literal["pending", "extracting", "analyzing", "completed", "error"]
    result: AnalysisResult | None = None
    error_message: str | None = None


class RecentSubmissionItem(BaseModel):
    id: str
    type: Literal["file", "text"]
    created_at: datetime
    classification: str | None = None
    file_name: str | None = None
    text_preview: str | None = None


class RecentSubmissionsResponse(BaseModel):
    success: bool = True
    submissions: list[RecentSubmissionItem]


class HealthResponse(BaseModel):
    status: str
    pending_pipelines: int
