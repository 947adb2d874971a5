"""Core domain objects used throughout the system."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class SourceKind(str, Enum):
    FILE = "file"
    TEXT = "text"


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    EXTRACTING = "extracting"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (SubmissionStatus.COMPLETED, SubmissionStatus.ERROR)


# One-directional: nothing leaves a terminal status.
ALLOWED_TRANSITIONS: dict[SubmissionStatus, frozenset[SubmissionStatus]] = {
    SubmissionStatus.PENDING: frozenset(
        {SubmissionStatus.EXTRACTING, SubmissionStatus.ANALYZING, SubmissionStatus.ERROR}
    ),
    SubmissionStatus.EXTRACTING: frozenset({SubmissionStatus.ANALYZING, SubmissionStatus.ERROR}),
    SubmissionStatus.ANALYZING: frozenset({SubmissionStatus.COMPLETED, SubmissionStatus.ERROR}),
    SubmissionStatus.COMPLETED: frozenset(),
    SubmissionStatus.ERROR: frozenset(),
}


class Classification(str, Enum):
    SAFE = "Safe"
    POTENTIALLY_HARMFUL = "Potentially Harmful"
    HARMFUL = "Harmful"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    Classification.SAFE: 0,
    Classification.POTENTIALLY_HARMFUL: 1,
    Classification.HARMFUL: 2,
}


@dataclass
class ToxicitySignals:
    toxicity: float = 0.0
    severe_toxicity: float = 0.0
    insult: float = 0.0
    threat: float = 0.0
    identity_attack: float = 0.0
    profanity: float = 0.0
    sexually_explicit: float = 0.0
    flirtation: float = 0.0
    degraded: bool = False
    source: str = "live"  # "live", "fallback", "unavailable"

    def to_dict(self) -> dict:
        return {
            "toxicity": self.toxicity,
            "severe_toxicity": self.severe_toxicity,
            "insult": self.insult,
            "threat": self.threat,
            "identity_attack": self.identity_attack,
            "profanity": self.profanity,
            "sexually_explicit": self.sexually_explicit,
            "flirtation": self.flirtation,
            "degraded": self.degraded,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ToxicitySignals:
        return cls(**data)


@dataclass
class CyberbullyingResult:
    score: float
    categories: dict[str, bool]
    strategy: str  # "signal_fusion", "lexical"

    def to_dict(self) -> dict:
        return {"score": self.score, "categories": dict(self.categories), "strategy": self.strategy}

    @classmethod
    def from_dict(cls, data: dict) -> CyberbullyingResult:
        return cls(score=data["score"], categories=data["categories"], strategy=data["strategy"])


@dataclass
class Blob:
    content: bytes
    file_name: str
    content_type: str


@dataclass
class AnalysisOutcome:
    toxicity_signals: ToxicitySignals
    cyberbullying: CyberbullyingResult
    contextual_assessment: str
    classification: Classification


@dataclass
class Submission:
    submission_id: str
    source_kind: SourceKind
    raw_reference: str
    status: SubmissionStatus = SubmissionStatus.PENDING
    file_name: str | None = None
    content_type: str | None = None
    extracted_text: str | None = None
    toxicity_signals: ToxicitySignals | None = None
    cyberbullying: CyberbullyingResult | None = None
    contextual_assessment: str | None = None
    classification: Classification | None = None
    error_message: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def analysis_text(self) -> str | None:
        """Text the scoring stage runs on: extracted for files, the payload for text."""
        if self.source_kind is SourceKind.TEXT:
            return self.raw_reference
        return self.extracted_text


@dataclass
class SubmissionStatusView:
    submission_id: str
    status: SubmissionStatus
    result: dict | None = None
    error_message: str | None = None


@dataclass
class RecentSubmission:
    submission_id: str
    source_kind: SourceKind
    created_at: datetime
    classification: Classification | None
    file_name: str | None = None
    text_preview: str | None = None
