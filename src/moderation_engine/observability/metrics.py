"""Metric recording helpers for the analysis pipeline."""

from __future__ import annotations

from moderation_engine.models.domain import AnalysisOutcome
from moderation_engine.observability.logger import get_logger

logger = get_logger("metrics")


def log_scoring_metrics(submission_id: str, outcome: AnalysisOutcome) -> None:
    signals = outcome.toxicity_signals
    logger.info(
        "scoring_metrics",
        submission_id=submission_id,
        toxicity=round(signals.toxicity, 4),
        severe_toxicity=round(signals.severe_toxicity, 4),
        threat=round(signals.threat, 4),
        identity_attack=round(signals.identity_attack, 4),
        toxicity_source=signals.source,
        degraded=signals.degraded,
        cyberbullying=round(outcome.cyberbullying.score, 4),
        cyberbullying_strategy=outcome.cyberbullying.strategy,
        classification=outcome.classification.value,
    )


def log_transition(submission_id: str, from_status: str, to_status: str) -> None:
    logger.info(
        "status_transition",
        submission_id=submission_id,
        from_status=from_status,
        to_status=to_status,
    )


def log_latency(submission_id: str, stage: str, duration_ms: float, **fields) -> None:
    logger.info(
        "latency",
        submission_id=submission_id,
        stage=stage,
        duration_ms=round(duration_ms, 2),
        **fields,
    )
