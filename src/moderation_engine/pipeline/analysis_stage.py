"""Scoring stage: toxicity, harassment and contextual signals fused into a classification."""

from __future__ import annotations

import asyncio

from moderation_engine.analysis.contextual import ContextualAnalyzer
from moderation_engine.exceptions import ToxicityScoringError
from moderation_engine.models.domain import AnalysisOutcome, CyberbullyingResult, ToxicitySignals
from moderation_engine.observability.logger import get_logger
from moderation_engine.protocols.scoring import ToxicityScorer
from moderation_engine.scoring.classification import classify_content
from moderation_engine.scoring.harassment import HarassmentDetector
from moderation_engine.scoring.toxicity import unavailable_signals

logger = get_logger("analysis_stage")


class AnalysisStage:
    def __init__(
        self,
        toxicity_scorer: ToxicityScorer,
        harassment_detector: HarassmentDetector,
        contextual_analyzer: ContextualAnalyzer,
    ) -> None:
        self._toxicity = toxicity_scorer
        self._harassment = harassment_detector
        self._contextual = contextual_analyzer

    async def run(self, text: str) -> AnalysisOutcome:
        # Contextual analysis is independent; harassment waits only on toxicity.
        contextual = asyncio.create_task(self._contextual.analyze(text))
        try:
            signals, cyberbullying = await self._score_quantitative(text)
        except BaseException:
            # Nothing may outlive the stage once the submission is failing.
            contextual.cancel()
            await asyncio.wait({contextual})
            raise
        assessment = await contextual

        classification = classify_content(signals, cyberbullying.score)
        return AnalysisOutcome(
            toxicity_signals=signals,
            cyberbullying=cyberbullying,
            contextual_assessment=assessment,
            classification=classification,
        )

    async def _score_quantitative(self, text: str) -> tuple[ToxicitySignals, CyberbullyingResult]:
        try:
            signals = await self._toxicity.score(text)
        except ToxicityScoringError as e:
            logger.warning("toxicity_unavailable", error=str(e))
            signals = unavailable_signals()

        return signals, self._harassment.assess(text, signals)
