"""Protocols for the quantitative scoring signals."""

from __future__ import annotations

from typing import Protocol

from moderation_engine.models.domain import CyberbullyingResult, ToxicitySignals


class ToxicityScorer(Protocol):
    async def score(self, text: str) -> ToxicitySignals: ...


class HarassmentStrategy(Protocol):
    name: str

    def assess(self, text: str, signals: ToxicitySignals | None) -> CyberbullyingResult: ...
