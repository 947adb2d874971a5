"""Toxicity scoring via the Perspective API, with a flagged degraded fallback."""

from __future__ import annotations

import random

import httpx

from moderation_engine.exceptions import ToxicityScoringError
from moderation_engine.models.domain import ToxicitySignals
from moderation_engine.observability.logger import get_logger

logger = get_logger("toxicity")

DEFAULT_PERSPECTIVE_URL = "https://commentanalyzer.googleapis.com/v1alpha1/comments:analyze"

# Perspective attribute name -> ToxicitySignals field
PERSPECTIVE_ATTRIBUTES: dict[str, str] = {
    "TOXICITY": "toxicity",
    "SEVERE_TOXICITY": "severe_toxicity",
    "INSULT": "insult",
    "THREAT": "threat",
    "IDENTITY_ATTACK": "identity_attack",
    "PROFANITY": "profanity",
    "SEXUALLY_EXPLICIT": "sexually_explicit",
    "FLIRTATION": "flirtation",
}

# Upper bounds for the randomized placeholder record
FALLBACK_CEILINGS: dict[str, float] = {
    "toxicity": 0.8,
    "severe_toxicity": 0.5,
    "insult": 0.7,
    "threat": 0.4,
    "identity_attack": 0.6,
    "profanity": 0.5,
    "sexually_explicit": 0.3,
    "flirtation": 0.3,
}


def unavailable_signals() -> ToxicitySignals:
    """All-zero record used when the scorer could not run at all."""
    return ToxicitySignals(degraded=True, source="unavailable")


class PerspectiveToxicityScorer:
    def __init__(
        self,
        api_key: str,
        url: str = DEFAULT_PERSPECTIVE_URL,
        languages: list[str] | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._api_key = api_key
        self._url = url
        self._languages = languages or ["en"]
        self._timeout = timeout
        self._client = client
        self._rng = rng or random.Random()

    async def score(self, text: str) -> ToxicitySignals:
        if not self._api_key:
            raise ToxicityScoringError("Perspective API key is not configured")

        try:
            data = await self._analyze(text)
            signals = self._parse(data)
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            logger.warning("toxicity_degraded", error=str(e), error_type=type(e).__name__)
            return self.fallback_signals()

        logger.info("toxicity_scored", toxicity=round(signals.toxicity, 4))
        return signals

    def fallback_signals(self) -> ToxicitySignals:
        values = {name: self._rng.random() * ceiling for name, ceiling in FALLBACK_CEILINGS.items()}
        return ToxicitySignals(**values, degraded=True, source="fallback")

    async def _analyze(self, text: str) -> dict:
        payload = {
            "comment": {"text": text},
            "languages": self._languages,
            "requestedAttributes": {name: {} for name in PERSPECTIVE_ATTRIBUTES},
        }
        params = {"key": self._api_key}

        if self._client is not None:
            response = await self._client.post(self._url, params=params, json=payload)
            response.raise_for_status()
            return response.json()

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(self._url, params=params, json=payload)
            response.raise_for_status()
            return response.json()

    @staticmethod
    def _parse(data: dict) -> ToxicitySignals:
        scores = data["attributeScores"]
        values = {
            field_name: max(0.0, min(1.0, float(scores[attr]["summaryScore"]["value"])))
            for attr, field_name in PERSPECTIVE_ATTRIBUTES.items()
        }
        return ToxicitySignals(**values)
