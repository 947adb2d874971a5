"""Cyberbullying score: signal fusion over toxicity sub-scores, lexical fallback."""

from __future__ import annotations

import re

from moderation_engine.exceptions import HarassmentUnavailable
from moderation_engine.models.domain import CyberbullyingResult, ToxicitySignals
from moderation_engine.observability.logger import get_logger
from moderation_engine.protocols.scoring import HarassmentStrategy

logger = get_logger("harassment")

# (sub-score field, weight, category flag)
FUSION_WEIGHTS: list[tuple[str, float, str]] = [
    ("insult", 0.25, "direct_insults"),
    ("threat", 0.30, "threats"),
    ("identity_attack", 0.30, "identity_attacks"),
    ("toxicity", 0.10, "toxicity"),
    ("profanity", 0.05, "profanity"),
]
FUSION_CATEGORY_THRESHOLD = 0.7

DIRECT_INSULTS = [
    "stupid", "idiot", "dumb", "loser", "ugly", "fat", "worthless", "pathetic",
    "freak", "retard", "moron", "failure",
]
THREATS = [
    "kill you", "hurt you", "beat you", "find you", "hunt you down", "coming for you",
    "watch out", "pay for this", "regret this", "make you suffer",
]
EXCLUSION = [
    "nobody likes you", "no one cares", "don't belong", "outcast", "go away",
    "not welcome", "leave the group", "not wanted",
]
HARASSMENT_PATTERNS = [
    "stalking", "spam", "keep bothering", "wont leave alone", "constantly",
    "over and over", "every day", "following you",
]
IDENTITY_ATTACKS = [
    "gay", "retard", "fag", "homo", "slut", "whore", "bitch", "cunt",
    "nigger", "chink", "spic", "kike", "paki", "tranny",
]

# category -> (terms, weight)
LEXICON: dict[str, tuple[list[str], float]] = {
    "direct_insults": (DIRECT_INSULTS, 1.0),
    "threats": (THREATS, 2.0),
    "exclusion": (EXCLUSION, 1.2),
    "harassment": (HARASSMENT_PATTERNS, 1.5),
    "identity_attacks": (IDENTITY_ATTACKS, 2.0),
}


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


class SignalFusionStrategy:
    name = "signal_fusion"

    def assess(self, text: str, signals: ToxicitySignals | None) -> CyberbullyingResult:
        if signals is None or signals.source == "unavailable":
            raise HarassmentUnavailable("No toxicity signals to fuse")

        score = sum(weight * getattr(signals, field) for field, weight, _ in FUSION_WEIGHTS)
        categories = {
            category: getattr(signals, field) > FUSION_CATEGORY_THRESHOLD
            for field, _, category in FUSION_WEIGHTS
        }
        return CyberbullyingResult(score=_clamp(score), categories=categories, strategy=self.name)


class LexicalStrategy:
    """Keyword/phrase counting over fixed term lists.

    Single words count every whole-word occurrence; multi-word phrases count
    once per phrase present. The weighted sum is normalized by half the number
    of distinct terms across all lists.
    """

    name = "lexical"

    def __init__(self, lexicon: dict[str, tuple[list[str], float]] | None = None) -> None:
        self._lexicon = lexicon or LEXICON
        self._patterns = {
            category: [(term, re.compile(rf"\b{re.escape(term)}\b")) for term in terms]
            for category, (terms, _) in self._lexicon.items()
        }
        distinct = {term for terms, _ in self._lexicon.values() for term in terms}
        self._normalizer = 0.5 * len(distinct)

    def count_matches(self, text: str) -> dict[str, int]:
        lowered = text.lower()
        counts: dict[str, int] = {}
        for category, patterns in self._patterns.items():
            total = 0
            for term, pattern in patterns:
                if " " in term:
                    total += 1 if pattern.search(lowered) else 0
                else:
                    total += len(pattern.findall(lowered))
            counts[category] = total
        return counts

    def assess(self, text: str, signals: ToxicitySignals | None = None) -> CyberbullyingResult:
        counts = self.count_matches(text)
        weighted = sum(counts[category] * weight for category, (_, weight) in self._lexicon.items())
        score = weighted / self._normalizer if self._normalizer else 0.0
        categories = {category: count > 0 for category, count in counts.items()}
        return CyberbullyingResult(score=_clamp(score), categories=categories, strategy=self.name)


class HarassmentDetector:
    """Fallback chain over harassment strategies; the first one that can run wins."""

    def __init__(self, strategies: list[HarassmentStrategy] | None = None) -> None:
        self._strategies: list[HarassmentStrategy] = strategies or [
            SignalFusionStrategy(),
            LexicalStrategy(),
        ]

    def assess(self, text: str, signals: ToxicitySignals | None) -> CyberbullyingResult:
        for strategy in self._strategies:
            try:
                result = strategy.assess(text, signals)
            except HarassmentUnavailable as e:
                logger.warning("harassment_fallback", strategy=strategy.name, reason=str(e))
                continue
            logger.info(
                "harassment_scored",
                strategy=result.strategy,
                score=round(result.score, 4),
            )
            return result
        raise HarassmentUnavailable("No harassment strategy could score the text")
