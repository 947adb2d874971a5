"""Final safety classification: first matching rule wins, most severe first."""

from __future__ import annotations

from moderation_engine.models.domain import Classification, ToxicitySignals


def classify_content(signals: ToxicitySignals, cyberbullying_score: float) -> Classification:
    if (
        signals.severe_toxicity > 0.7
        or signals.threat > 0.8
        or signals.identity_attack > 0.8
        or cyberbullying_score > 0.8
        or (signals.toxicity > 0.8 and signals.insult > 0.8)
    ):
        return Classification.HARMFUL

    if (
        signals.toxicity > 0.5
        or signals.insult > 0.6
        or signals.threat > 0.4
        or signals.identity_attack > 0.4
        or cyberbullying_score > 0.5
    ):
        return Classification.POTENTIALLY_HARMFUL

    return Classification.SAFE
