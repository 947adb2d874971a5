"""Per-submission pipeline timing with spans."""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field

from moderation_engine.observability.metrics import log_latency


@dataclass
class Span:
    name: str
    start_ms: float
    end_ms: float = 0.0
    metadata: dict = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        return self.end_ms - self.start_ms


class PipelineTrace:
    def __init__(self, submission_id: str) -> None:
        self.submission_id = submission_id
        self.spans: list[Span] = []
        self.start_time = time.monotonic()

    @contextmanager
    def span(self, name: str, **metadata):
        s = Span(
            name=name,
            start_ms=(time.monotonic() - self.start_time) * 1000,
            metadata=metadata,
        )
        try:
            yield s
        finally:
            s.end_ms = (time.monotonic() - self.start_time) * 1000
            self.spans.append(s)
            log_latency(self.submission_id, name, s.duration_ms, **s.metadata)

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.start_time) * 1000

    def summary(self) -> dict:
        return {
            "submission_id": self.submission_id,
            "total_ms": round(self.elapsed_ms, 2),
            "stages": {s.name: round(s.duration_ms, 2) for s in self.spans},
        }
