"""Integration tests for the submission lifecycle pipeline."""

from __future__ import annotations

import asyncio

import pytest

from moderation_engine.analysis.contextual import ContextualAnalyzer
from moderation_engine.analysis.prompt_templates import ANALYSIS_UNAVAILABLE, NOT_CONFIGURED
from moderation_engine.exceptions import GenerationError, SubmissionNotFound
from moderation_engine.extraction.extractor_registry import create_default_registry
from moderation_engine.models.domain import (
    Classification,
    SourceKind,
    SubmissionStatus,
    ToxicitySignals,
)
from moderation_engine.pipeline.analysis_stage import AnalysisStage
from moderation_engine.pipeline.dispatcher import BackgroundDispatcher
from moderation_engine.pipeline.lifecycle import SubmissionLifecycleManager
from moderation_engine.scoring.harassment import HarassmentDetector
from moderation_engine.scoring.toxicity import PerspectiveToxicityScorer


class FakeScorer:
    """Toxicity scorer returning fixed signals, or raising a fixed error."""

    def __init__(self, signals: ToxicitySignals | None = None, error: Exception | None = None) -> None:
        self._signals = signals or ToxicitySignals()
        self._error = error
        self.calls = 0

    async def score(self, text: str) -> ToxicitySignals:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._signals


class FakeLLM:
    def __init__(self, answer: str = "Assessment: mild insult.", error: Exception | None = None) -> None:
        self._answer = answer
        self._error = error
        self.calls = 0

    async def generate(self, prompt, system=None, temperature=0.2, max_tokens=1024) -> str:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._answer


async def _no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def build(store, blob_store):
    def _build(scorer=None, llm=None) -> tuple[SubmissionLifecycleManager, BackgroundDispatcher]:
        analysis = AnalysisStage(
            toxicity_scorer=scorer or FakeScorer(),
            harassment_detector=HarassmentDetector(),
            contextual_analyzer=ContextualAnalyzer(llm, backoff_seconds=0.0, sleep=_no_sleep),
        )
        dispatcher = BackgroundDispatcher()
        lifecycle = SubmissionLifecycleManager(
            store=store,
            blob_store=blob_store,
            extractors=create_default_registry(),
            analysis=analysis,
            dispatcher=dispatcher,
        )
        return lifecycle, dispatcher

    return _build


async def test_text_submission_completes(build, insulting_signals):
    scorer, llm = FakeScorer(insulting_signals), FakeLLM()
    lifecycle, dispatcher = build(scorer, llm)

    sid = await lifecycle.submit_text("you are a pathetic loser")
    await dispatcher.drain()

    view = await lifecycle.get_status(sid)
    assert view.status == SubmissionStatus.COMPLETED
    assert view.error_message is None
    result = view.result
    assert result["classification"] == Classification.HARMFUL.value
    assert result["cyberbullying_strategy"] == "signal_fusion"
    assert result["toxicity_analysis"]["insult"] == 0.9
    assert result["toxicity_analysis"]["degraded"] is False
    assert result["contextual_analysis"] == "Assessment: mild insult."
    assert result["original_text"] == "you are a pathetic loser"
    assert scorer.calls == 1
    assert llm.calls == 1


async def test_safe_text(build, low_signals):
    lifecycle, dispatcher = build(FakeScorer(low_signals), FakeLLM("Nothing harmful."))

    sid = await lifecycle.submit_text("see you at practice tomorrow")
    await dispatcher.drain()

    view = await lifecycle.get_status(sid)
    assert view.result["classification"] == "Safe"


async def test_text_file_is_extracted(build, store, low_signals):
    lifecycle, dispatcher = build(FakeScorer(low_signals), FakeLLM())

    sid = await lifecycle.submit_file(b"nobody likes you, go away", "note.txt", "text/plain")
    await dispatcher.drain()

    submission = await store.get(sid)
    assert submission.status == SubmissionStatus.COMPLETED
    assert submission.source_kind == SourceKind.FILE
    assert submission.extracted_text == "nobody likes you, go away"
    view = await lifecycle.get_status(sid)
    assert view.result["original_text"] == "nobody likes you, go away"


async def test_unsupported_file_errors_without_scoring(build):
    scorer, llm = FakeScorer(), FakeLLM()
    lifecycle, dispatcher = build(scorer, llm)

    sid = await lifecycle.submit_file(b"PK\x03\x04", "archive.zip", "application/zip")
    await dispatcher.drain()

    view = await lifecycle.get_status(sid)
    assert view.status == SubmissionStatus.ERROR
    assert "Unsupported file format" in view.error_message
    assert view.result is None
    assert scorer.calls == 0
    assert llm.calls == 0


async def test_invalid_utf8_file_errors(build):
    lifecycle, dispatcher = build()

    sid = await lifecycle.submit_file(b"\xff\xfe\xfa", "bad.txt", "text/plain")
    await dispatcher.drain()

    view = await lifecycle.get_status(sid)
    assert view.status == SubmissionStatus.ERROR
    assert "UTF-8" in view.error_message


async def test_empty_extracted_text_errors(build):
    scorer = FakeScorer()
    lifecycle, dispatcher = build(scorer, FakeLLM())

    sid = await lifecycle.submit_file(b"   \n", "blank.txt", "text/plain")
    await dispatcher.drain()

    view = await lifecycle.get_status(sid)
    assert view.status == SubmissionStatus.ERROR
    assert view.error_message == "No extracted text available"
    assert scorer.calls == 0


async def test_degraded_toxicity_still_completes(build):
    fallback = ToxicitySignals(toxicity=0.2, insult=0.3, degraded=True, source="fallback")
    lifecycle, dispatcher = build(FakeScorer(fallback), FakeLLM())

    sid = await lifecycle.submit_text("whatever")
    await dispatcher.drain()

    view = await lifecycle.get_status(sid)
    assert view.status == SubmissionStatus.COMPLETED
    assert view.result["toxicity_analysis"]["degraded"] is True
    assert view.result["toxicity_analysis"]["source"] == "fallback"
    assert view.result["cyberbullying_strategy"] == "signal_fusion"


async def test_unconfigured_services_use_lexical_path(build):
    lifecycle, dispatcher = build(PerspectiveToxicityScorer(api_key=""), None)

    sid = await lifecycle.submit_text("I will hunt you down, you stupid idiot")
    await dispatcher.drain()

    view = await lifecycle.get_status(sid)
    assert view.status == SubmissionStatus.COMPLETED
    result = view.result
    assert result["toxicity_analysis"]["source"] == "unavailable"
    assert result["toxicity_analysis"]["toxicity"] == 0.0
    assert result["cyberbullying_strategy"] == "lexical"
    assert result["cyberbullying_categories"]["threats"] is True
    assert result["cyberbullying_categories"]["direct_insults"] is True
    assert result["contextual_analysis"] == NOT_CONFIGURED


async def test_contextual_exhaustion_still_completes(build, low_signals):
    llm = FakeLLM(error=GenerationError("quota exceeded"))
    lifecycle, dispatcher = build(FakeScorer(low_signals), llm)

    sid = await lifecycle.submit_text("hello")
    await dispatcher.drain()

    view = await lifecycle.get_status(sid)
    assert view.status == SubmissionStatus.COMPLETED
    assert view.result["contextual_analysis"] == ANALYSIS_UNAVAILABLE
    assert llm.calls == 3


async def test_unexpected_scorer_failure_records_error(build):
    lifecycle, dispatcher = build(FakeScorer(error=RuntimeError("scorer exploded")), FakeLLM())

    sid = await lifecycle.submit_text("hello")
    await dispatcher.drain()

    view = await lifecycle.get_status(sid)
    assert view.status == SubmissionStatus.ERROR
    assert view.error_message == "scorer exploded"
    assert view.result is None


async def test_get_status_is_repeatable(build, low_signals):
    lifecycle, dispatcher = build(FakeScorer(low_signals), FakeLLM())
    sid = await lifecycle.submit_text("hello")
    await dispatcher.drain()

    first = await lifecycle.get_status(sid)
    second = await lifecycle.get_status(sid)

    assert first == second


async def test_get_status_unknown_id(build):
    lifecycle, _ = build()
    with pytest.raises(SubmissionNotFound):
        await lifecycle.get_status("no-such-id")


async def test_terminal_submission_is_not_rerun(build, low_signals):
    scorer = FakeScorer(low_signals)
    lifecycle, dispatcher = build(scorer, FakeLLM())
    sid = await lifecycle.submit_text("hello")
    await dispatcher.drain()
    before = await lifecycle.get_status(sid)

    await lifecycle.run_pipeline(sid)

    assert await lifecycle.get_status(sid) == before
    assert scorer.calls == 1


async def test_run_pipeline_unknown_id_is_noop(build):
    lifecycle, _ = build()
    await lifecycle.run_pipeline("no-such-id")


async def test_in_flight_submission_has_no_result(build, low_signals):
    release = asyncio.Event()

    class BlockedScorer(FakeScorer):
        async def score(self, text: str) -> ToxicitySignals:
            await release.wait()
            return await super().score(text)

    lifecycle, dispatcher = build(BlockedScorer(low_signals), FakeLLM())

    sid = await lifecycle.submit_text("hello")
    view = await lifecycle.get_status(sid)

    assert view.status in (SubmissionStatus.PENDING, SubmissionStatus.ANALYZING)
    assert view.result is None
    assert view.error_message is None

    release.set()
    await dispatcher.drain()
    assert (await lifecycle.get_status(sid)).status == SubmissionStatus.COMPLETED


async def test_list_recent_completed_only(build, low_signals):
    lifecycle, dispatcher = build(FakeScorer(low_signals), FakeLLM())

    long_text = "a" * 80
    text_id = await lifecycle.submit_text(long_text)
    short_id = await lifecycle.submit_text("short one")
    file_id = await lifecycle.submit_file(b"file text", "upload.txt", "text/plain")
    await lifecycle.submit_file(b"binary", "archive.zip", "application/zip")
    await dispatcher.drain()

    recent = await lifecycle.list_recent(limit=10)

    by_id = {r.submission_id: r for r in recent}
    assert set(by_id) == {text_id, short_id, file_id}
    assert by_id[text_id].text_preview == "a" * 50 + "..."
    assert by_id[short_id].text_preview == "short one"
    assert by_id[file_id].text_preview is None
    assert by_id[file_id].file_name == "upload.txt"
    assert all(r.classification == Classification.SAFE for r in recent)
    assert len(await lifecycle.list_recent(limit=2)) == 2


class SlowLLM:
    """LLM fake whose call takes a while; records calls still in flight."""

    def __init__(self, delay: float = 0.2) -> None:
        self._delay = delay
        self.started = 0
        self.finished = 0
        self.cancelled = 0

    @property
    def in_flight(self) -> int:
        return self.started - self.finished - self.cancelled

    async def generate(self, prompt, system=None, temperature=0.2, max_tokens=1024) -> str:
        self.started += 1
        try:
            await asyncio.sleep(self._delay)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        self.finished += 1
        return "Late assessment."


class FailingAfterYieldScorer(FakeScorer):
    async def score(self, text: str) -> ToxicitySignals:
        await asyncio.sleep(0.01)
        return await super().score(text)


async def test_failed_scoring_stops_contextual_call(build):
    llm = SlowLLM(delay=0.2)
    lifecycle, dispatcher = build(FailingAfterYieldScorer(error=RuntimeError("scorer exploded")), llm)

    sid = await lifecycle.submit_text("hello")
    await dispatcher.drain()

    view = await lifecycle.get_status(sid)
    assert view.status == SubmissionStatus.ERROR
    assert dispatcher.pending == 0
    assert llm.started == 1
    assert llm.in_flight == 0
    assert llm.cancelled == 1

    await asyncio.sleep(0.3)
    assert llm.finished == 0
