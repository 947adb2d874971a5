"""Submission lifecycle: intake, background pipeline, status transitions, status reads."""

from __future__ import annotations

from uuid import uuid4

from moderation_engine.exceptions import (
    BlobNotFound,
    ExtractionError,
    InvalidTransition,
    ModerationEngineError,
    SubmissionNotFound,
)
from moderation_engine.extraction.extractor_registry import ExtractorRegistry
from moderation_engine.models.domain import (
    ALLOWED_TRANSITIONS,
    RecentSubmission,
    SourceKind,
    Submission,
    SubmissionStatus,
    SubmissionStatusView,
)
from moderation_engine.observability.logger import get_logger
from moderation_engine.observability.metrics import log_scoring_metrics, log_transition
from moderation_engine.observability.tracing import PipelineTrace
from moderation_engine.pipeline.analysis_stage import AnalysisStage
from moderation_engine.pipeline.dispatcher import BackgroundDispatcher
from moderation_engine.protocols.storage import BlobStore, SubmissionStore

logger = get_logger("lifecycle")


class SubmissionLifecycleManager:
    """Sole owner of submission status.

    ``Pending -> [Extracting ->] Analyzing -> Completed | Error``. Every
    transition is a single compare-and-set update of the record, so readers
    never see a half-written stage and nothing leaves a terminal status.
    """

    def __init__(
        self,
        store: SubmissionStore,
        blob_store: BlobStore,
        extractors: ExtractorRegistry,
        analysis: AnalysisStage,
        dispatcher: BackgroundDispatcher,
        text_preview_chars: int = 50,
    ) -> None:
        self._store = store
        self._blob_store = blob_store
        self._extractors = extractors
        self._analysis = analysis
        self._dispatcher = dispatcher
        self._text_preview_chars = text_preview_chars

    # ------------------------------------------------------------------
    # Intake
    # ------------------------------------------------------------------

    async def submit(
        self,
        source_kind: SourceKind,
        payload: str | bytes,
        file_name: str | None = None,
        content_type: str | None = None,
    ) -> str:
        """Create a pending record and schedule its pipeline. Returns immediately."""
        if source_kind is SourceKind.FILE:
            if not isinstance(payload, bytes):
                raise TypeError("File submissions take a bytes payload")
            file_name = file_name or "upload"
            content_type = content_type or "application/octet-stream"
            reference = await self._blob_store.save(payload, file_name, content_type)
        else:
            if not isinstance(payload, str):
                raise TypeError("Text submissions take a str payload")
            reference = payload

        submission = Submission(
            submission_id=str(uuid4()),
            source_kind=source_kind,
            raw_reference=reference,
            file_name=file_name,
            content_type=content_type,
        )
        await self._store.create(submission)
        logger.info(
            "submission_created",
            submission_id=submission.submission_id,
            source_kind=source_kind.value,
            file_name=file_name,
        )

        self._dispatcher.submit(submission.submission_id, self.run_pipeline(submission.submission_id))
        return submission.submission_id

    async def submit_text(self, text: str) -> str:
        return await self.submit(SourceKind.TEXT, text)

    async def submit_file(self, content: bytes, file_name: str, content_type: str | None) -> str:
        return await self.submit(SourceKind.FILE, content, file_name=file_name, content_type=content_type)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_status(self, submission_id: str) -> SubmissionStatusView:
        submission = await self._store.get(submission_id)
        if submission is None:
            raise SubmissionNotFound(f"Submission not found: {submission_id}")

        view = SubmissionStatusView(submission_id=submission_id, status=submission.status)
        if submission.status is SubmissionStatus.COMPLETED:
            view.result = self._build_result(submission)
        elif submission.status is SubmissionStatus.ERROR:
            view.error_message = submission.error_message
        return view

    async def list_recent(self, limit: int = 10) -> list[RecentSubmission]:
        """Most recent completed submissions, newest first."""
        submissions = await self._store.list_recent(limit, status=SubmissionStatus.COMPLETED)
        return [self._to_recent(s) for s in submissions]

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def run_pipeline(self, submission_id: str) -> None:
        """Drive one submission to a terminal status. Never raises."""
        submission = await self._store.get(submission_id)
        if submission is None:
            logger.error("pipeline_missing_submission", submission_id=submission_id)
            return
        if submission.status is not SubmissionStatus.PENDING:
            logger.warning(
                "pipeline_already_finished"
                if submission.status.is_terminal
                else "pipeline_already_started",
                submission_id=submission_id,
                status=submission.status.value,
            )
            return

        trace = PipelineTrace(submission_id)
        current = SubmissionStatus.PENDING

        try:
            if submission.source_kind is SourceKind.FILE:
                await self._transition(submission_id, current, SubmissionStatus.EXTRACTING)
                current = SubmissionStatus.EXTRACTING

                with trace.span("extraction", file_name=submission.file_name):
                    blob = await self._blob_store.fetch(submission.raw_reference)
                    text = await self._extractors.extract(blob)

                await self._transition(
                    submission_id, current, SubmissionStatus.ANALYZING, extracted_text=text
                )
            else:
                text = submission.raw_reference
                await self._transition(submission_id, current, SubmissionStatus.ANALYZING)
            current = SubmissionStatus.ANALYZING

            if not text.strip():
                raise ModerationEngineError("No extracted text available")

            with trace.span("analysis", chars=len(text)):
                outcome = await self._analysis.run(text)

            await self._transition(
                submission_id,
                current,
                SubmissionStatus.COMPLETED,
                toxicity_signals=outcome.toxicity_signals,
                cyberbullying=outcome.cyberbullying,
                contextual_assessment=outcome.contextual_assessment,
                classification=outcome.classification,
            )
            log_scoring_metrics(submission_id, outcome)
            logger.info("pipeline_completed", **trace.summary())
        except (ExtractionError, BlobNotFound) as e:
            logger.warning(
                "extraction_failed",
                submission_id=submission_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            await self._fail(submission_id, current, str(e) or type(e).__name__)
        except Exception as e:
            logger.exception("pipeline_failed", submission_id=submission_id, stage=current.value)
            await self._fail(submission_id, current, str(e) or type(e).__name__)

    async def _transition(
        self,
        submission_id: str,
        from_status: SubmissionStatus,
        to_status: SubmissionStatus,
        **fields,
    ) -> None:
        if to_status not in ALLOWED_TRANSITIONS[from_status]:
            raise InvalidTransition(
                f"Illegal transition {from_status.value} -> {to_status.value} for {submission_id}"
            )

        applied = await self._store.update(
            submission_id, {**fields, "status": to_status}, expected_status=from_status
        )
        if not applied:
            raise InvalidTransition(
                f"Submission {submission_id} is no longer {from_status.value}; "
                f"cannot move to {to_status.value}"
            )
        log_transition(submission_id, from_status.value, to_status.value)

    async def _fail(self, submission_id: str, current: SubmissionStatus, message: str) -> None:
        try:
            await self._transition(
                submission_id, current, SubmissionStatus.ERROR, error_message=message
            )
        except Exception:
            logger.exception("error_status_not_recorded", submission_id=submission_id)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @staticmethod
    def _build_result(submission: Submission) -> dict:
        signals = submission.toxicity_signals
        cyberbullying = submission.cyberbullying
        return {
            "toxicity_analysis": signals.to_dict() if signals else None,
            "cyberbullying_score": cyberbullying.score if cyberbullying else None,
            "cyberbullying_categories": dict(cyberbullying.categories) if cyberbullying else {},
            "cyberbullying_strategy": cyberbullying.strategy if cyberbullying else None,
            "contextual_analysis": submission.contextual_assessment,
            "classification": submission.classification.value if submission.classification else None,
            "original_text": submission.analysis_text,
        }

    def _to_recent(self, submission: Submission) -> RecentSubmission:
        preview = None
        if submission.source_kind is SourceKind.TEXT:
            text = submission.raw_reference
            preview = (
                text[: self._text_preview_chars] + "..."
                if len(text) > self._text_preview_chars
                else text
            )
        return RecentSubmission(
            submission_id=submission.submission_id,
            source_kind=submission.source_kind,
            created_at=submission.created_at,
            classification=submission.classification,
            file_name=submission.file_name,
            text_preview=preview,
        )
