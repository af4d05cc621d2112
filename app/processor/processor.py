from app.analysis.base import BaseAnalyzer
from app.analysis.exceptions import AnalysisError
from app.analysis.factory import AnalyzerFactory
from app.config.settings import Settings
from app.database.exceptions import DuplicateContentHashError, StorageError
from app.database.models import HistoryEntry, NewSubmission, SubmissionRecord, SubmissionStatus
from app.database.store import BaseRecordStore
from app.hashing.hasher import ContentHasher
from app.logging.logger import Log
from app.processor.exceptions import SubmissionNotFoundError
from app.processor.models import SubmissionDetail, SubmissionOutcome
from app.processor.upload_validator import UploadValidator
from app.redaction.base import BaseRedactor
from app.redaction.redactor import Redactor
from app.similarity.candidate_provider import BaseCandidateProvider, RecentSubmissionsProvider
from app.similarity.jaccard import find_best_match
from app.similarity.models import SimilarityMatch
from app.similarity.tokenizer import tokenize


class SubmissionProcessor:
    """Decides, per submission, between duplicate reuse, cache reuse, and analysis.

    Pipeline: validate -> hash -> exact-duplicate lookup -> redact ->
    tokenize -> recent-window scan -> reuse a verdict or analyze -> persist.

    Every submission that gets past validation ends in exactly one of
    duplicate, cached, processed, or failed. No lock is held across the
    analysis call: the unique content_hash constraint and the processing
    status guard concurrent submissions.
    """

    def __init__(
        self,
        *,
        store: BaseRecordStore,
        analyzer: BaseAnalyzer,
        candidate_provider: BaseCandidateProvider,
        validator: UploadValidator,
        hasher: ContentHasher | None = None,
        redactor: BaseRedactor | None = None,
        similarity_threshold: float = 0.8,
    ) -> None:
        if not 0.0 <= similarity_threshold <= 1.0:
            raise ValueError(
                f"similarity_threshold must be within [0, 1], got {similarity_threshold}"
            )
        self._store = store
        self._analyzer = analyzer
        self._candidate_provider = candidate_provider
        self._validator = validator
        self._hasher = hasher or ContentHasher()
        self._redactor = redactor or Redactor()
        self._similarity_threshold = similarity_threshold

    def submit(self, raw_bytes: bytes, original_name: str) -> SubmissionOutcome:
        """Run one upload through the dedup and analysis-caching pipeline.

        Raises:
            InvalidInputError: if the upload is rejected; nothing is persisted.
            StorageError: if the store fails; the submission is aborted.
        """
        text = self._validator.validate(raw_bytes, original_name)

        # Step 1: exact duplicate
        content_hash = self._hasher.hash(raw_bytes)
        existing = self._store.get_by_hash(content_hash)
        if existing is not None:
            return self._duplicate(existing)

        # Step 2: redact, tokenize, scan the recent window
        redaction = self._redactor.redact_with_stats(text)
        Log.info(
            f"Redacted '{original_name}'",
            content_hash=content_hash,
            redactions=redaction.total,
        )
        submission = NewSubmission(
            original_name=original_name,
            content_hash=content_hash,
            size_bytes=len(raw_bytes),
            sanitized_text=redaction.sanitized_text,
        )
        match = find_best_match(
            tokenize(redaction.sanitized_text),
            self._candidate_provider.candidates(),
            self._similarity_threshold,
        )

        verdict_id = match.candidate.verdict_id if match is not None else None
        if match is not None and verdict_id is not None:
            return self._reuse_cached(submission, match, verdict_id)
        if match is not None:
            Log.info(
                "Similar submission has no verdict yet, analyzing",
                matched_submission_id=match.candidate.submission_id,
                score=match.score,
            )

        # Step 3: fresh analysis
        return self._analyze(submission)

    def history(self, limit: int = 200) -> list[HistoryEntry]:
        """Recent submissions, newest first, with verdict summaries."""
        return self._store.list_history(limit)

    def get_submission(self, submission_id: int) -> SubmissionDetail:
        """Return a stored submission with its own or reused verdict.

        Raises:
            SubmissionNotFoundError: if no submission with this ID exists.
        """
        record = self._store.get_by_id(submission_id)
        if record is None:
            raise SubmissionNotFoundError(f"Submission {submission_id} not found")
        cache_link = None
        if record.status == SubmissionStatus.CACHED:
            cache_link = self._store.get_cache_link(record.content_hash)
        return SubmissionDetail(
            submission=record,
            verdict=self._store.get_verdict_for_submission(record.id),
            cache_link=cache_link,
        )

    # ------------------------------------------------------------------
    # Outcomes
    # ------------------------------------------------------------------

    def _duplicate(self, existing: SubmissionRecord) -> SubmissionOutcome:
        verdict = None
        if existing.status in SubmissionStatus.WITH_VERDICT:
            verdict = self._store.get_verdict_for_submission(existing.id)
        Log.info(
            "Exact duplicate",
            submission_id=existing.id,
            existing_status=existing.status,
        )
        return SubmissionOutcome(
            status=SubmissionStatus.DUPLICATE,
            submission_id=existing.id,
            verdict=verdict,
        )

    def _recover_duplicate(self, content_hash: str) -> SubmissionOutcome:
        """Lost an insert race on content_hash: the winner's row is the answer."""
        Log.warning("Concurrent insert of identical content", content_hash=content_hash)
        existing = self._store.get_by_hash(content_hash)
        if existing is None:
            raise DuplicateContentHashError(content_hash)
        return self._duplicate(existing)

    def _reuse_cached(
        self,
        submission: NewSubmission,
        match: SimilarityMatch,
        verdict_id: int,
    ) -> SubmissionOutcome:
        try:
            record, _ = self._store.record_cache_hit(
                submission,
                matched_submission_id=match.candidate.submission_id,
                similarity_score=match.score,
                reused_verdict_id=verdict_id,
            )
        except DuplicateContentHashError:
            return self._recover_duplicate(submission.content_hash)

        verdict = self._store.get_verdict_for_submission(record.id)
        Log.info(
            "Cache hit",
            submission_id=record.id,
            matched_submission_id=match.candidate.submission_id,
            score=match.score,
        )
        return SubmissionOutcome(
            status=SubmissionStatus.CACHED,
            submission_id=record.id,
            verdict=verdict,
            similarity_score=match.score,
            matched_submission_id=match.candidate.submission_id,
        )

    def _analyze(self, submission: NewSubmission) -> SubmissionOutcome:
        try:
            record = self._store.insert_submission(submission, SubmissionStatus.PROCESSING)
        except DuplicateContentHashError:
            return self._recover_duplicate(submission.content_hash)

        try:
            verdict = self._analyzer.analyze(submission.sanitized_text)
        except AnalysisError as exc:
            self._store.update_status(record.id, SubmissionStatus.FAILED)
            Log.error("Analysis failed", submission_id=record.id, error=exc)
            return SubmissionOutcome(
                status=SubmissionStatus.FAILED,
                submission_id=record.id,
                error_message=str(exc),
            )
        except BaseException:
            # Unexpected errors and interrupts still leave the row terminal.
            self._mark_failed(record.id)
            Log.error("Analysis aborted, submission marked failed", submission_id=record.id)
            raise

        try:
            verdict_record = self._store.complete_with_verdict(record.id, verdict)
        except StorageError:
            self._mark_failed(record.id)
            raise
        Log.info(
            "Processed",
            submission_id=record.id,
            verdict_id=verdict_record.id,
            severity=verdict_record.severity,
        )
        return SubmissionOutcome(
            status=SubmissionStatus.PROCESSED,
            submission_id=record.id,
            verdict=verdict_record,
        )

    def _mark_failed(self, submission_id: int) -> None:
        try:
            self._store.update_status(submission_id, SubmissionStatus.FAILED)
        except StorageError as exc:
            Log.error(
                "Could not mark submission failed",
                submission_id=submission_id,
                error=exc,
            )


def build_processor(settings: Settings, store: BaseRecordStore) -> SubmissionProcessor:
    """Build a SubmissionProcessor with all required adapters."""
    return SubmissionProcessor(
        store=store,
        analyzer=AnalyzerFactory.create(settings),
        candidate_provider=RecentSubmissionsProvider(store, settings.recent_window_size),
        validator=UploadValidator.from_settings(settings),
        similarity_threshold=settings.similarity_threshold,
    )
