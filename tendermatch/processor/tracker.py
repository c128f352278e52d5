from dataclasses import dataclass, replace
from pathlib import Path

from tendermatch.analysis.base import BaseKeywordGenerator, BaseProfileExtractor
from tendermatch.analysis.factory import AnalysisFactory
from tendermatch.config.settings import Settings
from tendermatch.database.models import DocumentRecord
from tendermatch.database.repositories.document_repository import DocumentRepository
from tendermatch.database.repositories.job_repository import JobRepository
from tendermatch.database.repositories.profile_repository import ProfileRepository
from tendermatch.logging.logger import Log
from tendermatch.ocr.base import BaseOcrAdapter, BasePageCounter
from tendermatch.ocr.exceptions import OcrError, PdfExtractionError
from tendermatch.ocr.factory import OcrAdapterFactory, PageCounterFactory
from tendermatch.processor.deadline import call_with_deadline
from tendermatch.processor.exceptions import (
    AdapterError,
    DocumentNotFoundError,
    EmptyFileError,
    FileTooLargeError,
    InvalidTransitionError,
    ProfileApplyError,
    StorageError,
    TooManyPagesError,
    UnreadableDocumentError,
    UnsupportedFileTypeError,
)
from tendermatch.processor.models import (
    ExtractedFields,
    JobState,
    JobStatus,
    ProcessingJob,
    SubmitResult,
    UploadCandidate,
)
from tendermatch.processor.state_machine import next_state
from tendermatch.storage.file_store import FileStore

INTERRUPTED_MESSAGE = "Processing was interrupted. Please upload the document again."
TIMED_OUT_MESSAGE = "Processing timed out. Please upload the document again."
MISSING_FILE_MESSAGE = "The uploaded file could not be found. Please upload it again."
APPLY_FAILED_MESSAGE = "The company profile could not be updated."


@dataclass(frozen=True)
class TrackerLimits:
    """Upload caps and deadlines the tracker enforces."""

    max_upload_bytes: int = 10 * 1024 * 1024
    max_page_count: int = 100
    accepted_mime_type: str = "application/pdf"
    job_timeout_seconds: int = 300
    ocr_timeout_seconds: float = 150
    analysis_timeout_seconds: float = 60
    profile_apply_attempts: int = 3

    @classmethod
    def from_settings(cls, settings: Settings) -> "TrackerLimits":
        return cls(
            max_upload_bytes=settings.max_upload_bytes,
            max_page_count=settings.max_page_count,
            accepted_mime_type=settings.accepted_mime_type,
            job_timeout_seconds=settings.job_timeout_seconds,
            ocr_timeout_seconds=settings.ocr_timeout_seconds,
            analysis_timeout_seconds=settings.analysis_timeout_seconds,
            profile_apply_attempts=settings.profile_apply_attempts,
        )


class ProcessingJobTracker:
    """Drives one document from upload to an enriched company profile.

    Pipeline: validate -> store -> trigger -> OCR -> extract + keywords -> apply.

    State lives in the job row, so any process may call advance() and any
    number of clients may poll the status. Each stage is claimed before it
    runs and writes a checkpoint on the document before the job moves on;
    a re-entered stage reuses its checkpoint instead of calling the adapter
    again.
    """

    def __init__(
        self,
        *,
        file_store: FileStore,
        doc_repo: DocumentRepository,
        job_repo: JobRepository,
        profile_repo: ProfileRepository,
        page_counter: BasePageCounter,
        ocr_adapter: BaseOcrAdapter,
        extractor: BaseProfileExtractor,
        keyword_generator: BaseKeywordGenerator,
        limits: TrackerLimits | None = None,
    ) -> None:
        self._file_store = file_store
        self._doc_repo = doc_repo
        self._job_repo = job_repo
        self._profile_repo = profile_repo
        self._page_counter = page_counter
        self._ocr_adapter = ocr_adapter
        self._extractor = extractor
        self._keyword_generator = keyword_generator
        self._limits = limits or TrackerLimits()

    def validate(self, content: bytes, mime_type: str) -> UploadCandidate:
        """Check an upload against the type, size and page caps. Writes nothing.

        Raises:
            UnsupportedFileTypeError: if the MIME type is not accepted.
            EmptyFileError: if there are no bytes.
            FileTooLargeError: if the size exceeds the cap.
            UnreadableDocumentError: if the pages cannot be counted.
            TooManyPagesError: if the page count exceeds the cap.
        """
        normalized_type = (mime_type or "").split(";")[0].strip().lower()
        if normalized_type != self._limits.accepted_mime_type:
            raise UnsupportedFileTypeError(
                f"Only PDF files are supported, got '{mime_type or 'unknown'}'"
            )

        size = len(content)
        if size == 0:
            raise EmptyFileError("The uploaded file is empty")
        if size > self._limits.max_upload_bytes:
            raise FileTooLargeError(
                f"File is {size} bytes, the limit is {self._limits.max_upload_bytes} bytes"
            )

        try:
            page_count = self._page_counter.count_pages(content)
        except PdfExtractionError as exc:
            raise UnreadableDocumentError(f"The PDF could not be read: {exc}") from exc
        if page_count > self._limits.max_page_count:
            raise TooManyPagesError(
                f"Document has {page_count} pages, the limit is {self._limits.max_page_count}"
            )

        return UploadCandidate(
            content=content,
            mime_type=normalized_type,
            size_bytes=size,
            page_count=page_count,
        )

    def submit(
        self,
        user_id: int,
        file_name: str,
        content: bytes,
        mime_type: str,
        company_name: str | None = None,
    ) -> SubmitResult:
        """Validate and store an upload, then record it with a job in 'uploading'.

        company_name is kept with the document and given to the extractor as
        context.
        """
        candidate = self.validate(content, mime_type)
        storage_ref = self._file_store.save(user_id, candidate.content)

        try:
            document, job = self._doc_repo.create_with_job(
                owner_id=user_id,
                storage_ref=storage_ref,
                file_name=file_name,
                mime_type=candidate.mime_type,
                size_bytes=candidate.size_bytes,
                page_count=candidate.page_count,
                company_name=(company_name or "").strip() or None,
            )
        except Exception:
            self._file_store.delete(storage_ref)
            raise

        Log.info(
            f"Stored document ({candidate.size_bytes} bytes, {candidate.page_count} pages)",
            job_id=job.id,
            document_id=document.id,
            user_id=user_id,
        )
        return SubmitResult(job_id=job.id, document_id=document.id, state=job.state)

    def trigger(self, document_id: int, user_id: int | None = None) -> JobStatus:
        """Start processing of an uploaded document. Safe to call repeatedly.

        Raises:
            DocumentNotFoundError: if the document does not exist or belongs
                to another user.
        """
        record = self._doc_repo.find_by_id(document_id)
        if user_id is not None and record.owner_id != user_id:
            raise DocumentNotFoundError(f"Document {document_id} not found")

        job = self._job_repo.find_by_document_id(document_id)
        if job.state == JobState.UPLOADING:
            if not self._file_store.exists(record.storage_ref):
                Log.error(
                    f"Blob {record.storage_ref} is missing",
                    job_id=job.id,
                    document_id=document_id,
                )
                self._job_repo.mark_error(job.id, MISSING_FILE_MESSAGE)
            elif self._job_repo.transition(job.id, job.state, next_state(job.state)):
                Log.info("Job triggered", job_id=job.id, document_id=document_id)

        return self.get_status(job.id)

    def advance(self, job_id: int, *, claimed: bool = False) -> JobStatus:
        """Run the job's current stage once.

        Returns the current status without doing anything when the job is
        not in a runnable state or another caller holds the stage. Pass
        claimed=True when the caller already owns the stage claim.
        """
        status, _ = self._advance(job_id, claimed=claimed)
        return status

    def run_to_completion(self, job_id: int, *, claimed: bool = False) -> JobStatus:
        """Advance the job until it is terminal or nothing more can be done now."""
        status, progressed = self._advance(job_id, claimed=claimed)
        while progressed and not status.state.is_terminal:
            status, progressed = self._advance(job_id, claimed=False)
        return status

    def get_status(self, job_id: int) -> JobStatus:
        return JobStatus.from_job(self._job_repo.find_by_id(job_id))

    def get_status_for_document(self, document_id: int) -> JobStatus:
        return JobStatus.from_job(self._job_repo.find_by_document_id(document_id))

    def expire_stale_jobs(self) -> list[int]:
        """Fail every non-terminal job that has not moved within the job timeout."""
        expired = self._job_repo.fail_stale_jobs(
            self._limits.job_timeout_seconds, TIMED_OUT_MESSAGE
        )
        for job_id in expired:
            Log.warning("Job timed out", job_id=job_id)
        return expired

    def _advance(self, job_id: int, *, claimed: bool) -> tuple[JobStatus, bool]:
        job = self._job_repo.find_by_id(job_id)
        if job.state not in (JobState.PROCESSING, JobState.ANALYZING):
            return JobStatus.from_job(job), False

        reclaimed = False
        if not claimed:
            claim = self._job_repo.claim_stage(
                job.id, job.state, self._limits.job_timeout_seconds
            )
            if not claim.acquired:
                Log.debug("Stage is held by another worker", job_id=job.id, stage=job.state.value)
                return JobStatus.from_job(job), False
            reclaimed = claim.reclaimed

        record = self._doc_repo.find_by_id(job.document_id)
        if reclaimed and not self._has_checkpoint(job, record):
            Log.warning("Job was interrupted", job_id=job.id, stage=job.state.value)
            self._job_repo.mark_error(job.id, INTERRUPTED_MESSAGE)
            return self.get_status(job.id), True

        try:
            if job.state == JobState.PROCESSING:
                self._run_ocr_stage(job, record)
            else:
                self._run_analysis_stage(job, record)
        except AdapterError as exc:
            Log.error(f"Stage failed: {exc}", job_id=job.id, stage=job.state.value)
            self._job_repo.mark_error(job.id, str(exc))
        except StorageError as exc:
            Log.error(f"Could not read document: {exc}", job_id=job.id, document_id=record.id)
            self._job_repo.mark_error(job.id, MISSING_FILE_MESSAGE)

        return self.get_status(job.id), True

    @staticmethod
    def _has_checkpoint(job: ProcessingJob, record: DocumentRecord) -> bool:
        if job.state == JobState.PROCESSING:
            return record.ocr_text is not None
        return record.extracted_fields is not None

    def _run_ocr_stage(self, job: ProcessingJob, record: DocumentRecord) -> None:
        if record.ocr_text is None:
            pdf_bytes = self._file_store.load(record.storage_ref)
            text = call_with_deadline(
                lambda: self._ocr_adapter.extract(pdf_bytes),
                self._limits.ocr_timeout_seconds,
                "OCR",
            )
            if not text.strip():
                raise OcrError("No text could be extracted from the document")
            self._doc_repo.save_ocr_text(record.id, text)
            Log.info(f"OCR produced {len(text)} chars", job_id=job.id, document_id=record.id)
        else:
            Log.info("Reusing OCR checkpoint", job_id=job.id, document_id=record.id)

        self._job_repo.transition(job.id, job.state, next_state(job.state))
        Log.info("processing -> analyzing", job_id=job.id)

    def _run_analysis_stage(self, job: ProcessingJob, record: DocumentRecord) -> None:
        fields = record.extracted()
        if fields is None:
            if record.ocr_text is None:
                raise InvalidTransitionError(f"Job {job.id} reached analysis without OCR text")
            fields = self._analyze(record.ocr_text, record.company_name)
            self._doc_repo.save_extracted_fields(record.id, fields.to_dict())
        else:
            Log.info("Reusing analysis checkpoint", job_id=job.id, document_id=record.id)

        try:
            profile = self._profile_repo.apply_extraction(record.owner_id, fields)
        except ProfileApplyError as exc:
            self._handle_apply_failure(job, exc)
            return

        self._job_repo.transition(job.id, job.state, next_state(job.state))
        Log.info(
            f"analyzing -> completed, completeness {profile.completeness_score}",
            job_id=job.id,
            user_id=profile.user_id,
        )

    def _analyze(self, text: str, company_name: str | None) -> ExtractedFields:
        extracted = call_with_deadline(
            lambda: self._extractor.extract(text, company_name=company_name),
            self._limits.analysis_timeout_seconds,
            "Profile extraction",
        )
        keywords = call_with_deadline(
            lambda: self._keyword_generator.generate(
                extracted.description or text,
                extracted.industries,
                extracted.specializations,
            ),
            self._limits.analysis_timeout_seconds,
            "Keyword generation",
        )
        return replace(extracted, keywords=keywords)

    def _handle_apply_failure(self, job: ProcessingJob, exc: ProfileApplyError) -> None:
        attempts = self._job_repo.increment_apply_attempts(job.id)
        if attempts >= self._limits.profile_apply_attempts:
            Log.error(f"Profile apply failed {attempts} times: {exc}", job_id=job.id)
            self._job_repo.mark_error(job.id, APPLY_FAILED_MESSAGE)
        else:
            Log.warning(f"Profile apply failed (attempt {attempts}): {exc}", job_id=job.id)
            self._job_repo.release_stage(job.id)


def build_tracker(settings: Settings, files_root: Path | None = None) -> ProcessingJobTracker:
    """Build a tracker with all required adapters."""
    job_repo = JobRepository()
    analysis_client = AnalysisFactory.create_client(settings)
    return ProcessingJobTracker(
        file_store=FileStore(files_root=files_root or Path(settings.files_root)),
        doc_repo=DocumentRepository(job_repo),
        job_repo=job_repo,
        profile_repo=ProfileRepository(),
        page_counter=PageCounterFactory.create(settings),
        ocr_adapter=OcrAdapterFactory.create(settings),
        extractor=AnalysisFactory.create_extractor(settings, analysis_client),
        keyword_generator=AnalysisFactory.create_keyword_generator(settings, analysis_client),
        limits=TrackerLimits.from_settings(settings),
    )
