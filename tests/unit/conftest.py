"""In-memory stand-ins for the PostgreSQL repositories.

They follow the conditional-update semantics of the real repositories so the
tracker can be exercised end to end without a database.
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from tendermatch.analysis.example_client_adapter import ExampleClientAdapter
from tendermatch.analysis.keyword_generator import KeywordGenerator
from tendermatch.analysis.profile_extractor import ProfileExtractor
from tendermatch.database.models import DocumentRecord, StageClaim
from tendermatch.matching.base import BaseTenderSource
from tendermatch.matching.models import Tender
from tendermatch.ocr.pdfplumber_adapter import PdfPlumberAdapter
from tendermatch.processor.exceptions import (
    DocumentNotFoundError,
    JobNotFoundError,
    ProfileApplyError,
    ProfileNotFoundError,
)
from tendermatch.processor.models import (
    CompanyProfile,
    Document,
    ExtractedFields,
    JobState,
    ProcessingJob,
)
from tendermatch.processor.state_machine import ensure_transition
from tendermatch.processor.tracker import ProcessingJobTracker, TrackerLimits
from tendermatch.profile.completeness import apply_extracted_fields, rescore
from tendermatch.storage.file_store import FileStore

_ACTIVE = (JobState.UPLOADING, JobState.PROCESSING, JobState.ANALYZING)


class Clock:
    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class InMemoryJobRepository:
    def __init__(self, clock: Clock) -> None:
        self.clock = clock
        self.jobs: dict[int, ProcessingJob] = {}
        self._next_id = 1

    def create(self, conn: Any, document_id: int) -> ProcessingJob:
        job = ProcessingJob(
            id=self._next_id,
            document_id=document_id,
            state=JobState.UPLOADING,
            created_at=self.clock.now,
            updated_at=self.clock.now,
        )
        self.jobs[job.id] = job
        self._next_id += 1
        return job

    def find_by_id(self, job_id: int) -> ProcessingJob:
        if job_id not in self.jobs:
            raise JobNotFoundError(f"Job {job_id} not found")
        return self.jobs[job_id]

    def find_by_document_id(self, document_id: int) -> ProcessingJob:
        for job in self.jobs.values():
            if job.document_id == document_id:
                return job
        raise JobNotFoundError(f"No job found for document {document_id}")

    def claim_next_job(self, conn: Any) -> ProcessingJob | None:
        for job in sorted(self.jobs.values(), key=lambda j: j.id):
            if job.state in (JobState.PROCESSING, JobState.ANALYZING) and job.locked_at is None:
                return self._update(job.id, locked_at=self.clock.now)
        return None

    def transition(self, job_id: int, from_state: JobState, to_state: JobState) -> bool:
        ensure_transition(from_state, to_state)
        if self.jobs[job_id].state != from_state:
            return False
        self._update(job_id, state=to_state, locked_at=None)
        return True

    def claim_stage(self, job_id: int, state: JobState, stale_after_seconds: int) -> StageClaim:
        job = self.jobs[job_id]
        if job.state != state:
            return StageClaim(acquired=False)
        stale_before = self.clock.now - timedelta(seconds=stale_after_seconds)
        if job.locked_at is not None and job.locked_at >= stale_before:
            return StageClaim(acquired=False)
        self._update(job_id, locked_at=self.clock.now)
        return StageClaim(acquired=True, reclaimed=job.locked_at is not None)

    def release_stage(self, job_id: int) -> None:
        self.jobs[job_id] = replace(self.jobs[job_id], locked_at=None)

    def increment_apply_attempts(self, job_id: int) -> int:
        job = self._update(job_id, apply_attempts=self.jobs[job_id].apply_attempts + 1)
        return job.apply_attempts

    def mark_error(self, job_id: int, error: str) -> bool:
        if self.jobs[job_id].state not in _ACTIVE:
            return False
        self._update(job_id, state=JobState.ERROR, error_message=error, locked_at=None)
        return True

    def fail_stale_jobs(self, max_age_seconds: int, error: str) -> list[int]:
        stale_before = self.clock.now - timedelta(seconds=max_age_seconds)
        expired = [
            job.id
            for job in self.jobs.values()
            if job.state in _ACTIVE and job.updated_at is not None and job.updated_at < stale_before
        ]
        for job_id in expired:
            self.mark_error(job_id, error)
        return expired

    def _update(self, job_id: int, **changes: Any) -> ProcessingJob:
        job = replace(self.jobs[job_id], updated_at=self.clock.now, **changes)
        self.jobs[job_id] = job
        return job


class InMemoryDocumentRepository:
    def __init__(self, job_repo: InMemoryJobRepository) -> None:
        self.job_repo = job_repo
        self.records: dict[int, DocumentRecord] = {}
        self.fail_inserts = False
        self._next_id = 100

    def create_with_job(self, **kwargs: Any) -> tuple[Document, ProcessingJob]:
        if self.fail_inserts:
            raise RuntimeError("insert failed")
        record = DocumentRecord(id=self._next_id, uploaded_at=self.job_repo.clock.now, **kwargs)
        self._next_id += 1
        self.records[record.id] = record
        job = self.job_repo.create(None, record.id)
        return record.to_document(), job

    def find_by_id(self, document_id: int) -> DocumentRecord:
        if document_id not in self.records:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return replace(self.records[document_id])

    def save_ocr_text(self, document_id: int, ocr_text: str) -> None:
        record = self.records[document_id]
        if record.ocr_text is None:
            record.ocr_text = ocr_text

    def save_extracted_fields(self, document_id: int, extracted_fields: dict[str, Any]) -> None:
        record = self.records[document_id]
        if record.extracted_fields is None:
            record.extracted_fields = extracted_fields


class InMemoryProfileRepository:
    def __init__(self) -> None:
        self.profiles: dict[int, CompanyProfile] = {}
        self.failures_remaining = 0
        self.apply_calls = 0

    def find_by_user_id(self, user_id: int) -> CompanyProfile:
        if user_id not in self.profiles:
            raise ProfileNotFoundError(f"Profile for user {user_id} not found")
        return self.profiles[user_id]

    def apply_extraction(self, user_id: int, fields: ExtractedFields) -> CompanyProfile:
        self.apply_calls += 1
        if self.failures_remaining > 0:
            self.failures_remaining -= 1
            raise ProfileApplyError("database unavailable")
        current = self.profiles.get(user_id, CompanyProfile(user_id=user_id))
        merged = apply_extracted_fields(current, fields)
        self.profiles[user_id] = merged
        return merged

    def save(self, profile: CompanyProfile) -> CompanyProfile:
        stored = rescore(profile)
        self.profiles[profile.user_id] = stored
        return stored


class InMemoryTenderSource(BaseTenderSource):
    def __init__(self, tenders: list[Tender] | None = None) -> None:
        self.tenders = list(tenders or [])
        self.category_calls: list[str] = []

    def find_all(self) -> list[Tender]:
        return list(self.tenders)

    def find_by_category(self, category: str) -> list[Tender]:
        self.category_calls.append(category)
        return [t for t in self.tenders if t.category.lower() == category.strip().lower()]


class TrackerEnv:
    """A tracker wired to in-memory repositories and spy-able adapters."""

    def __init__(self, files_root: Path, limits: TrackerLimits | None = None) -> None:
        self.clock = Clock()
        self.job_repo = InMemoryJobRepository(self.clock)
        self.doc_repo = InMemoryDocumentRepository(self.job_repo)
        self.profile_repo = InMemoryProfileRepository()
        self.file_store = FileStore(files_root=files_root)
        pdf_engine = PdfPlumberAdapter()
        client = ExampleClientAdapter()
        self.page_counter = MagicMock(wraps=pdf_engine)
        self.ocr_adapter = MagicMock(wraps=pdf_engine)
        self.extractor = MagicMock(wraps=ProfileExtractor(client=client, model="example"))
        self.keyword_generator = MagicMock(wraps=KeywordGenerator(client=client, model="example"))
        self.tracker = ProcessingJobTracker(
            file_store=self.file_store,
            doc_repo=self.doc_repo,  # type: ignore[arg-type]
            job_repo=self.job_repo,  # type: ignore[arg-type]
            profile_repo=self.profile_repo,  # type: ignore[arg-type]
            page_counter=self.page_counter,
            ocr_adapter=self.ocr_adapter,
            extractor=self.extractor,
            keyword_generator=self.keyword_generator,
            limits=limits or TrackerLimits(),
        )


@pytest.fixture()
def tracker_env(tmp_path: Path) -> TrackerEnv:
    return TrackerEnv(tmp_path)


@pytest.fixture()
def tender_source() -> InMemoryTenderSource:
    return InMemoryTenderSource()


@pytest.fixture()
def make_tracker_env(tmp_path: Path) -> Callable[..., TrackerEnv]:
    def _make(limits: TrackerLimits | None = None) -> TrackerEnv:
        return TrackerEnv(tmp_path, limits)

    return _make
