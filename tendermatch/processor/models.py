from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class JobState(str, Enum):
    """States of one document's journey from upload to enriched profile."""

    IDLE = "idle"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.ERROR)


STAGE_LABELS: dict[JobState, str] = {
    JobState.IDLE: "Ready to upload",
    JobState.UPLOADING: "Uploading document",
    JobState.PROCESSING: "Processing document with OCR",
    JobState.ANALYZING: "Analyzing document with AI",
    JobState.COMPLETED: "Document processed successfully",
    JobState.ERROR: "Error processing document",
}


@dataclass(frozen=True)
class UploadCandidate:
    """A validated file that has not been stored yet (the idle state)."""

    content: bytes
    mime_type: str
    size_bytes: int
    page_count: int


@dataclass(frozen=True)
class Document:
    """Domain model for an uploaded document."""

    id: int
    owner_id: int
    storage_ref: str
    file_name: str
    mime_type: str
    size_bytes: int
    page_count: int
    uploaded_at: datetime | None = None


@dataclass(frozen=True)
class ProcessingJob:
    """Domain model for one tracked pipeline run."""

    id: int
    document_id: int
    state: JobState
    apply_attempts: int = 0
    error_message: str | None = None
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class KeywordPair:
    """A bilingual keyword: source-locale term and its target-locale equivalent."""

    source: str
    target: str = ""

    def terms(self) -> list[str]:
        """Non-empty terms of the pair, source first, without duplicates."""
        result: list[str] = []
        for term in (self.source, self.target):
            cleaned = " ".join(term.split())
            if cleaned and cleaned.lower() not in (t.lower() for t in result):
                result.append(cleaned)
        return result

    def to_dict(self) -> dict[str, str]:
        return {"source": self.source, "target": self.target}


@dataclass(frozen=True)
class ExtractedFields:
    """Structured profile fields produced by the analysis stage."""

    description: str = ""
    business_type: str = ""
    activities: list[str] = field(default_factory=list)
    industries: list[str] = field(default_factory=list)
    specializations: list[str] = field(default_factory=list)
    keywords: list[KeywordPair] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "description": self.description,
            "business_type": self.business_type,
            "activities": list(self.activities),
            "industries": list(self.industries),
            "specializations": list(self.specializations),
            "keywords": [k.to_dict() for k in self.keywords],
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ExtractedFields":
        raw_keywords = data.get("keywords") or []
        keywords = [
            KeywordPair(source=str(k.get("source", "")), target=str(k.get("target", "")))
            for k in raw_keywords  # type: ignore[union-attr]
            if isinstance(k, dict)
        ]
        return cls(
            description=str(data.get("description") or ""),
            business_type=str(data.get("business_type") or ""),
            activities=[str(v) for v in data.get("activities") or []],  # type: ignore[union-attr]
            industries=[str(v) for v in data.get("industries") or []],  # type: ignore[union-attr]
            specializations=[
                str(v) for v in data.get("specializations") or []  # type: ignore[union-attr]
            ],
            keywords=keywords,
        )


@dataclass(frozen=True)
class CompanyProfile:
    """A company's matching profile.

    Set-valued fields are kept as de-duplicated lists in first-seen order
    so that query construction stays deterministic.
    """

    user_id: int
    company_description: str = ""
    business_type: str = ""
    company_activities: list[str] = field(default_factory=list)
    main_industries: list[str] = field(default_factory=list)
    specializations: list[str] = field(default_factory=list)
    keywords: list[KeywordPair] = field(default_factory=list)
    document_processed: bool = False
    completeness_score: int = 0
    updated_at: datetime | None = None


@dataclass(frozen=True)
class JobStatus:
    """Read-only view of a job for status polling."""

    job_id: int
    document_id: int
    state: JobState
    label: str
    error_message: str | None = None

    @classmethod
    def from_job(cls, job: ProcessingJob) -> "JobStatus":
        return cls(
            job_id=job.id,
            document_id=job.document_id,
            state=job.state,
            label=STAGE_LABELS[job.state],
            error_message=job.error_message if job.state == JobState.ERROR else None,
        )


@dataclass(frozen=True)
class SubmitResult:
    """Identifiers returned by a successful upload."""

    job_id: int
    document_id: int
    state: JobState = JobState.UPLOADING
