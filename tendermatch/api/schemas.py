"""Request and response bodies of the HTTP API."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from tendermatch.matching.models import RankedTender, Tender
from tendermatch.processor.models import (
    STAGE_LABELS,
    CompanyProfile,
    JobState,
    JobStatus,
    KeywordPair,
    SubmitResult,
)


class KeywordPairModel(BaseModel):
    source: str = ""
    target: str = ""


class JobStatusResponse(BaseModel):
    job_id: int
    document_id: int
    state: JobState
    label: str
    error_message: str | None = None

    @classmethod
    def from_status(cls, status: JobStatus) -> "JobStatusResponse":
        return cls(
            job_id=status.job_id,
            document_id=status.document_id,
            state=status.state,
            label=status.label,
            error_message=status.error_message,
        )

    @classmethod
    def from_submit(cls, result: SubmitResult) -> "JobStatusResponse":
        return cls(
            job_id=result.job_id,
            document_id=result.document_id,
            state=result.state,
            label=STAGE_LABELS[result.state],
        )


class ProfilePayload(BaseModel):
    """A profile supplied inline to /match instead of a stored one."""

    company_description: str = ""
    business_type: str = ""
    company_activities: list[str] = Field(default_factory=list)
    main_industries: list[str] = Field(default_factory=list)
    specializations: list[str] = Field(default_factory=list)
    keywords: list[KeywordPairModel] = Field(default_factory=list)

    def to_profile(self, user_id: int = 0) -> CompanyProfile:
        return CompanyProfile(
            user_id=user_id,
            company_description=self.company_description,
            business_type=self.business_type,
            company_activities=list(self.company_activities),
            main_industries=list(self.main_industries),
            specializations=list(self.specializations),
            keywords=[KeywordPair(source=k.source, target=k.target) for k in self.keywords],
        )


class ProfileResponse(ProfilePayload):
    user_id: int
    document_processed: bool
    completeness_score: int
    updated_at: datetime | None = None

    @classmethod
    def from_profile(cls, profile: CompanyProfile) -> "ProfileResponse":
        return cls(
            user_id=profile.user_id,
            company_description=profile.company_description,
            business_type=profile.business_type,
            company_activities=profile.company_activities,
            main_industries=profile.main_industries,
            specializations=profile.specializations,
            keywords=[KeywordPairModel(source=k.source, target=k.target) for k in profile.keywords],
            document_processed=profile.document_processed,
            completeness_score=profile.completeness_score,
            updated_at=profile.updated_at,
        )


class MatchRequest(BaseModel):
    user_id: int | None = None
    profile: ProfilePayload | None = None
    limit: int | None = None


class TenderModel(BaseModel):
    id: int
    title: str
    agency: str
    description: str
    category: str
    location: str
    value_min: Decimal | None = None
    value_max: Decimal | None = None
    deadline: datetime | None = None
    status: str
    source: str
    external_id: str | None = None
    bid_number: str

    @classmethod
    def from_tender(cls, tender: Tender) -> "TenderModel":
        return cls(
            id=tender.id,
            title=tender.title,
            agency=tender.agency,
            description=tender.description,
            category=tender.category,
            location=tender.location,
            value_min=tender.value_min,
            value_max=tender.value_max,
            deadline=tender.deadline,
            status=tender.status,
            source=tender.source,
            external_id=tender.external_id,
            bid_number=tender.bid_number,
        )


class MatchItem(BaseModel):
    rank: int
    score: float
    tender: TenderModel


class MatchResponse(BaseModel):
    results: list[MatchItem]

    @classmethod
    def from_ranked(cls, ranked: list[RankedTender]) -> "MatchResponse":
        return cls(
            results=[
                MatchItem(
                    rank=item.result.rank,
                    score=item.result.score,
                    tender=TenderModel.from_tender(item.tender),
                )
                for item in ranked
            ]
        )


class ErrorResponse(BaseModel):
    detail: str
