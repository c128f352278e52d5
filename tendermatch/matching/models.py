from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class Tender:
    """A government tender as stored by the scraper. Read-only here."""

    id: int
    title: str
    bid_number: str
    source: str
    agency: str = ""
    description: str = ""
    category: str = ""
    location: str = ""
    value_min: Decimal | None = None
    value_max: Decimal | None = None
    deadline: datetime | None = None
    status: str = "open"
    external_id: str | None = None

    def searchable_text(self) -> str:
        return " ".join(
            part
            for part in (
                self.title,
                self.description,
                self.category,
                self.agency,
                self.location,
            )
            if part
        )


@dataclass(frozen=True)
class WeightedTerm:
    """One query term. source names the profile field it came from."""

    term: str
    weight: int
    source: str


@dataclass(frozen=True)
class SearchQuery:
    raw_text: str = ""
    weighted_terms: tuple[WeightedTerm, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.weighted_terms


@dataclass(frozen=True)
class MatchResult:
    tender_id: int
    score: float
    rank: int


@dataclass(frozen=True)
class RankedTender:
    """A match result together with the tender it refers to."""

    result: MatchResult
    tender: Tender
