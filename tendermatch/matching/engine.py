from collections.abc import Iterable
from datetime import datetime, timezone

from tendermatch.logging.logger import Log
from tendermatch.matching.base import BaseTenderSource
from tendermatch.matching.models import MatchResult, RankedTender, SearchQuery, Tender
from tendermatch.matching.query_builder import QueryBuilder
from tendermatch.matching.tokenizer import token_set
from tendermatch.processor.exceptions import InvalidArgumentError
from tendermatch.processor.models import CompanyProfile

MAX_SCORE = 100.0

# Missing deadlines sort after every real one.
_NO_DEADLINE = datetime.max.replace(tzinfo=timezone.utc)


class MatchingEngine:
    """Scores the tender corpus against a company profile and ranks it.

    A tender's score is the weighted share of query terms it matches,
    scaled to [0, 100]. A term matches when any of its tokens appears in
    the tender text. Results are ordered by score, then earliest
    deadline, then tender id, so equal inputs always rank identically.
    """

    def __init__(
        self,
        tender_source: BaseTenderSource,
        query_builder: QueryBuilder | None = None,
        default_limit: int = 20,
        max_limit: int = 100,
        fallback_score_ceiling: float = 25.0,
    ) -> None:
        self._tender_source = tender_source
        self._query_builder = query_builder or QueryBuilder()
        self._default_limit = default_limit
        self._max_limit = max_limit
        self._fallback_score_ceiling = fallback_score_ceiling

    def match(self, profile: CompanyProfile, limit: int | None = None) -> list[RankedTender]:
        """Rank tenders for a profile.

        Profiles with neither keywords nor a description are matched only
        against the categories named by their industries and specializations,
        with scores capped at the fallback ceiling.

        Raises:
            InvalidArgumentError: if limit is not in 1..max_limit.
        """
        resolved_limit = self._resolve_limit(limit)
        query = self._query_builder.build(profile)

        if profile.keywords or profile.company_description.strip():
            return self._rank(query, self._tender_source.find_all(), resolved_limit)

        categories = [*profile.main_industries, *profile.specializations]
        if not any(c.strip() for c in categories):
            Log.info(f"Profile {profile.user_id} has no matchable fields, returning unscored corpus")
            return self._rank(SearchQuery(), self._tender_source.find_all(), resolved_limit)

        Log.info(f"Profile {profile.user_id} has no keywords, matching by category")
        return self._rank(
            query,
            self._tenders_in_categories(categories),
            resolved_limit,
            ceiling=self._fallback_score_ceiling,
        )

    def match_query(
        self,
        query: SearchQuery,
        limit: int | None = None,
        categories: Iterable[str] = (),
    ) -> list[RankedTender]:
        """Rank tenders for an explicit query, optionally within categories.

        Raises:
            InvalidArgumentError: if limit is not in 1..max_limit.
        """
        resolved_limit = self._resolve_limit(limit)
        category_list = [c for c in categories if c.strip()]
        if category_list:
            tenders = self._tenders_in_categories(category_list)
        else:
            tenders = self._tender_source.find_all()
        return self._rank(query, tenders, resolved_limit)

    def _resolve_limit(self, limit: int | None) -> int:
        if limit is None:
            return self._default_limit
        if limit <= 0 or limit > self._max_limit:
            raise InvalidArgumentError(
                f"limit must be between 1 and {self._max_limit}, got {limit}"
            )
        return limit

    def _tenders_in_categories(self, categories: list[str]) -> list[Tender]:
        seen: set[int] = set()
        tenders: list[Tender] = []
        for category in categories:
            for tender in self._tender_source.find_by_category(category):
                if tender.id not in seen:
                    seen.add(tender.id)
                    tenders.append(tender)
        return tenders

    def _rank(
        self,
        query: SearchQuery,
        tenders: list[Tender],
        limit: int,
        ceiling: float = MAX_SCORE,
    ) -> list[RankedTender]:
        terms = query_term_tokens(query)
        scale = ceiling / MAX_SCORE
        scored: list[tuple[float, Tender]] = []
        for tender in tenders:
            raw = score_terms(terms, token_set(tender.searchable_text()))
            scored.append((round(raw * scale, 2), tender))
        scored.sort(key=lambda item: (-item[0], _deadline_key(item[1]), item[1].id))

        return [
            RankedTender(
                result=MatchResult(tender_id=tender.id, score=score, rank=position),
                tender=tender,
            )
            for position, (score, tender) in enumerate(scored[:limit], start=1)
        ]


def query_term_tokens(query: SearchQuery) -> list[tuple[frozenset[str], int]]:
    """Token set and weight of each query term. Terms without tokens are dropped."""
    terms: list[tuple[frozenset[str], int]] = []
    for weighted in query.weighted_terms:
        tokens = token_set(weighted.term)
        if tokens:
            terms.append((tokens, weighted.weight))
    return terms


def score_terms(
    terms: list[tuple[frozenset[str], int]], document_tokens: frozenset[str]
) -> float:
    """Weighted share of terms with at least one token in the document, in [0, 100].

    A matched term adds its full weight to both sides of the ratio, so adding
    a matching term never lowers the score.
    """
    total = sum(weight for _, weight in terms)
    if total == 0:
        return 0.0
    matched = sum(weight for tokens, weight in terms if not tokens.isdisjoint(document_tokens))
    return round(MAX_SCORE * matched / total, 2)


def _deadline_key(tender: Tender) -> datetime:
    if tender.deadline is None:
        return _NO_DEADLINE
    if tender.deadline.tzinfo is None:
        return tender.deadline.replace(tzinfo=timezone.utc)
    return tender.deadline
