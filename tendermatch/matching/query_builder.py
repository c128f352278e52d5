from tendermatch.matching.models import SearchQuery, WeightedTerm
from tendermatch.processor.models import CompanyProfile

KEYWORD_WEIGHT = 2
FIELD_WEIGHT = 1


class QueryBuilder:
    """Turns a company profile into a weighted search query.

    Keyword terms carry double weight and appear twice in raw_text; every
    other populated field contributes once. Pure: the same profile always
    yields an equal query.
    """

    def build(self, profile: CompanyProfile) -> SearchQuery:
        terms: list[WeightedTerm] = []

        self._add(terms, [profile.company_description], "description")
        self._add(terms, profile.specializations, "specializations")
        self._add(terms, profile.company_activities, "activities")
        self._add(terms, profile.main_industries, "industries")
        self._add(terms, [profile.business_type], "business_type")

        for pair in profile.keywords:
            for term in pair.terms():
                terms.append(WeightedTerm(term=term, weight=KEYWORD_WEIGHT, source="keywords"))

        raw_parts: list[str] = []
        for weighted in terms:
            raw_parts.extend([weighted.term] * weighted.weight)

        return SearchQuery(raw_text=" ".join(raw_parts), weighted_terms=tuple(terms))

    @staticmethod
    def _add(terms: list[WeightedTerm], values: list[str], source: str) -> None:
        for value in values:
            cleaned = " ".join(str(value or "").split())
            if cleaned:
                terms.append(WeightedTerm(term=cleaned, weight=FIELD_WEIGHT, source=source))
