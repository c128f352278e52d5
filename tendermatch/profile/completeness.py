"""Profile completeness scoring and profile enrichment.

Both functions are pure: they read their inputs and return new values.
"""

from dataclasses import replace
from datetime import datetime

from tendermatch.processor.models import CompanyProfile, ExtractedFields, KeywordPair

DOCUMENT_PROCESSED_BASE = 30
DESCRIPTION_WEIGHT = 15
BUSINESS_TYPE_WEIGHT = 10
ACTIVITIES_WEIGHT = 10
INDUSTRIES_WEIGHT = 10
SPECIALIZATIONS_WEIGHT = 10
KEYWORDS_WEIGHT = 15

MAX_SCORE = 100


def completeness_score(profile: CompanyProfile) -> int:
    """Score how many profile fields are populated, clamped to [0, 100]."""
    score = 0
    if profile.document_processed:
        score += DOCUMENT_PROCESSED_BASE
    if profile.company_description.strip():
        score += DESCRIPTION_WEIGHT
    if profile.business_type.strip():
        score += BUSINESS_TYPE_WEIGHT
    if _has_values(profile.company_activities):
        score += ACTIVITIES_WEIGHT
    if _has_values(profile.main_industries):
        score += INDUSTRIES_WEIGHT
    if _has_values(profile.specializations):
        score += SPECIALIZATIONS_WEIGHT
    if any(k.terms() for k in profile.keywords):
        score += KEYWORDS_WEIGHT
    return max(0, min(MAX_SCORE, score))


def rescore(profile: CompanyProfile) -> CompanyProfile:
    """Return the profile with its completeness score recomputed."""
    return replace(profile, completeness_score=completeness_score(profile))


def apply_extracted_fields(
    profile: CompanyProfile,
    fields: ExtractedFields,
    now: datetime | None = None,
) -> CompanyProfile:
    """Merge a document's extracted fields into a profile.

    Populated extracted values replace the stored ones; empty ones leave the
    stored value in place. The result is marked as document-processed and
    rescored.
    """
    merged = replace(
        profile,
        company_description=fields.description.strip() or profile.company_description,
        business_type=fields.business_type.strip() or profile.business_type,
        company_activities=unique_values(fields.activities) or profile.company_activities,
        main_industries=unique_values(fields.industries) or profile.main_industries,
        specializations=unique_values(fields.specializations) or profile.specializations,
        keywords=unique_keywords(fields.keywords) or profile.keywords,
        document_processed=True,
        updated_at=now if now is not None else profile.updated_at,
    )
    return rescore(merged)


def unique_values(values: list[str]) -> list[str]:
    """Whitespace-normalize, drop empties and case-insensitive duplicates."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        cleaned = " ".join(str(value).split())
        key = cleaned.casefold()
        if cleaned and key not in seen:
            seen.add(key)
            result.append(cleaned)
    return result


def unique_keywords(keywords: list[KeywordPair]) -> list[KeywordPair]:
    seen: set[tuple[str, str]] = set()
    result: list[KeywordPair] = []
    for pair in keywords:
        source = " ".join(pair.source.split())
        target = " ".join(pair.target.split())
        key = (source.casefold(), target.casefold())
        if (source or target) and key not in seen:
            seen.add(key)
            result.append(KeywordPair(source=source, target=target))
    return result


def _has_values(values: list[str]) -> bool:
    return any(str(v).strip() for v in values)
