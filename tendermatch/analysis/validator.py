"""Validates raw parsed AI JSON and builds analysis results."""

import json
from typing import Any

from tendermatch.analysis.exceptions import AnalysisValidationError
from tendermatch.processor.models import ExtractedFields, KeywordPair
from tendermatch.profile.completeness import unique_keywords, unique_values

MAX_ACTIVITIES = 10
MAX_INDUSTRIES = 5
MAX_SPECIALIZATIONS = 8

_UNKNOWN = frozenset({"unknown", "n/a", "none", "غير معروف"})
_PAIR_SEPARATORS = (" - ", " \u2013 ", " \u2014 ", " / ", " | ")


def parse_json_object(raw: str) -> dict[str, Any]:
    """Parse a provider response into a JSON object, tolerating code fences."""
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise AnalysisValidationError(f"Invalid JSON response: {exc}") from exc

    if not isinstance(parsed, dict):
        raise AnalysisValidationError("JSON response must be an object")
    return parsed


def validate_profile_fields(data: dict[str, Any]) -> ExtractedFields:
    """Validate extracted company fields.

    Accepts both snake_case and the camelCase keys some models return.

    Raises:
        AnalysisValidationError: on any shape violation.
    """
    description = _build_text(_pick(data, "description"), "description")
    business_type = _build_text(_pick(data, "business_type", "businessType"), "business_type")
    activities = _build_list(_pick(data, "activities"), "activities", MAX_ACTIVITIES)
    industries = _build_list(_pick(data, "industries"), "industries", MAX_INDUSTRIES)
    specializations = _build_list(
        _pick(data, "specializations"), "specializations", MAX_SPECIALIZATIONS
    )
    return ExtractedFields(
        description=description,
        business_type=business_type,
        activities=activities,
        industries=industries,
        specializations=specializations,
    )


def validate_keywords(data: dict[str, Any], max_count: int) -> list[KeywordPair]:
    """Validate a bilingual keyword list.

    Items may be {"en": ..., "ar": ...} objects, {"source": ..., "target": ...}
    objects, or "English - Arabic" strings. A missing or empty list is valid.

    Raises:
        AnalysisValidationError: if 'keywords' is present but not a list.
    """
    raw = data.get("keywords")
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise AnalysisValidationError("'keywords' must be a list")
    pairs = [pair for pair in (_build_pair(item, i) for i, item in enumerate(raw)) if pair]
    return unique_keywords(pairs)[:max_count]


def _pick(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _build_text(raw: Any, name: str) -> str:
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raise AnalysisValidationError(f"'{name}' must be a string")
    text = " ".join(raw.split())
    return "" if text.casefold() in _UNKNOWN else text


def _build_list(raw: Any, name: str, max_items: int) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise AnalysisValidationError(f"'{name}' must be a list")
    values: list[str] = []
    for i, item in enumerate(raw):
        if not isinstance(item, str):
            raise AnalysisValidationError(f"'{name}' item at index {i} must be a string")
        if item.strip().casefold() not in _UNKNOWN:
            values.append(item)
    return unique_values(values)[:max_items]


def _build_pair(raw: Any, index: int) -> KeywordPair | None:
    if isinstance(raw, str):
        return _split_pair(raw)
    if isinstance(raw, dict):
        source = raw.get("en", raw.get("source", ""))
        target = raw.get("ar", raw.get("target", ""))
        if not isinstance(source, str) or not isinstance(target, str):
            raise AnalysisValidationError(
                f"Keyword at index {index}: terms must be strings"
            )
        if not source.strip() and not target.strip():
            return None
        return KeywordPair(source=source.strip(), target=target.strip())
    raise AnalysisValidationError(
        f"Keyword at index {index} must be a string or an object"
    )


def _split_pair(raw: str) -> KeywordPair | None:
    text = raw.strip()
    if not text:
        return None
    for separator in _PAIR_SEPARATORS:
        if separator in text:
            source, _, target = text.partition(separator)
            return KeywordPair(source=source.strip(), target=target.strip())
    return KeywordPair(source=text)
