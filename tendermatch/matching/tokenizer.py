"""Bilingual (English/Arabic) tokenization for tender matching."""

import re

_WORD_RE = re.compile(r"\w+", re.UNICODE)

# Harakat, superscript alef and tatweel.
_ARABIC_MARKS_RE = re.compile(r"[\u064b-\u0652\u0670\u0640]")

MIN_TOKEN_LENGTH = 2

ENGLISH_STOP_WORDS = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "in",
        "into", "is", "its", "of", "on", "or", "our", "the", "their",
        "to", "we", "with", "all", "other", "including",
    }
)

ARABIC_STOP_WORDS = frozenset(
    {
        "في", "من", "على", "إلى", "الى", "عن", "مع", "و", "أو", "او", "ال",
        "هذا", "هذه", "التي", "الذي", "ذلك", "تلك", "كل", "بين", "ما", "لا",
    }
)

STOP_WORDS = ENGLISH_STOP_WORDS | ARABIC_STOP_WORDS


def normalize_text(text: str) -> str:
    """Lower-case and strip Arabic diacritics and tatweel."""
    return _ARABIC_MARKS_RE.sub("", text).lower()


def tokenize(text: str) -> list[str]:
    """Split text into matchable tokens, keeping order and duplicates."""
    return [
        token
        for token in _WORD_RE.findall(normalize_text(text))
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]


def token_set(text: str) -> frozenset[str]:
    return frozenset(tokenize(text))
