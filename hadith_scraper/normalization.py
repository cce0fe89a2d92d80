"""Text normalization helpers for strings pulled out of sunnah.com markup."""

from __future__ import annotations

import re
from typing import Optional

INVISIBLE_PATTERN = re.compile("[\u200f\u200e\u200b\u200c\u200d\ufeff]")
WHITESPACE_PATTERN = re.compile(r"\s+")
ARABIC_RUN_PATTERN = re.compile("[\u0600-\u06ff\u0750-\u077f\u08a0-\u08ff]+")
QUOTE_EDGES_PATTERN = re.compile('^["\u200f]+|["\u200f]+$')

# Leftovers of the site's share/report widgets and inline script calls
ENGLISH_ARTIFACT_PATTERNS = [
    re.compile(r"rtHadith\([^)]+\)['\">\s]*", re.IGNORECASE),
    re.compile(r"tHadith\([^)]+\)['\">\s]*", re.IGNORECASE),
    re.compile(r"Hadith\(\d+,\s*'[^']+'\)['\">\s]*", re.IGNORECASE),
    re.compile(r"Report Error\s*\|\s*Share\s*\|\s*Copy\s*▼?", re.IGNORECASE),
    re.compile(r"Report Error", re.IGNORECASE),
    re.compile(r"Share\s*\|", re.IGNORECASE),
    re.compile(r"Copy\s*▼", re.IGNORECASE),
    re.compile(r"Reference\s*:\s*Hadith\s+\d+.*$", re.IGNORECASE),
]


def clean_text(value: Optional[str]) -> str:
    """Drop invisible direction marks, turn NBSP into spaces and collapse whitespace."""
    if not value:
        return ""
    cleaned = INVISIBLE_PATTERN.sub("", value)
    cleaned = cleaned.replace("\u00a0", " ")
    return WHITESPACE_PATTERN.sub(" ", cleaned).strip()


def clean_english_text(value: Optional[str]) -> str:
    """Like :func:`clean_text`, additionally removing UI/script leftovers and Arabic runs."""
    cleaned = clean_text(value)
    for pattern in ENGLISH_ARTIFACT_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    cleaned = ARABIC_RUN_PATTERN.sub(" ", cleaned)
    return WHITESPACE_PATTERN.sub(" ", cleaned).strip()


def strip_quotes(value: str) -> str:
    return QUOTE_EDGES_PATTERN.sub("", value).strip()


def is_arabic(value: Optional[str]) -> bool:
    return bool(value) and ARABIC_RUN_PATTERN.search(value) is not None


__all__ = ["clean_text", "clean_english_text", "strip_quotes", "is_arabic"]
