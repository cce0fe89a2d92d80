"""Grade and source-attribution extraction for hadith containers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from selectolax.parser import Node

from .models import NormalizedGrade
from .normalization import clean_text, is_arabic

# Checked in order: a "hasan sahih" grade must not collapse into "hasan"
GRADE_CATEGORIES: list[tuple[NormalizedGrade, tuple[str, ...]]] = [
    ("maudu", ("maudu", "fabricat")),
    ("daif", ("daif", "da'if", "da’if", "weak")),
    ("hasan sahih", ("hasan sahih", "sahih hasan")),
    ("hasan", ("hasan",)),
    ("sahih", ("sahih",)),
]

SOURCE_NAMES = ["Bukhari", "Muslim", "Tirmidhi", "Abu Dawud", "An-Nasa'i", "Ibn Majah", "Malik"]
SOURCE_LINK_SELECTOR = ", ".join(
    f'a[href*="/{slug}"]'
    for slug in ("bukhari", "muslim", "tirmidhi", "abudawud", "nasai", "ibnmajah", "malik")
)

BRACKET_SOURCE_PATTERN = re.compile(
    r"\[\s*((?:Al-)?Bukhari|Muslim|At-Tirmidhi|Abu Dawud|An-Nasa['’]?i|Ibn Majah|Malik)"
    r"(?:\s*(?:&|and)\s*((?:Al-)?Bukhari|Muslim))?\s*\]",
    re.IGNORECASE,
)
RELATED_BY_PATTERN = re.compile(
    r"(?:related|reported|narrated)\s+by\s+"
    r"((?:al-)?Bukhari|Muslim|(?:at-)?Tirmidhi|Abu Dawud|(?:an-)?Nasa['’]?i|Ibn Majah)",
    re.IGNORECASE,
)
HADEETH_RELATED_PATTERN = re.compile(
    r"hadee?th\s+(?:which\s+was\s+)?(?:related|narrated)\s+by\s+((?:al-)?Bukhari|Muslim|(?:at-)?Tirmidhi)",
    re.IGNORECASE,
)
TEXTUAL_GRADE_PATTERNS = [
    re.compile(r"(?:grade|status)\s*:?\s*(sahih|hasan|da['’]?if|weak)", re.IGNORECASE),
    re.compile(r"hadith\s+(sahih|hasan|da['’]?if)", re.IGNORECASE),
    re.compile(r"\((sahih|hasan|da['’]?if)\)", re.IGNORECASE),
]
SOURCE_KEY_PATTERN = re.compile(r"['’\-\s]")


@dataclass(frozen=True)
class GradeInfo:
    grade_en: Optional[str] = None
    grade_ar: Optional[str] = None
    normalized: Optional[NormalizedGrade] = None


def normalize_grade(text: Optional[str]) -> Optional[NormalizedGrade]:
    """Map free grading text such as ``"Sahih (Darussalam)"`` to a category, or ``None``."""
    if not text:
        return None
    lower = text.lower()
    for category, needles in GRADE_CATEGORIES:
        if any(needle in lower for needle in needles):
            return category
    return None


def _second_cell(table: Node, selector: str) -> Optional[str]:
    # The first cell of each language column holds the "Grade:" label
    cells = table.css(selector)
    if len(cells) < 2:
        return None
    text = clean_text(cells[1].text())
    return text if len(text) > 1 else None


def extract_grades(container: Node) -> GradeInfo:
    table = container.css_first(".gradetable")
    if table is None:
        return GradeInfo()
    grade_en = _second_cell(table, "td.english_grade")
    grade_ar = _second_cell(table, "td.arabic_grade")
    return GradeInfo(grade_en=grade_en, grade_ar=grade_ar, normalized=normalize_grade(grade_en))


def extract_source_grade(container: Node) -> Optional[NormalizedGrade]:
    """Grade of a compilation entry as given by its source collection."""
    normalized = extract_grades(container).normalized
    if normalized:
        return normalized

    grade_node = container.css_first(".grade, .hadith_grade")
    if grade_node is not None:
        text = grade_node.text().lower()
        if "sahih" in text:
            return "sahih"
        if "hasan" in text:
            return "hasan"
        if "daif" in text or "da'if" in text or "weak" in text:
            return "daif"

    container_text = container.text()
    for pattern in TEXTUAL_GRADE_PATTERNS:
        match = pattern.search(container_text)
        if match:
            return normalize_grade(match.group(1))
    return None


def _source_key(value: str) -> str:
    return SOURCE_KEY_PATTERN.sub("", value.lower())


def extract_source_reference_from_text(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    match = BRACKET_SOURCE_PATTERN.search(text)
    if match:
        if match.group(2):
            return f"[{match.group(1)} and {match.group(2)}]"
        return f"[{match.group(1)}]"
    for pattern in (RELATED_BY_PATTERN, HADEETH_RELATED_PATTERN):
        match = pattern.search(text)
        if match:
            return f"[{match.group(1)}]"
    return None


def extract_source_reference(container: Node) -> Optional[str]:
    """Source attribution of a compilation entry, e.g. ``"[Bukhari and Muslim]"``."""
    sources: list[str] = []
    for link in container.css(SOURCE_LINK_SELECTOR):
        text = clean_text(link.text())
        if not text or is_arabic(text):
            continue
        key = _source_key(text)
        for name in SOURCE_NAMES:
            if _source_key(name) in key and name not in sources:
                sources.append(name)
                break
    if sources:
        return f"[{' and '.join(sources)}]"
    return extract_source_reference_from_text(container.text())


__all__ = [
    "GradeInfo",
    "extract_grades",
    "extract_source_grade",
    "extract_source_reference",
    "extract_source_reference_from_text",
    "normalize_grade",
]
