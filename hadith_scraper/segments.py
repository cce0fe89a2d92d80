"""Split a narration into its chain (isnad) and content (matn) segments.

Arabic chains are strings of transmission verbs ("حدثنا", "أخبرنا", ...)
linking narrator names.  The chain ends at the first "قال"/"يقول" that is
not immediately followed by another transmission verb, or at "أن" followed
by "رسول"/"النبي", whichever comes first.  All comparisons run on NFC
normalized text because the site mixes diacritic orderings.

English lead-ins are only recognised in a few literal forms ("It was
narrated from X that", "It was narrated from X:", "Narrated X:").
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Optional


def nfc(value: str) -> str:
    return unicodedata.normalize("NFC", value)


@dataclass(frozen=True)
class SegmentSplit:
    isnad: str
    matn: str


NARRATION_VERBS: tuple[str, ...] = tuple(
    nfc(verb)
    for verb in (
        "حَدَّثَنَا",
        "حَدَّثَنِي",
        "حَدَّثَنَاهُ",
        "أَخْبَرَنَا",
        "أَخْبَرَنِي",
        "أَنْبَأَنَا",
        "أَنْبَأَنِي",
        "سَمِعْتُ",
        "سَمِعَ",
    )
)
# "I heard" forms continue a chain but never open one
OPENING_VERBS = NARRATION_VERBS[:7]

ANNA = nfc("أَنَّ")
MESSENGER_FORMS: tuple[str, ...] = tuple(
    nfc(form) for form in ("رَسُولَ", "النَّبِيَّ", "رَسُولُ", "النَّبِيُّ", "نَبِيَّ")
)
SAID_PATTERN = re.compile(nfc("قَالَ") + "|" + nfc("يَقُولُ"))
LEADING_SEPARATORS = re.compile(r"^[\s،,:.]+")

MIN_SEGMENT_LENGTH = 5
MAX_ISNAD_RATIO = 0.85


def starts_with_isnad(text: str) -> bool:
    """True when ``text`` opens with a chain-starting transmission verb."""
    trimmed = nfc(text.lstrip())
    return any(trimmed.startswith(verb) for verb in OPENING_VERBS)


def _messenger_boundary(text: str) -> Optional[int]:
    index = text.find(ANNA)
    while index != -1:
        after = text[index + len(ANNA):].lstrip()
        if after.startswith(MESSENGER_FORMS):
            return index
        index = text.find(ANNA, index + 1)
    return None


def _said_boundary(text: str) -> Optional[int]:
    for match in SAID_PATTERN.finditer(text):
        remaining = LEADING_SEPARATORS.sub("", text[match.end():])
        if not remaining.startswith(NARRATION_VERBS):
            return match.end()
    return None


def split_isnad_from_matn(text: Optional[str]) -> Optional[SegmentSplit]:
    """Split an Arabic passage at the end of its chain, or return ``None``."""
    if not text or not starts_with_isnad(text):
        return None

    normalized = nfc(text)
    candidates = [
        index
        for index in (_messenger_boundary(normalized), _said_boundary(normalized))
        if index is not None
    ]
    if not candidates:
        return None
    split_index = min(candidates)

    isnad = normalized[:split_index].strip()
    matn = normalized[split_index:].strip()
    if len(isnad) < MIN_SEGMENT_LENGTH or len(matn) < MIN_SEGMENT_LENGTH:
        return None
    if len(isnad) > len(normalized) * MAX_ISNAD_RATIO:
        return None
    return SegmentSplit(isnad=isnad, matn=matn)


ENGLISH_LEAD_INS = [
    # "It was narrated from Abu Hurairah that the Messenger ..." splits after "that"
    re.compile(
        r"^(It was narrated (?:from|that|by|on the authority of)\s+[^.]+?\s+that)\s+",
        re.IGNORECASE,
    ),
    re.compile(r"^(It was narrated (?:from|that|by)\s+[^:]+):\s*", re.IGNORECASE),
    re.compile(r"^(Narrated\s+[^:]+):\s*", re.IGNORECASE),
]


def strip_english_narrator_intro(text: Optional[str]) -> Optional[SegmentSplit]:
    """Split an English passage after a literal narration lead-in, or return ``None``."""
    if not text or len(text) < 10:
        return None
    for pattern in ENGLISH_LEAD_INS:
        match = pattern.match(text)
        if match is None:
            continue
        isnad = match.group(1).strip()
        matn = text[match.end():].strip()
        if len(matn) > MIN_SEGMENT_LENGTH:
            return SegmentSplit(isnad=isnad, matn=matn)
    return None


ARABIC_ISNAD_PATTERNS = [
    re.compile(nfc(r"(حَدَّثَنَا.*?)(?:قَالَ\s+قَالَ|أَنَّ\s+رَسُولَ|:)"), re.DOTALL),
    re.compile(nfc(r"(أَخْبَرَنَا.*?)(?:قَالَ\s+قَالَ|أَنَّ\s+رَسُولَ|:)"), re.DOTALL),
    re.compile(nfc(r"(عَنْ.*?)(?:قَالَ\s+قَالَ|أَنَّ\s+رَسُولَ)"), re.DOTALL),
]


def extract_isnad_ar(text: Optional[str]) -> Optional[str]:
    """Best-effort Arabic chain for passages the splitter could not handle."""
    if not text:
        return None
    normalized = nfc(text)
    for pattern in ARABIC_ISNAD_PATTERNS:
        match = pattern.search(normalized)
        if match and 10 < len(match.group(1)) < len(normalized) * 0.7:
            return match.group(1).strip()
    return None


ENGLISH_ISNAD_PATTERNS = [
    re.compile(r"^(On the authority of[^:]+):", re.IGNORECASE),
    re.compile(r"^(Narrated[^:]+):", re.IGNORECASE),
    # Muwatta style: He said, "Yahya related to me from Malik from X that ..."
    re.compile(r"^(He said,?\s*\"?[^\"]*related to me from[^t]+)that", re.IGNORECASE),
    re.compile(r"^([A-Z][^.]+related to me from[^.]+?)(?:that|\.)", re.IGNORECASE),
]


def extract_isnad_en(text: Optional[str]) -> Optional[str]:
    """Best-effort English chain: a known lead-in, else whatever precedes an early colon."""
    if not text:
        return None
    for pattern in ENGLISH_ISNAD_PATTERNS:
        match = pattern.match(text)
        if match:
            return match.group(1).rstrip('"').strip()

    colon = text.find(":")
    if 0 < colon < 150:
        isnad = text[:colon].strip()
        if 5 < len(isnad) < 200:
            return isnad
    return None


__all__ = [
    "SegmentSplit",
    "extract_isnad_ar",
    "extract_isnad_en",
    "split_isnad_from_matn",
    "starts_with_isnad",
    "strip_english_narrator_intro",
]
