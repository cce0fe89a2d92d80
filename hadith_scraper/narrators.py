"""Narrator name extraction from English hadith text.

Two ordered cascades of regular expressions are tried first-to-last; the
first pattern that yields a plausible name wins, so ordering is part of the
behaviour.  The short cascade reads an isolated "Narrated X:" lead-in, the
long one scans a full English passage and carries the phrasings observed
across the Bukhari, Muslim, Malik and Riyad as-Salihin translations.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, Optional

PARENTHETICAL_PATTERN = re.compile(r"\s*\([^)]+\)\s*")
LEADING_QUOTES_PATTERN = re.compile(r"^['`‘’]+")
WHO_SAID_PATTERN = re.compile(r"\s+who\s+said.*$", re.IGNORECASE)
WHITESPACE_PATTERN = re.compile(r"\s+")

# Abu X, Ibn X, Umm X, 'Abdullah, Abu'l-X, names joined with b./bin/al-/an-
NAME = (
    r"(?:Abu[d]?(?:'l-)?\s*|Ibn\s+|Umm\s+)?[A-Z'‘’`][a-z'‘’`]+"
    r"(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-?|Al-|an-)[A-Za-z'‘’`-]+)*"
)


def _compile(patterns: Iterable[str]) -> list[re.Pattern[str]]:
    return [re.compile(pattern, re.IGNORECASE) for pattern in patterns]


LEAD_IN_PATTERNS = _compile([
    # Narrated Said bin Jubair:
    r"^Narrated\s+(['`‘’]?[A-Z][a-z'‘’`]+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-?|bint\s+)?[A-Za-z'‘’`-]+)*)",
    # 'A'isha (Allah be pleased with her) said:
    r"^['`‘’]?([A-Z][a-z'‘’`]+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-?|Al-|an-)?[A-Za-z'‘’`-]+)*)"
    r"\s*(?:\([^)]+\))?\s*(?:reported|said|narrated)",
    r"^((?:Abu\s+|Ibn\s+|Umm\s+)[A-Z][a-z'‘’`]+(?:\s+(?:b\.\s*|al-?)?[A-Za-z'‘’`-]+)*)"
    r"\s*(?:\([^)]+\))?\s*(?:reported|said|narrated)",
    r"(?:on the authority of|narrated (?:on the authority of|by|from))\s+"
    r"(['`‘’]?[A-Z][a-z'‘’`]+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-?)?[A-Za-z'‘’`-]+)*)",
])

NARRATOR_PATTERNS = _compile([
    # Muslim: "Name (Allah be pleased with him) said/reported"
    rf"^['‘’]?({NAME})\s*\(Allah be pleased with (?:him|her|them)\)\s*(?:said|reported)",
    # Riyad as-Salihin: "Name (May Allah be pleased with him) said:"
    rf"^({NAME})\s*\(May Allah be pleased with (?:him|her|them)\)\s*(?:said|reported)",
    # "Messsenger" is a typo present in the source
    rf"^['‘’]?({NAME})\s+reported\s+(?:Allah's\s+)?(?:Messenger|Messsenger|Prophet|Apostle)",
    rf"^['‘’]?({NAME})\s+reported\s+that\s+(?:there|the|he|she|when|a|one|it|whenever)",
    r"^['‘’]?([A-Z][a-z']+\s+bint\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)\s+(?:said|reported)",
    r"^['‘’]?([A-Z][a-z']+(?:\s+(?:b\.\s*)?[A-Za-z'-]+)*),\s+the\s+(?:freed\s+slave|wife|mother)\s+of\s+[^,]+,?\s*(?:said|reported)",
    rf"^['‘’]?({NAME})\s+is\s+reported\s+as\s+saying",
    rf"^['‘’]?({NAME})\s+says:\s*I\s+heard",
    rf"^['‘’]?({NAME})\s+told\s+that",
    r"heard\s+((?:Abu\s+)?[A-Z][a-z']+(?:\s+(?:b\.\s*|al-)[A-Za-z'-]+)*)\s+as\s+saying",
    r"^(Ibn\s+['‘’]?[A-Z][a-z]+)\s+said:",
    r"It is narrated from\s+(['‘’]?[A-Z][a-z]+(?:\s+(?:b\.\s*|al-)?[A-Za-z'-]+)*)\s+that",
    rf"^['‘’]?({NAME})\s+reported\s+the\s+Messenger",
    r"^(Umm\s+[A-Z][a-z]+\s+daughter\s+of\s+[A-Z][a-z]+)\s+(?:said|reported)",
    r"^(['‘’]?[A-Z][a-z'-]+),?\s+the\s+(?:son|daughter)\s+of\s+[^,]+,?\s*reported",
    r"^(Abu\s+al\.\s*['‘’]?[A-Z][a-z'-]+(?:\s+(?:b\.\s*)?[A-Za-z'-]+)*)\s+said:",
    r"^(['‘’]?[A-Z][a-z]+\s+bint\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)\s*\([^)]+\)\s*reported",
    # `Abdullah (b. Mas`ud) said:
    r"^`([A-Z][a-z]+)\s*\([^)]+\)\s*said:",
    rf"^['‘’]?({NAME})\s+reported\s+it\s+from\s+(?:his|her)\s+(?:father|mother)",
    r"It is reported from\s+(['‘’]?[A-Z][a-z']+)\s+that\s+(?:she|he)\s+observed",
    r"^(['‘’]?[A-Z][a-z']+)\s+the\s+(?:wife|husband)\s+of\s+(?:the\s+)?(?:Messenger|Prophet|Holy\s+Prophet)",
    rf"^['‘’]?({NAME})\s+reported\s+with\s+regard\s+to",
    rf"^['‘’]?({NAME})\s+reported\s+that\s+so\s+far",
    r"^['‘’]([A-Z][a-z']+)\s+said:",
    r"^([A-Z][a-z']+(?:\s+b\.\s+[A-Z][a-z']+)+)\s+said:",
    rf"^({NAME})\s+reported\s+that\s+[A-Z][a-z]+\s+(?:performed|said|did|went)",
    rf"^['‘’]?({NAME})\s+reported\s+from\s+(?:the\s+)?(?:Messenger|Prophet|Apostle)",
    rf"^['‘’]?({NAME})\s+quoted\s+(?:the\s+)?(?:Messenger|Prophet|Apostle)",
    r"reported\s+((?:Abu\s+)?[A-Z][a-z]+(?:\s+(?:b\.\s*|al-)?[A-Za-z'-]+)*)\s+as\s+saying",
    rf"^['‘’]?({NAME})\s+reported\.\s+I\s+heard",
    r"^['‘’]?([A-Z][a-z']+)\s*\([^)]+\)\s*(?:said|reported)",
    r"^['‘’]?([A-Z][a-z']+)\s*\(b\.\s*[A-Z][a-z']+\)\s*reported",
    rf"^['‘’]?({NAME})\s+is\s+reported\s+to\s+have\s+said",
    r"heard\s+((?:Abu\s+)?[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)\s+say",
    rf"^['‘’]?({NAME})\s*\([^)]*[Cc]ompanion[^)]*\)\s*reported",
    rf"^['‘’]?({NAME})\s+said\s+he\s+heard",
    rf"^['‘’]?({NAME})\s+(?:observed|thus\s+reported)\s+that",
    rf"^['‘’]?({NAME})\s+asked\s+['‘’]?[A-Z]",
    rf"^['‘’]?({NAME})\s+wrote\s+to\s+[A-Z]",
    rf"^['‘’]?({NAME})\s+reported\s+Allah's\s+(?:Apostle|Messenger)",
    r"told of\s+((?:Abu\s+)?[A-Z][a-z]+(?:\s+(?:b\.\s*)?[A-Za-z'-]+)*)\s+(?:saying|as\s+saying)",
    # Any leading name followed by said/reported and a colon or content
    r"^((?:Abu\s+|Ibn\s+|Umm\s+|Al-)?[A-Z][a-z']+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-)?[A-Za-z'‘’-]+)*)"
    r"\s+(?:said|reported)(?::|,?\s+(?:that\s+)?(?:the|he|she|when|Allah|I|a\s+))",
    r"On the authority of\s+([^(,]+?)(?:\s*\([^)]+\))?(?:\s*,|\s+[—–-]|\s+who|\s+that|\s+from|\s*:)",
    r"Narrated\s+([^:]+):",
    r"It was narrated (?:from|by|that)\s+([^:,]+)",
    r"It is narrated on the authority of\s+([^:,]+)",
    r"([A-Z][^:]+)\s+reported:",
    # Muwatta: "Yahya related to me from Malik from X"
    r"related to me from Malik[^f]*from\s+([A-Z][^,]+)",
    r"related to me from\s+([A-Z][a-z]+(?:\s+(?:ibn|bin|al-)[A-Za-z-]+)*)",
    r"([A-Z][a-z]+(?:\s+(?:ibn|bin|al-)[A-Za-z-]+)*)\s+(?:said|related)\s+that",
    r"^([A-Z][a-z']+(?:\s+(?:b\.|bin|ibn|al-)[A-Za-z'-]+)*)\s+(?:is\s+)?reported\s+(?:to\s+have\s+said|from|it\s+from)",
    r"^([A-Z][a-z']+(?:\s+(?:b\.|bin|ibn|al-)[A-Za-z'-]+)*)\s+narrated\s+from",
    r"^(Al-[A-Z][a-z']+)\s+reported\s+from",
    r"^([A-Z][a-z']+(?:\s+b\.\s+[A-Za-z'-]+)+)\s+(?:reported|narrated)",
    r"^['‘’]([A-Z][a-z]+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-)[A-Za-z'‘’-]+)*)\s+(?:is\s+)?reported",
    r"I heard\s+((?:Abu\s+)?[A-Z][a-z]+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-)[A-Za-z'‘’-]+)*)\s+(?:narrat|say)",
    r"It is narrated by\s+((?:Abu\s+)?[A-Z'‘’][a-z]+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-)[A-Za-z'‘’-]+)*)\s+that",
    r"It is reported (?:from|by)\s+((?:Abu\s+)?[A-Z'‘’][a-z]+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-)[A-Za-z'‘’-]+)*)",
    r"^((?:Abu\s+)?[A-Z'‘’][a-z]+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-)[A-Za-z'‘’-]+)*)\s+transmitted\s+it\s+from",
    r"^(Abu\s+[A-Z][a-z]+)\s+reported\s+that\s+(?:Muhammad|the\s+Messenger|Allah)",
    r"^([A-Z'‘’][a-z]+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-)[A-Za-z'‘’-]+)*)\s+reported\s+that\s+(?:Muhammad|the\s+Messenger)",
    r"reported that he heard\s+((?:Abu\s+)?[A-Z][a-z]+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-)[A-Za-z'‘’-]+)*)",
    r"^((?:Abu\s+)?[A-Z'‘’][a-z]+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-)[A-Za-z'‘’-]+)*)\s+(?:al-[A-Za-z]+\s+)?who\s+was",
    r"^((?:Abu\s+)?[A-Z'‘’][a-z]+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-)[A-Za-z'‘’-]+)*)\s+(?:said|reported):",
    r"^((?:Abu\s+)?[A-Z'‘’][a-z]+)\s+reported\s+the\s+(?:Apostle|Prophet)",
    r"heard\s+((?:Abu\s+)?[A-Z][a-z]+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-)[A-Za-z'‘’-]+)*)\s+(?:b\.\s+[A-Za-z]+\s+)?report",
    r"^((?:Abu\s+|Ibn\s+|Umm\s+)?[A-Z'‘’][a-z]+(?:\s+(?:b\.\s*|bin\s+|ibn\s+|al-)[A-Za-z'‘’-]+)*)\s+was\s+(?:delivering|saying|speaking)",
    r"^((?:Abu\s+|Al-)?[A-Z][a-z]+(?:-[A-Z][a-z]+)?)\s+reported\s+to\s+us",
    # "repotted"/"repoorted" typos occur in the Muslim translation
    rf"^['‘’]?({NAME})\s+(?:repotted|repoorted)\s+",
    rf"^['‘’]?({NAME}),\s*said:",
    rf"^['‘’]?({NAME})\s+reported\s*\(",
    rf"^['‘’]?({NAME})\s+is\s+reported\s+to\s+have\s+heard",
    rf"^['‘’]?({NAME})\s+reported\s+that\s+[A-Z][a-z']+(?:\s+(?:b\.\s*)?[A-Za-z'-]+)*\s+"
    r"(?:took|gave|sent|came|went|struck|entered|used|asked|forbade)",
    rf"^['‘’]?({NAME})\s+told\s+that\s+['‘’]?[A-Z]",
    r"^([A-Z][a-z]+)\s+reported\s+that\s+(?:Umm|Abu|Ibn)\s+",
    rf"^['‘’]?({NAME})\s+was\s+[^:]+and\s+saying:",
    r"^['‘’`]?([A-Z'‘’`][a-z'‘’`]+(?:\s+(?:b\.\s*|al-?\s*)?[A-Za-z'‘’`-]+)*)\s*"
    r"\(Allah be pleased with (?:him|her|them|both of them)\)\s*(?:said|reported)\s+that",
    r"^`([A-Z][a-z'`]+(?:\s+(?:b\.\s*)?[A-Za-z'`-]+)*)\s*(?:,\s*the\s+wife|\s*\(Allah)",
    r"^['‘’`]?([A-Z][a-z'‘’`]+(?:\s+(?:b\.\s*)?[A-Za-z'‘’`-]+)*)\s+told\s+that\s+['‘’`]?[A-Z]",
    r"^(Abu'l-[A-Z][a-z-]+)\s+(?:told|said|reported)",
    r"^['‘’`]?([A-Z][a-z'‘’`]+(?:\s+(?:b\.\s*)?[A-Za-z'‘’`-]+)*)\s+was\s+asked\s+about",
    r"^['‘’`]?([A-Z][a-z'‘’`]+(?:\s+(?:b\.\s*)?[A-Za-z'‘’`-]+)*)\s+said\s+to\s+['‘’`]?[A-Z]",
    r"^['‘’`]?([A-Z][a-z'‘’`]+(?:\s+(?:b\.\s*)?[A-Za-z'‘’`-]+)*)\s*\([^)]+\)\s*and\s+[A-Z][a-z]+\s+(?:reported|said)",
    r"reported\s+([A-Z][a-z'‘’`]+(?:\s+(?:b\.\s*|al-?\s*)?[A-Za-z'‘’`-]+)*)\s+as\s+saying",
    r"^['‘’`]?([A-Z][a-z'‘’`]+(?:\s+(?:b\.\s*|al\.?\s*)?[A-Za-z'‘’`-]+)*),?\s*\(Allah be pleased",
    r"^['‘’`]?([A-Z][a-z'‘’`]+(?:\s+(?:b\.\s*)?[A-Za-z'‘’`-]+)*)\s+reported[;:]",
    r"^['‘’`]?([A-Z][a-z'‘’`]+(?:\s+(?:b\.\s*)?[A-Za-z'‘’`-]+)*)\s+\(reported\)\s+that",
    # "Abu Sa'id al. Khudri"
    r"^(Abu\s+[A-Z][a-z'‘’`]+\s+al\.\s*[A-Z][a-z]+)\s+(?:reported|said)",
    r"^['‘’`]?([A-Z][a-z'‘’`]+(?:\s+(?:b\.\s*|al-?\s*)?[A-Za-z'‘’`-]+)*)\s+reported\s+that\s+"
    r"(?:some|the|a|once|when|he|she|it)",
    # "Ahdullah" misspelling
    r"^(Ahd?ullah)\s+(?:b\.\s*)?[A-Za-z]+\s+(?:reported|\(reported\))",
    r"^([A-Z][a-z]+\s+al-[A-Z][a-z]+)\s+heard[A-Z]",
])


def clean_narrator_name(name: Optional[str]) -> Optional[str]:
    """Strip honorific parentheticals and quotes; reject implausible lengths."""
    if not name:
        return None
    name = PARENTHETICAL_PATTERN.sub(" ", name).strip()
    name = LEADING_QUOTES_PATTERN.sub("", name)
    name = WHITESPACE_PATTERN.sub(" ", name).strip()
    return name if 2 < len(name) < 100 else None


def _clean_scanned_name(name: str) -> Optional[str]:
    name = WHO_SAID_PATTERN.sub("", name.strip()).strip()
    name = PARENTHETICAL_PATTERN.sub(" ", name).strip()
    name = WHITESPACE_PATTERN.sub(" ", name)
    return name if 2 < len(name) < 100 else None


def _first_match(
    patterns: Iterable[re.Pattern[str]],
    text: str,
    clean: Callable[[str], Optional[str]],
    *,
    stop_at_first: bool = False,
) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match is None:
            continue
        captured = match.group(1)
        # "Narrated" captured as a name is a false positive, not a verdict
        if captured.strip().lower() == "narrated":
            continue
        name = clean(captured)
        # A lead-in whose name fails the length check has no narrator
        if name or stop_at_first:
            return name
    return None


def extract_narrator_from_narrated(text: Optional[str]) -> Optional[str]:
    """Read the narrator out of an isolated lead-in such as ``"Narrated Abu Huraira:"``."""
    if not text or len(text) < 3:
        return None
    return _first_match(LEAD_IN_PATTERNS, text.strip(), clean_narrator_name, stop_at_first=True)


def extract_narrator(text: Optional[str]) -> Optional[str]:
    """Scan a full English passage for the narrator using the long cascade."""
    if not text:
        return None
    return _first_match(NARRATOR_PATTERNS, text, _clean_scanned_name)


__all__ = [
    "LEAD_IN_PATTERNS",
    "NARRATOR_PATTERNS",
    "clean_narrator_name",
    "extract_narrator",
    "extract_narrator_from_narrated",
]
