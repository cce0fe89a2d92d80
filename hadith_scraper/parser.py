"""HTML parsing for sunnah.com book and collection pages.

Hadith containers are located with three strategies, each used only when
the previous one found nothing:

1. structured containers (``.actualHadithContainer`` and friends);
2. reference links ``/<collection>:<n>`` walked up to an enclosing block,
   with a plain-text window around the link as last resort;
3. a scan of the page text for ``"<collection name> <n>"`` references.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from selectolax.parser import HTMLParser, Node

from .config import BookKey, CollectionConfig
from .grades import (
    extract_grades,
    extract_source_grade,
    extract_source_reference,
    extract_source_reference_from_text,
)
from .models import Chapter, Hadith, ParsedBookPage, base_hadith_number
from .narrators import extract_narrator, extract_narrator_from_narrated
from .normalization import clean_english_text, clean_text, is_arabic, strip_quotes
from .segments import (
    extract_isnad_ar,
    extract_isnad_en,
    split_isnad_from_matn,
    starts_with_isnad,
    strip_english_narrator_intro,
)

LOGGER = logging.getLogger(__name__)

CHAPTER_NUMBER_PATTERN = re.compile(r"\((\d+)\)")
LEADING_CHAPTER_NUMBER_PATTERN = re.compile(r"^\((\d+)\)\s*")
CHAPTER_PREFIX_PATTERN = re.compile(r"^Chapter:?\s*", re.IGNORECASE)
REFERENCE_TEXT_NUMBER_PATTERN = re.compile(r"(\d+)\s*([a-z])?$")
ID_NUMBER_PATTERN = re.compile(r"hadith-?(\d+)")
ANCHOR_NUMBER_PATTERN = re.compile(r"^\d+[a-z]?$")
IN_BOOK_REFERENCE_PATTERN = re.compile(r"Book\s+(\d+),?\s*Hadith\s+(\d+)", re.IGNORECASE)
ARABIC_TITLE_PATTERN = re.compile(r"[\u0600-\u06ff][\u0600-\u06ff\s\u064b-\u065f]{5,}")
ARABIC_WINDOW_PATTERN = re.compile(r"([\u0600-\u06ff][\u0600-\u06ff\s\u064b-\u065f،:.!؟]{30,})")
ENGLISH_WINDOW_PATTERN = re.compile(
    r"((?:On the authority of|Narrated|It was narrated|It is narrated).*?(?:\.|(?=[\u0600-\u06ff])))",
    re.IGNORECASE | re.DOTALL,
)
CLOSING_PUNCTUATION_PATTERN = re.compile("^[\\s\\u200f\\u200e.،؛:!؟]+$")

CONTAINER_CLASSES = ("hadithContainer", "actualHadithContainer", "hadith")
RTL_SELECTOR = "p[dir='rtl'], .arabic, [lang='ar']"
ENGLISH_BODY_SELECTOR = ".english_hadith_full, .english_text, .hadithText"
MAX_ANCESTOR_DEPTH = 10
WINDOW_BEFORE = 2000
WINDOW_AFTER = 3000


@dataclass
class SegmentedText:
    text: str
    isnad: Optional[str] = None
    matn: Optional[str] = None
    closing: Optional[str] = None


def text_content(node: Optional[Node]) -> str:
    if node is None:
        return ""
    return node.text() or ""


def parse_html(html: Optional[str]) -> Optional[HTMLParser]:
    if not html or not html.strip():
        return None
    return HTMLParser(html)


def page_text(tree: HTMLParser) -> str:
    root = tree.body or tree.root
    return text_content(root)


def class_tokens(node: Node) -> set[str]:
    return set((node.attributes.get("class") or "").split())


def has_rtl_child(node: Node) -> bool:
    return node.css_first(RTL_SELECTOR) is not None


def unit_url(collection_id: str, hadith_number: str) -> str:
    return f"https://sunnah.com/{collection_id}:{hadith_number}"


def _number_from_href(href: str, collection_id: str) -> Optional[str]:
    match = re.search(rf"/{re.escape(collection_id)}:(\d+)([a-z])?", href)
    if match is None:
        return None
    return match.group(1) + (match.group(2) or "")


# ---------------------------------------------------------------------------
# Book metadata
# ---------------------------------------------------------------------------


def extract_book_name_en(tree: HTMLParser) -> Optional[str]:
    name = clean_text(text_content(tree.css_first(".book_page_english_name")))
    if name:
        return name
    title = tree.css_first("title")
    if title is not None:
        name = clean_text(text_content(title).split(" - ")[0])
        if name:
            return name
    return clean_text(text_content(tree.css_first("h1"))) or None


def extract_book_name_ar(tree: HTMLParser) -> Optional[str]:
    name = clean_text(text_content(tree.css_first(".book_page_arabic_name")))
    if len(name) > 2:
        return name
    for selector in ("h1", ".page-title, .book-title, [dir='rtl'] h1"):
        match = ARABIC_TITLE_PATTERN.search(text_content(tree.css_first(selector)))
        if match:
            return clean_text(match.group(0))
    return None


def extract_in_book_reference(container: Node) -> Optional[str]:
    node = container.css_first(".hadith_reference, .in-book-reference")
    match = IN_BOOK_REFERENCE_PATTERN.search(text_content(node))
    if match is None:
        return None
    return f"Book {match.group(1)}, Hadith {match.group(2)}"


# ---------------------------------------------------------------------------
# Chapters
# ---------------------------------------------------------------------------


def chapter_number_of(node: Node) -> Optional[int]:
    for selector in (".echapno", ".achapno"):
        match = CHAPTER_NUMBER_PATTERN.search(text_content(node.css_first(selector)))
        if match:
            return int(match.group(1))
    return None


def _chapter_names(node: Node) -> tuple[Optional[str], Optional[str]]:
    name_en: Optional[str] = clean_text(text_content(node.css_first(".englishchapter")))
    name_en = CHAPTER_PREFIX_PATTERN.sub("", name_en or "").strip()
    if len(name_en) < 2:
        name_en = None

    name_ar: Optional[str] = clean_text(text_content(node.css_first(".arabicchapter")))
    # A bare "باب" ("chapter") carries no title
    if name_ar == "باب" or len(name_ar or "") < 2:
        name_ar = None
    return name_en, name_ar


def _legacy_chapters(tree: HTMLParser) -> list[Chapter]:
    chapters: list[Chapter] = []
    seen: set[int] = set()
    running = 0
    for node in tree.css(".achapter, .chapterTitle"):
        running += 1
        text = clean_text(text_content(node))
        match = LEADING_CHAPTER_NUMBER_PATTERN.match(text)
        if match:
            running = int(match.group(1))
        title = CHAPTER_PREFIX_PATTERN.sub("", LEADING_CHAPTER_NUMBER_PATTERN.sub("", text))
        if len(title) <= 2 or running in seen:
            continue
        seen.add(running)
        arabic = is_arabic(text)
        chapters.append(
            Chapter(
                chapter_number=running,
                name_en=None if arabic else title,
                name_ar=title if arabic else None,
            )
        )
    return chapters


def _numbered_chapters(tree: HTMLParser) -> Iterator[tuple[Node, Chapter]]:
    # Blocks without a "(N)" token take the next running number
    seen: set[int] = set()
    for node in tree.css(".chapter"):
        name_en, name_ar = _chapter_names(node)
        if not name_en and not name_ar:
            continue
        number = chapter_number_of(node)
        if number is None:
            number = len(seen) + 1
        yield node, Chapter(chapter_number=number, name_en=name_en, name_ar=name_ar)
        seen.add(number)


def extract_chapters(tree: HTMLParser) -> list[Chapter]:
    """Chapters in page order; a chapter number seen twice keeps its first occurrence."""
    chapters: list[Chapter] = []
    seen: set[int] = set()
    for _, chapter in _numbered_chapters(tree):
        if chapter.chapter_number in seen:
            LOGGER.debug("Dropping duplicate chapter %d", chapter.chapter_number)
            continue
        seen.add(chapter.chapter_number)
        chapters.append(chapter)

    if not chapters:
        chapters = _legacy_chapters(tree)
    return chapters


def chapter_numbering(tree: HTMLParser) -> dict[int, int]:
    """Map each ``.chapter`` node (by ``mem_id``) to the number :func:`extract_chapters` gives it."""
    return {node.mem_id: chapter.chapter_number for node, chapter in _numbered_chapters(tree)}


def preceding_chapter_number(
    container: Node,
    numbering: Optional[dict[int, int]] = None,
    max_levels: int = 3,
) -> Optional[int]:
    """Number of the nearest ``.chapter`` block before ``container`` in page order."""
    numbering = numbering or {}
    node: Optional[Node] = container
    for _ in range(max_levels):
        if node is None:
            break
        previous = node.prev
        while previous is not None:
            if previous.tag == "div" and "chapter" in class_tokens(previous):
                number = numbering.get(previous.mem_id)
                return number if number is not None else chapter_number_of(previous)
            previous = previous.prev
        node = node.parent
    return None


# ---------------------------------------------------------------------------
# Hadith containers
# ---------------------------------------------------------------------------


def derive_hadith_number(container: Node, collection_id: str) -> Optional[str]:
    """Number from a reference link, reference label, data/id attribute or named anchor."""
    link = container.css_first(f'a[href*="/{collection_id}:"]')
    if link is not None:
        number = _number_from_href(link.attributes.get("href") or "", collection_id)
        if number:
            return number

    reference = container.css_first(".hadith_reference, .hadithReference")
    if reference is not None:
        match = REFERENCE_TEXT_NUMBER_PATTERN.search(text_content(reference).strip())
        if match:
            return match.group(1) + (match.group(2) or "")

    data_number = container.attributes.get("data-hadith-number")
    if data_number:
        return data_number
    id_match = ID_NUMBER_PATTERN.search(container.attributes.get("id") or "")
    if id_match:
        return id_match.group(1)

    # Arabic-only collections (darimi) only carry <a name=N>
    anchor = container.css_first("a[name]")
    if anchor is not None:
        name = anchor.attributes.get("name") or ""
        if ANCHOR_NUMBER_PATTERN.match(name):
            return name
    return None


def segment_arabic(container: Node, text_ar: str) -> SegmentedText:
    segmented = SegmentedText(text=text_ar)

    matn_node = container.css_first(".arabic_text_details")
    if matn_node is not None:
        matn = strip_quotes(clean_text(text_content(matn_node)))
        segmented.matn = matn if len(matn) >= 3 else None

    sanads = container.css(".arabic_sanad")
    if sanads:
        isnad = clean_text(text_content(sanads[0]))
        if len(isnad) > 3:
            segmented.isnad = isnad
    if len(sanads) > 1:
        closing = clean_text(text_content(sanads[1]))
        if len(closing) > 5 and not CLOSING_PUNCTUATION_PATTERN.match(closing):
            segmented.closing = closing

    # Empty sanad spans with the whole narration inside the details span
    if not segmented.isnad and segmented.matn and starts_with_isnad(segmented.matn):
        split = split_isnad_from_matn(segmented.matn)
        if split:
            segmented.isnad, segmented.matn = split.isnad, split.matn

    # Flat pages have no spans at all
    if not segmented.isnad and not segmented.matn:
        split = split_isnad_from_matn(text_ar)
        if split:
            segmented.isnad, segmented.matn = split.isnad, split.matn
        else:
            segmented.isnad = extract_isnad_ar(text_ar)
            segmented.matn = text_ar
    return segmented


@dataclass
class EnglishFields:
    text: str = ""
    isnad: Optional[str] = None
    matn: Optional[str] = None
    narrator: Optional[str] = None


def segment_english(container: Node) -> EnglishFields:
    fields = EnglishFields()
    narrated_node = container.css_first(".hadith_narrated")
    details_node = container.css_first(".text_details")

    if narrated_node is not None or details_node is not None:
        narrated = clean_english_text(text_content(narrated_node))
        details = clean_english_text(text_content(details_node))
        if narrated:
            fields.narrator = extract_narrator_from_narrated(narrated)
            fields.isnad = narrated.rstrip(":").strip()
        if len(details) > 3:
            fields.matn = details

        # The lead-in can be embedded in the details when the narrated node is missing
        if not fields.isnad and fields.matn:
            split = strip_english_narrator_intro(fields.matn)
            if split:
                fields.isnad, fields.matn = split.isnad, split.matn
                if not fields.narrator:
                    fields.narrator = extract_narrator_from_narrated(split.isnad)

        fields.text = " ".join(part for part in (narrated, details) if part).strip()

    if not fields.text:
        fields.text = clean_english_text(text_content(container.css_first(ENGLISH_BODY_SELECTOR)))
        fields.matn = fields.text or None
        fields.isnad = extract_isnad_en(fields.text)
    return fields


def parse_hadith_container(
    container: Node,
    config: CollectionConfig,
    *,
    forced_number: Optional[str] = None,
) -> Optional[Hadith]:
    hadith_number = forced_number or derive_hadith_number(container, config.id)
    if not hadith_number:
        LOGGER.debug("Skipping container without a derivable hadith number")
        return None

    text_ar = clean_text(text_content(container.css_first(".arabic_hadith_full")))
    if not text_ar:
        LOGGER.debug("Hadith %s has no Arabic body; skipping", hadith_number)
        return None

    arabic = segment_arabic(container, text_ar)
    english = segment_english(container)

    source_reference = None
    source_grade = None
    if config.type == "compilation":
        source_reference = extract_source_reference(container)
        source_grade = extract_source_grade(container)
    grades = extract_grades(container)

    return Hadith(
        hadith_number=hadith_number,
        reference=f"{config.reference_name} {hadith_number}",
        in_book_reference=extract_in_book_reference(container),
        text_ar=arabic.text,
        text_en=english.text,
        isnad_ar=arabic.isnad,
        isnad_en=english.isnad,
        matn_ar=arabic.matn,
        matn_en=english.matn,
        closing_ar=arabic.closing,
        narrator=english.narrator or extract_narrator(english.text),
        grade=grades.normalized,
        grade_en=grades.grade_en,
        grade_ar=grades.grade_ar,
        source_reference=source_reference,
        source_grade=source_grade,
    )


def _window_hadith(
    window: str,
    hadith_number: str,
    config: CollectionConfig,
    english_pattern: re.Pattern[str] = ENGLISH_WINDOW_PATTERN,
) -> Optional[Hadith]:
    arabic_match = ARABIC_WINDOW_PATTERN.search(window)
    text_ar = clean_text(arabic_match.group(1)) if arabic_match else ""
    if not text_ar:
        return None
    english_match = english_pattern.search(window)
    text_en = clean_english_text(english_match.group(1)) if english_match else ""
    if not text_en:
        return None
    return Hadith(
        hadith_number=hadith_number,
        reference=f"{config.reference_name} {hadith_number}",
        text_ar=text_ar,
        text_en=text_en,
        isnad_ar=extract_isnad_ar(text_ar),
        isnad_en=extract_isnad_en(text_en),
        matn_ar=text_ar,
        matn_en=text_en,
        narrator=extract_narrator(text_en),
        source_reference=(
            extract_source_reference_from_text(window) if config.type == "compilation" else None
        ),
    )


# ---------------------------------------------------------------------------
# Extraction tiers
# ---------------------------------------------------------------------------


def _is_unit_container(node: Node) -> bool:
    if node.tag in ("-text", "_text", "-comment", "_comment"):
        return False
    class_attr = node.attributes.get("class") or ""
    if not class_attr:
        return False
    return bool(class_tokens(node) & set(CONTAINER_CLASSES)) or "hadith" in class_attr


def _iter_unit_containers(tree: HTMLParser) -> Iterator[Node]:
    root = tree.body or tree.root
    if root is None:
        return
    for node in root.traverse():
        if _is_unit_container(node):
            yield node


def _accepted_ancestor_base(node: Node, accepted: dict[int, str]) -> Optional[str]:
    parent = node.parent
    while parent is not None:
        if parent.mem_id in accepted:
            return accepted[parent.mem_id]
        parent = parent.parent
    return None


def _referenced_bases(node: Node, collection_id: str) -> set[str]:
    bases: set[str] = set()
    for link in node.css(f'a[href*="/{collection_id}:"]'):
        number = _number_from_href(link.attributes.get("href") or "", collection_id)
        if number:
            bases.add(base_hadith_number(number))
    for anchor in node.css("a[name]"):
        name = anchor.attributes.get("name") or ""
        if ANCHOR_NUMBER_PATTERN.match(name):
            bases.add(base_hadith_number(name))
    return bases


def is_wrapper(node: Node, collection_id: str) -> bool:
    """True when ``node`` holds the numbers of more than one hadith."""
    return len(_referenced_bases(node, collection_id)) > 1


class HadithCollector:
    """Ordered hadith list that keeps the first variant of each base number."""

    def __init__(self) -> None:
        self.hadiths: list[Hadith] = []
        self._by_base: dict[str, Hadith] = {}

    def seen(self, number: str) -> bool:
        return base_hadith_number(number) in self._by_base

    def flag_variant(self, number: str) -> None:
        existing = self._by_base.get(base_hadith_number(number))
        if existing is not None:
            existing.has_variants = True

    def add(self, hadith: Hadith) -> bool:
        if self.seen(hadith.hadith_number):
            self.flag_variant(hadith.hadith_number)
            return False
        self._by_base[hadith.base_number] = hadith
        self.hadiths.append(hadith)
        return True


def extract_from_containers(tree: HTMLParser, config: CollectionConfig) -> list[Hadith]:
    collector = HadithCollector()
    numbering = chapter_numbering(tree)
    accepted: dict[int, str] = {}
    for container in _iter_unit_containers(tree):
        # Page-level blocks such as <div class="hadiths"> only group the real units
        if is_wrapper(container, config.id):
            continue
        hadith = parse_hadith_container(container, config)
        if hadith is None:
            continue
        # Inner text blocks of an accepted container also carry "hadith" classes
        if _accepted_ancestor_base(container, accepted) == hadith.base_number:
            continue
        accepted[container.mem_id] = hadith.base_number
        hadith.chapter_number = preceding_chapter_number(container, numbering)
        collector.add(hadith)
    return collector.hadiths


def _hadith_from_link(
    link: Node,
    hadith_number: str,
    config: CollectionConfig,
    body_text: str,
) -> Optional[Hadith]:
    node = link
    for _ in range(MAX_ANCESTOR_DEPTH):
        parent = node.parent
        if parent is None:
            break
        if has_rtl_child(parent) and len(text_content(parent)) > 100:
            hadith = parse_hadith_container(parent, config, forced_number=hadith_number)
            if hadith is not None:
                return hadith
        node = parent

    link_text = text_content(link)
    index = body_text.find(link_text) if link_text else -1
    if index == -1:
        return None
    window = body_text[max(0, index - WINDOW_BEFORE):index + WINDOW_AFTER]
    return _window_hadith(window, hadith_number, config)


def extract_from_reference_links(tree: HTMLParser, config: CollectionConfig) -> list[Hadith]:
    collector = HadithCollector()
    body_text = page_text(tree)
    for link in tree.css(f'a[href*="/{config.id}:"]'):
        number = _number_from_href(link.attributes.get("href") or "", config.id)
        if not number:
            continue
        if collector.seen(number):
            collector.flag_variant(number)
            continue
        hadith = _hadith_from_link(link, number, config, body_text)
        if hadith is not None:
            collector.add(hadith)
    return collector.hadiths


TEXT_SCAN_ENGLISH_PATTERN = re.compile(
    r"((?:On the authority of|Narrated|It was narrated|It is narrated).*?\.)",
    re.IGNORECASE | re.DOTALL,
)


def extract_from_text_references(tree: HTMLParser, config: CollectionConfig) -> list[Hadith]:
    body_text = page_text(tree)
    # Only the collection name is case-insensitive; the variant letter is lowercase
    pattern = re.compile(rf"(?i:{re.escape(config.reference_name)})\s+(\d+)(?:([a-z])(?![a-z]))?")
    collector = HadithCollector()
    for match in pattern.finditer(body_text):
        number = match.group(1) + (match.group(2) or "")
        if collector.seen(number):
            collector.flag_variant(number)
            continue
        window = body_text[max(0, match.start() - WINDOW_BEFORE):match.start() + WINDOW_AFTER]
        hadith = _window_hadith(window, number, config, TEXT_SCAN_ENGLISH_PATTERN)
        if hadith is not None:
            collector.add(hadith)
    return collector.hadiths


Strategy = Callable[[HTMLParser, CollectionConfig], list[Hadith]]

EXTRACTION_STRATEGIES: list[Strategy] = [
    extract_from_containers,
    extract_from_reference_links,
    extract_from_text_references,
]


def extract_hadiths(tree: HTMLParser, config: CollectionConfig) -> list[Hadith]:
    """Run the strategies in order and keep the first non-empty result."""
    for strategy in EXTRACTION_STRATEGIES:
        hadiths = strategy(tree, config)
        if hadiths:
            return hadiths
        LOGGER.debug("%s found no hadith for %s", strategy.__name__, config.id)
    return []


def _attach_urls(hadiths: list[Hadith], collection_id: str) -> list[Hadith]:
    for hadith in hadiths:
        hadith.url_source = unit_url(collection_id, hadith.hadith_number)
    return hadiths


# ---------------------------------------------------------------------------
# Page entry points
# ---------------------------------------------------------------------------


def parse_book_page(html: str, config: CollectionConfig, book: BookKey) -> ParsedBookPage:
    tree = parse_html(html)
    if tree is None:
        return ParsedBookPage(book_name_en=f"Book {book}")

    hadiths = _attach_urls(extract_hadiths(tree, config), config.id)
    if not hadiths:
        LOGGER.warning("No hadith parsed for %s book %s", config.id, book)
    return ParsedBookPage(
        book_name_en=extract_book_name_en(tree) or f"Book {book}",
        book_name_ar=extract_book_name_ar(tree),
        chapters=extract_chapters(tree),
        hadiths=hadiths,
    )


def parse_flat_collection_page(html: str, config: CollectionConfig) -> list[Hadith]:
    tree = parse_html(html)
    if tree is None:
        return []
    hadiths = _attach_urls(extract_hadiths(tree, config), config.id)
    if not hadiths:
        LOGGER.warning("No hadith parsed for flat collection %s", config.id)
    return hadiths


__all__ = [
    "EXTRACTION_STRATEGIES",
    "HadithCollector",
    "derive_hadith_number",
    "extract_chapters",
    "extract_from_containers",
    "extract_from_reference_links",
    "extract_from_text_references",
    "extract_hadiths",
    "parse_book_page",
    "parse_flat_collection_page",
    "parse_hadith_container",
]
