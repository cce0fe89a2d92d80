"""Data models for the sunnah.com scraping pipeline."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

NormalizedGrade = Literal["maudu", "daif", "hasan sahih", "hasan", "sahih"]
ErrorType = Literal["fetch", "parse", "validation"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Chapter(BaseModel):
    """A chapter heading inside a book page."""

    chapter_number: int
    name_en: Optional[str] = None
    name_ar: Optional[str] = None


class Hadith(BaseModel):
    """One numbered text unit with its bilingual text and derived metadata.

    ``isnad_*``/``matn_*``/``closing_ar`` hold the chain, content and closing
    segments when they could be separated; ``text_*`` always holds the full
    display text (empty string for a language the source does not carry).
    """

    hadith_number: str
    reference: str
    in_book_reference: Optional[str] = None
    chapter_number: Optional[int] = None
    text_ar: str
    text_en: str = ""
    isnad_ar: Optional[str] = None
    isnad_en: Optional[str] = None
    matn_ar: Optional[str] = None
    matn_en: Optional[str] = None
    closing_ar: Optional[str] = None
    narrator: Optional[str] = None
    has_variants: bool = False
    grade: Optional[NormalizedGrade] = None
    grade_en: Optional[str] = None
    grade_ar: Optional[str] = None
    source_reference: Optional[str] = None
    source_grade: Optional[NormalizedGrade] = None
    url_source: Optional[str] = None

    @property
    def base_number(self) -> str:
        return base_hadith_number(self.hadith_number)


def base_hadith_number(number: str) -> str:
    """Strip a single trailing variant letter: ``"8a"`` -> ``"8"``."""
    if len(number) > 1 and number[-1].isalpha() and number[-1].islower():
        return number[:-1]
    return number


class Book(BaseModel):
    book_number: int
    book_key: Optional[str] = None
    name_en: str
    name_ar: Optional[str] = None
    chapters: list[Chapter] = Field(default_factory=list)
    hadiths: list[Hadith] = Field(default_factory=list)


class FlatPage(BaseModel):
    """Cached result of a flat collection's single page."""

    hadiths: list[Hadith] = Field(default_factory=list)


class ParsedBookPage(BaseModel):
    book_name_en: str
    book_name_ar: Optional[str] = None
    chapters: list[Chapter] = Field(default_factory=list)
    hadiths: list[Hadith] = Field(default_factory=list)


class CollectionInfo(BaseModel):
    id: str
    name_en: str
    name_ar: str
    author_en: str
    author_ar: str
    type: Literal["primary", "compilation"]
    scraped_at: datetime = Field(default_factory=utcnow)


class CollectionStats(BaseModel):
    total_books: int = 0
    total_chapters: int = 0
    total_hadiths: int = 0


class ScrapedCollection(BaseModel):
    """Aggregate handed to the format emitters, one per collection."""

    collection: CollectionInfo
    books: Optional[list[Book]] = None
    hadiths: Optional[list[Hadith]] = None
    stats: CollectionStats = Field(default_factory=CollectionStats)

    @model_validator(mode="after")
    def ensure_single_tier(self) -> "ScrapedCollection":
        if self.books is not None and self.hadiths is not None:
            raise ValueError("A collection carries either books or flat hadiths, not both")
        return self


class ScraperError(BaseModel):
    timestamp: datetime = Field(default_factory=utcnow)
    collection: str
    book: Optional[Union[int, str]] = None
    hadith_number: Optional[str] = None
    error_type: ErrorType
    message: str
    url: str

    def log_line(self) -> str:
        book = "?" if self.book is None else self.book
        return (
            f"[{self.timestamp.isoformat()}] {self.error_type.upper()} | "
            f"{self.collection}/{book} | {self.message} | {self.url}"
        )


class ScraperState(BaseModel):
    """Durable progress record, rewritten after every mutation."""

    current_collection: Optional[str] = None
    completed_collections: list[str] = Field(default_factory=list)
    completed_books: list[Union[int, str]] = Field(default_factory=list)
    last_update: datetime = Field(default_factory=utcnow)
    errors: list[ScraperError] = Field(default_factory=list)


__all__ = [
    "Book",
    "Chapter",
    "CollectionInfo",
    "CollectionStats",
    "FlatPage",
    "Hadith",
    "NormalizedGrade",
    "ParsedBookPage",
    "ScrapedCollection",
    "ScraperError",
    "ScraperState",
    "base_hadith_number",
]
