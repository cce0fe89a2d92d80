"""Collection registry and runtime settings for the sunnah.com scraper."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional, Union

BASE_URL = "https://sunnah.com"
RATE_LIMIT_SECONDS = 1.5
MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 5.0
REQUEST_TIMEOUT = 20.0
USER_AGENT = "HadithScraper/1.0 (Educational hadith app)"
DEFAULT_DATA_DIR = Path("data")

CollectionType = Literal["primary", "compilation"]
BookKey = Union[int, str]


class UnknownCollectionError(KeyError):
    """Raised when a collection id is not part of the registry."""


@dataclass(frozen=True)
class CollectionConfig:
    id: str
    name_en: str
    name_ar: str
    author_en: str
    author_ar: str
    type: CollectionType
    slug: str
    books: Optional[tuple[BookKey, ...]]
    # Name used in on-page references such as "Sahih al-Bukhari 1"
    display_name: Optional[str] = None

    @property
    def is_flat(self) -> bool:
        return self.books is None

    @property
    def reference_name(self) -> str:
        return self.display_name or self.name_en

    def book_url(self, book: BookKey) -> str:
        return f"{BASE_URL}/{self.slug}/{book}"

    @property
    def url(self) -> str:
        return f"{BASE_URL}/{self.slug}"


def _numbered(start: int, end: int) -> tuple[int, ...]:
    return tuple(range(start, end + 1))


COLLECTIONS: dict[str, CollectionConfig] = {
    config.id: config
    for config in [
        CollectionConfig(
            id="bukhari",
            name_en="Sahih al-Bukhari",
            name_ar="صحيح البخاري",
            author_en="Imam Bukhari",
            author_ar="الإمام البخاري",
            type="primary",
            slug="bukhari",
            books=_numbered(1, 97),
        ),
        CollectionConfig(
            id="muslim",
            name_en="Sahih Muslim",
            name_ar="صحيح مسلم",
            author_en="Imam Muslim",
            author_ar="الإمام مسلم",
            type="primary",
            slug="muslim",
            books=_numbered(1, 56),
        ),
        CollectionConfig(
            id="malik",
            name_en="Muwatta Malik",
            name_ar="موطأ الإمام مالك",
            author_en="Imam Malik",
            author_ar="الإمام مالك",
            type="primary",
            slug="malik",
            books=_numbered(1, 61),
        ),
        CollectionConfig(
            id="nawawi40",
            name_en="40 Hadith an-Nawawi",
            name_ar="الأربعون النووية",
            author_en="Imam an-Nawawi",
            author_ar="الإمام النووي",
            type="compilation",
            slug="nawawi40",
            books=None,
        ),
        CollectionConfig(
            id="riyadussalihin",
            name_en="Riyad as-Salihin",
            name_ar="رياض الصالحين",
            author_en="Imam an-Nawawi",
            author_ar="الإمام النووي",
            type="compilation",
            slug="riyadussalihin",
            books=("introduction",) + _numbered(1, 19),
        ),
        CollectionConfig(
            id="nasai",
            name_en="Sunan an-Nasa'i",
            name_ar="سنن النسائي",
            author_en="Imam an-Nasa'i",
            author_ar="الإمام النسائي",
            type="primary",
            slug="nasai",
            books=_numbered(1, 35) + ("35b",) + _numbered(36, 51),
        ),
        CollectionConfig(
            id="abudawud",
            name_en="Sunan Abi Dawud",
            name_ar="سنن أبي داود",
            author_en="Imam Abu Dawud",
            author_ar="الإمام أبو داود",
            type="primary",
            slug="abudawud",
            books=_numbered(1, 43),
        ),
        CollectionConfig(
            id="tirmidhi",
            name_en="Jami` at-Tirmidhi",
            name_ar="جامع الترمذي",
            author_en="Imam at-Tirmidhi",
            author_ar="الإمام الترمذي",
            type="primary",
            slug="tirmidhi",
            books=_numbered(1, 49),
        ),
        CollectionConfig(
            id="ibnmajah",
            name_en="Sunan Ibn Majah",
            name_ar="سنن ابن ماجه",
            author_en="Imam Ibn Majah",
            author_ar="الإمام ابن ماجه",
            type="primary",
            slug="ibnmajah",
            books=("introduction",) + _numbered(1, 37),
        ),
        CollectionConfig(
            id="ahmad",
            name_en="Musnad Ahmad",
            name_ar="مسند أحمد",
            author_en="Imam Ahmad ibn Hanbal",
            author_ar="الإمام أحمد بن حنبل",
            type="primary",
            slug="ahmad",
            books=_numbered(1, 7) + (31,),
            display_name="Musnad Ahmad ibn Hanbal",
        ),
        CollectionConfig(
            id="darimi",
            name_en="Sunan ad-Darimi",
            name_ar="سنن الدارمي",
            author_en="Imam ad-Darimi",
            author_ar="الإمام الدارمي",
            type="primary",
            slug="darimi",
            books=("introduction",) + _numbered(1, 23),
        ),
        CollectionConfig(
            id="adab",
            name_en="Al-Adab Al-Mufrad",
            name_ar="الأدب المفرد",
            author_en="Imam Bukhari",
            author_ar="الإمام البخاري",
            type="primary",
            slug="adab",
            books=_numbered(1, 57),
        ),
        CollectionConfig(
            id="bulugh",
            name_en="Bulugh al-Maram",
            name_ar="بلوغ المرام",
            author_en="Ibn Hajar al-Asqalani",
            author_ar="ابن حجر العسقلاني",
            type="compilation",
            slug="bulugh",
            books=_numbered(1, 16),
        ),
        CollectionConfig(
            id="shamail",
            name_en="Ash-Shama'il Al-Muhammadiyya",
            name_ar="الشمائل المحمدية",
            author_en="Imam at-Tirmidhi",
            author_ar="الإمام الترمذي",
            type="compilation",
            slug="shamail",
            books=_numbered(1, 8) + ("8b",) + _numbered(9, 56),
        ),
        CollectionConfig(
            id="mishkat",
            name_en="Mishkat al-Masabih",
            name_ar="مشكاة المصابيح",
            author_en="Khatib al-Tabrizi",
            author_ar="الخطيب التبريزي",
            type="compilation",
            slug="mishkat",
            books=("introduction",) + _numbered(1, 24) + _numbered(27, 30),
        ),
        CollectionConfig(
            id="qudsi40",
            name_en="40 Hadith Qudsi",
            name_ar="الأحاديث القدسية",
            author_en="Various",
            author_ar="متنوع",
            type="compilation",
            slug="qudsi40",
            books=None,
        ),
        CollectionConfig(
            id="shahwaliullah40",
            name_en="Shah Waliullah's 40 Hadith",
            name_ar="الأربعون لشاه ولي الله",
            author_en="Shah Waliullah Dehlawi",
            author_ar="شاه ولي الله الدهلوي",
            type="compilation",
            slug="shahwaliullah40",
            books=None,
        ),
    ]
}


def get_collection(collection_id: str) -> CollectionConfig:
    try:
        return COLLECTIONS[collection_id]
    except KeyError as exc:
        raise UnknownCollectionError(collection_id) from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name} value: {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name} value: {raw!r}") from exc


@dataclass
class ScraperSettings:
    """Runtime knobs for a scrape run; paths are derived from ``data_dir``."""

    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)
    rate_limit_seconds: float = RATE_LIMIT_SECONDS
    max_retries: int = MAX_RETRIES
    retry_delay_seconds: float = RETRY_DELAY_SECONDS
    request_timeout: float = REQUEST_TIMEOUT
    user_agent: str = USER_AGENT
    save_html: bool = False

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")

    @classmethod
    def from_env(cls, **overrides: object) -> "ScraperSettings":
        data_dir = os.getenv("HADITH_SCRAPER_DATA_DIR")
        values: dict[str, object] = {
            "data_dir": Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
            "rate_limit_seconds": _env_float("HADITH_SCRAPER_RATE_LIMIT", RATE_LIMIT_SECONDS),
            "max_retries": _env_int("HADITH_SCRAPER_MAX_RETRIES", MAX_RETRIES),
            "retry_delay_seconds": _env_float("HADITH_SCRAPER_RETRY_DELAY", RETRY_DELAY_SECONDS),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)  # type: ignore[arg-type]

    @property
    def state_path(self) -> Path:
        return self.data_dir / "scraper-state.json"

    @property
    def error_log_path(self) -> Path:
        return self.data_dir / "errors.log"

    @property
    def books_dir(self) -> Path:
        return self.data_dir / "books"

    @property
    def collections_dir(self) -> Path:
        return self.data_dir / "collections"

    @property
    def html_dir(self) -> Path:
        return self.data_dir / "html"


__all__ = [
    "BASE_URL",
    "COLLECTIONS",
    "BookKey",
    "CollectionConfig",
    "CollectionType",
    "ScraperSettings",
    "UnknownCollectionError",
    "get_collection",
]
