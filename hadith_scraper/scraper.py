"""Scrape orchestration: fetch, parse and persist one unit of work at a time.

A unit of work is a single book page, or the single page of a flat
collection.  Each parsed unit is written to ``books/<collection>/`` before
it is marked done in the state file, so a run can stop at any point and
resume without fetching a completed unit again.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol

import requests
from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_fixed

from . import storage
from .config import COLLECTIONS, BookKey, CollectionConfig, ScraperSettings, get_collection
from .http import HttpClient, HttpError
from .models import Book, CollectionInfo, CollectionStats, FlatPage, Hadith, ScrapedCollection
from .parser import parse_book_page, parse_flat_collection_page
from .state import ProgressTracker

LOGGER = logging.getLogger(__name__)

RETRYABLE_ERRORS = (requests.RequestException, HttpError)


class PageFetcher(Protocol):
    def fetch_text(self, url: str) -> str: ...


def collection_info(config: CollectionConfig) -> CollectionInfo:
    return CollectionInfo(
        id=config.id,
        name_en=config.name_en,
        name_ar=config.name_ar,
        author_en=config.author_en,
        author_ar=config.author_ar,
        type=config.type,
    )


def build_book(key: BookKey, html: str, config: CollectionConfig) -> Book:
    parsed = parse_book_page(html, config, key)
    return Book(
        book_number=key if isinstance(key, int) else 0,
        book_key=key if isinstance(key, str) else None,
        name_en=parsed.book_name_en,
        name_ar=parsed.book_name_ar,
        chapters=parsed.chapters,
        hadiths=parsed.hadiths,
    )


def book_collection(config: CollectionConfig, books: list[Book]) -> ScrapedCollection:
    return ScrapedCollection(
        collection=collection_info(config),
        books=books,
        stats=CollectionStats(
            total_books=len(books),
            total_chapters=sum(len(book.chapters) for book in books),
            total_hadiths=sum(len(book.hadiths) for book in books),
        ),
    )


def flat_collection(config: CollectionConfig, hadiths: list[Hadith]) -> ScrapedCollection:
    return ScrapedCollection(
        collection=collection_info(config),
        hadiths=hadiths,
        stats=CollectionStats(total_hadiths=len(hadiths)),
    )


class Scraper:
    """Drives the per-unit pipeline for one or more collections."""

    def __init__(self, settings: ScraperSettings, client: PageFetcher) -> None:
        self.settings = settings
        self.client = client

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.settings.max_retries),
            wait=wait_fixed(self.settings.retry_delay_seconds),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=before_sleep_log(LOGGER, logging.WARNING),
            reraise=True,
        )

    def fetch(self, url: str) -> str:
        return self._retrying()(self.client.fetch_text, url)

    def _snapshot(self, html: str, collection_id: str, key: BookKey) -> None:
        if self.settings.save_html:
            storage.write_html_snapshot(html, self.settings.html_dir / collection_id / f"{key}.html")

    def _fetch_unit(
        self,
        url: str,
        config: CollectionConfig,
        key: Optional[BookKey],
        tracker: Optional[ProgressTracker],
    ) -> Optional[str]:
        try:
            html = self.fetch(url)
        except RETRYABLE_ERRORS as exc:
            message = str(exc) or exc.__class__.__name__
            if tracker is not None:
                tracker.record_error(config.id, "fetch", message, url, book=key)
            else:
                LOGGER.error("Fetch failed for %s: %s", url, message)
            return None
        self._snapshot(html, config.id, storage.FLAT_PAGE_KEY if key is None else key)
        return html

    def _parse_failed(
        self,
        exc: Exception,
        url: str,
        config: CollectionConfig,
        key: Optional[BookKey],
        tracker: Optional[ProgressTracker],
    ) -> None:
        message = f"{exc.__class__.__name__}: {exc}"
        if tracker is not None:
            tracker.record_error(config.id, "parse", message, url, book=key)
        else:
            LOGGER.error("Parse failed for %s: %s", url, message)

    def scrape_book(
        self,
        config: CollectionConfig,
        key: BookKey,
        tracker: Optional[ProgressTracker] = None,
        *,
        use_cache: bool = True,
    ) -> Optional[Book]:
        books_dir = self.settings.books_dir
        if use_cache:
            cached = storage.read_book(books_dir, config.id, key)
            if cached is not None:
                LOGGER.info("Book %s of %s loaded from cache", key, config.id)
                return cached

        url = config.book_url(key)
        html = self._fetch_unit(url, config, key, tracker)
        if html is None:
            return None
        try:
            book = build_book(key, html, config)
        except Exception as exc:  # noqa: BLE001
            self._parse_failed(exc, url, config, key, tracker)
            return None

        storage.write_book(book, books_dir, config.id, key)
        LOGGER.info(
            "Scraped book %s: %d hadiths, %d chapters",
            key,
            len(book.hadiths),
            len(book.chapters),
        )
        return book

    def scrape_flat_page(
        self,
        config: CollectionConfig,
        tracker: Optional[ProgressTracker] = None,
        *,
        use_cache: bool = True,
    ) -> Optional[list[Hadith]]:
        books_dir = self.settings.books_dir
        if use_cache:
            cached = storage.read_flat_page(books_dir, config.id)
            if cached is not None:
                LOGGER.info("Flat collection %s loaded from cache", config.id)
                return cached.hadiths

        url = config.url
        html = self._fetch_unit(url, config, None, tracker)
        if html is None:
            return None
        try:
            hadiths = parse_flat_collection_page(html, config)
        except Exception as exc:  # noqa: BLE001
            self._parse_failed(exc, url, config, None, tracker)
            return None

        storage.write_flat_page(FlatPage(hadiths=hadiths), books_dir, config.id)
        LOGGER.info("Scraped flat collection %s: %d hadiths", config.id, len(hadiths))
        return hadiths

    def scrape_collection(self, collection_id: str, tracker: ProgressTracker) -> Optional[ScrapedCollection]:
        """Scrape one collection, resuming from ``tracker``; ``None`` if nothing was produced."""
        config = get_collection(collection_id)
        if tracker.is_collection_completed(config.id):
            LOGGER.info("Collection %s already completed, skipping", config.id)
            return None

        LOGGER.info("Scraping %s (%s)", config.name_en, config.id)
        tracker.start_collection(config.id)

        if config.is_flat:
            hadiths = self.scrape_flat_page(config, tracker)
            if hadiths is None:
                LOGGER.warning("Flat collection %s left pending", config.id)
                return None
            result = flat_collection(config, hadiths)
        else:
            books: list[Book] = []
            keys = config.books or ()
            for index, key in enumerate(keys, start=1):
                if tracker.is_book_completed(key):
                    cached = storage.read_book(self.settings.books_dir, config.id, key)
                    if cached is not None:
                        LOGGER.info("Skipping book %s (already completed)", key)
                        books.append(cached)
                        continue
                    LOGGER.warning("Book %s marked completed but its cache is missing", key)
                LOGGER.info("%s - Book %s (%d/%d)", config.name_en, key, index, len(keys))
                book = self.scrape_book(config, key, tracker)
                if book is None:
                    continue
                books.append(book)
                tracker.mark_book_completed(key)
            result = book_collection(config, books)

        path = storage.write_collection(result, self.settings.collections_dir)
        tracker.mark_collection_completed(config.id)
        LOGGER.info(
            "Completed %s: %d books, %d chapters, %d hadiths -> %s",
            config.id,
            result.stats.total_books,
            result.stats.total_chapters,
            result.stats.total_hadiths,
            path,
        )
        return result

    def scrape_all(
        self,
        tracker: ProgressTracker,
        collection_ids: Optional[Iterable[str]] = None,
    ) -> list[ScrapedCollection]:
        ids = list(collection_ids) if collection_ids else list(COLLECTIONS)
        # Unknown ids fail before any page is fetched
        configs = [get_collection(collection_id) for collection_id in ids]
        errors_before = len(tracker.state.errors)

        results: list[ScrapedCollection] = []
        for config in configs:
            result = self.scrape_collection(config.id, tracker)
            if result is not None:
                results.append(result)

        new_errors = len(tracker.state.errors) - errors_before
        LOGGER.info("Scraping finished: %d collections written", len(results))
        if new_errors:
            LOGGER.warning(
                "%d errors recorded during this run, see %s",
                new_errors,
                tracker.error_log_path,
            )
        else:
            LOGGER.info("No errors recorded during this run")
        return results

    def rescrape_collection(self, collection_id: str) -> ScrapedCollection:
        """Fetch every unit of a collection again, without reading or writing run state."""
        config = get_collection(collection_id)
        LOGGER.info("Re-scraping %s (%s)", config.name_en, config.id)
        if config.is_flat:
            hadiths = self.scrape_flat_page(config, use_cache=False)
            result = flat_collection(config, hadiths or [])
        else:
            books: list[Book] = []
            keys = config.books or ()
            for index, key in enumerate(keys, start=1):
                LOGGER.info("%s - Book %s (%d/%d)", config.name_en, key, index, len(keys))
                book = self.scrape_book(config, key, use_cache=False)
                if book is not None:
                    books.append(book)
            result = book_collection(config, books)
        path = storage.write_collection(result, self.settings.collections_dir)
        LOGGER.info("Wrote %d hadiths for %s to %s", result.stats.total_hadiths, config.id, path)
        return result


def open_tracker(settings: ScraperSettings) -> ProgressTracker:
    return ProgressTracker.load(settings.state_path, settings.error_log_path)


def run_scrape(settings: ScraperSettings, collection_ids: Optional[Iterable[str]] = None) -> list[ScrapedCollection]:
    tracker = open_tracker(settings)
    with HttpClient.from_settings(settings) as client:
        return Scraper(settings, client).scrape_all(tracker, collection_ids)


def run_rescrape(settings: ScraperSettings, collection_id: str) -> ScrapedCollection:
    get_collection(collection_id)
    with HttpClient.from_settings(settings) as client:
        return Scraper(settings, client).rescrape_collection(collection_id)


__all__ = [
    "PageFetcher",
    "Scraper",
    "build_book",
    "open_tracker",
    "run_rescrape",
    "run_scrape",
]
