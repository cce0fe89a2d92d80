from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import requests

from hadith_scraper import storage
from hadith_scraper.config import CollectionConfig, ScraperSettings
from hadith_scraper.models import Book
from hadith_scraper.scraper import Scraper
from hadith_scraper.state import ProgressTracker

ARABIC = "حَدَّثَنَا مُحَمَّدُ بْنُ بَشَّارٍ، عَنْ أَبِي هُرَيْرَةَ، أَنَّ رَسُولَ اللَّهِ صلى الله عليه وسلم قَالَ صَلُّوا"

MINI = CollectionConfig(
    id="mini",
    name_en="Mini Sunan",
    name_ar="سنن صغيرة",
    author_en="Tester",
    author_ar="مختبر",
    type="primary",
    slug="mini",
    books=(1, 2, "3b", 4),
)
FLAT = CollectionConfig(
    id="miniflat",
    name_en="Mini Forty",
    name_ar="أربعون صغيرة",
    author_en="Tester",
    author_ar="مختبر",
    type="compilation",
    slug="miniflat",
    books=None,
)
TEST_COLLECTIONS = {MINI.id: MINI, FLAT.id: FLAT}


def page(collection: str, numbers: list[str]) -> str:
    containers = "".join(
        f"""
        <div class="actualHadithContainer">
          <div class="hadith_narrated">Narrated Anas:</div>
          <div class="text_details">The Prophet said: Pray as you have seen me praying ({number}).</div>
          <div class="arabic_hadith_full">{ARABIC}</div>
          <a href="/{collection}:{number}">{number}</a>
        </div>
        """
        for number in numbers
    )
    return f"<html><body><div class='book_page_english_name'>Book</div>{containers}</body></html>"


PAGES = {
    "https://sunnah.com/mini/1": page("mini", ["1", "2"]),
    "https://sunnah.com/mini/2": page("mini", ["3"]),
    "https://sunnah.com/mini/3b": page("mini", ["4", "4a"]),
    "https://sunnah.com/mini/4": page("mini", ["5", "6"]),
    "https://sunnah.com/miniflat": page("miniflat", ["1", "2", "3"]),
}


class Interrupted(Exception):
    pass


class FakeClient:
    def __init__(self, failures: dict[str, BaseException] | None = None, stop_after: int | None = None) -> None:
        self.calls: list[str] = []
        self.failures = failures or {}
        self.stop_after = stop_after

    def fetch_text(self, url: str) -> str:
        if self.stop_after is not None and len(self.calls) >= self.stop_after:
            raise Interrupted(url)
        self.calls.append(url)
        if url in self.failures:
            raise self.failures[url]
        return PAGES[url]


class ScraperTestCase(unittest.TestCase):
    def setUp(self) -> None:
        patcher = patch.dict("hadith_scraper.config.COLLECTIONS", TEST_COLLECTIONS, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.settings = self.settings_for(Path(self._tmp.name) / "data")

    def settings_for(self, data_dir: Path) -> ScraperSettings:
        return ScraperSettings(data_dir=data_dir, rate_limit_seconds=0, max_retries=3, retry_delay_seconds=0)

    def tracker(self, settings: ScraperSettings | None = None) -> ProgressTracker:
        settings = settings or self.settings
        return ProgressTracker.load(settings.state_path, settings.error_log_path)


class BookCollectionTests(ScraperTestCase):
    def test_full_run(self) -> None:
        client = FakeClient()
        tracker = self.tracker()
        result = Scraper(self.settings, client).scrape_collection("mini", tracker)

        self.assertEqual(len(client.calls), 4)
        self.assertEqual(result.stats.total_books, 4)
        self.assertEqual(result.stats.total_hadiths, 6)
        self.assertIsNone(result.hadiths)
        self.assertEqual([book.book_number for book in result.books], [1, 2, 0, 4])
        self.assertEqual(result.books[2].book_key, "3b")
        self.assertTrue(result.books[2].hadiths[0].has_variants)
        self.assertTrue(tracker.is_collection_completed("mini"))
        self.assertEqual(tracker.state.completed_books, [])
        self.assertTrue((self.settings.collections_dir / "mini.json").exists())
        self.assertTrue((self.settings.books_dir / "mini" / "3b.json").exists())

    def test_completed_collection_is_skipped(self) -> None:
        tracker = self.tracker()
        tracker.mark_collection_completed("mini")
        client = FakeClient()
        self.assertIsNone(Scraper(self.settings, client).scrape_collection("mini", tracker))
        self.assertEqual(client.calls, [])

    def test_resume_after_interruption(self) -> None:
        reference_settings = self.settings_for(Path(self._tmp.name) / "reference")
        reference = Scraper(reference_settings, FakeClient()).scrape_collection(
            "mini", self.tracker(reference_settings)
        )

        first_client = FakeClient(stop_after=2)
        with self.assertRaises(Interrupted):
            Scraper(self.settings, first_client).scrape_collection("mini", self.tracker())
        self.assertEqual(self.tracker().state.completed_books, [1, 2])

        second_client = FakeClient()
        resumed = Scraper(self.settings, second_client).scrape_collection("mini", self.tracker())

        self.assertEqual(second_client.calls, ["https://sunnah.com/mini/3b", "https://sunnah.com/mini/4"])
        self.assertEqual(
            [book.model_dump_json() for book in resumed.books],
            [book.model_dump_json() for book in reference.books],
        )
        self.assertEqual(resumed.stats, reference.stats)

    def test_cached_book_is_not_fetched_again(self) -> None:
        storage.write_book(Book(book_number=1, name_en="Cached"), self.settings.books_dir, "mini", 1)
        client = FakeClient()
        result = Scraper(self.settings, client).scrape_collection("mini", self.tracker())
        self.assertNotIn("https://sunnah.com/mini/1", client.calls)
        self.assertEqual(result.books[0].name_en, "Cached")

    def test_failed_fetch_is_isolated(self) -> None:
        url = "https://sunnah.com/mini/2"
        client = FakeClient(failures={url: requests.ConnectionError("connection reset")})
        tracker = self.tracker()
        with self.assertLogs("hadith_scraper", level="WARNING"):
            result = Scraper(self.settings, client).scrape_collection("mini", tracker)

        self.assertEqual(client.calls.count(url), 3)
        self.assertEqual([book.book_number for book in result.books], [1, 0, 4])
        self.assertEqual(len(tracker.state.errors), 1)
        error = tracker.state.errors[0]
        self.assertEqual((error.collection, error.book, error.error_type, error.url), ("mini", 2, "fetch", url))
        self.assertEqual(len(self.settings.error_log_path.read_text(encoding="utf-8").splitlines()), 1)
        self.assertTrue(tracker.is_collection_completed("mini"))

    def test_parse_failure_is_recorded(self) -> None:
        client = FakeClient()
        tracker = self.tracker()
        with patch("hadith_scraper.scraper.parse_book_page", side_effect=ValueError("bad markup")), self.assertLogs(
            "hadith_scraper", level="ERROR"
        ):
            result = Scraper(self.settings, client).scrape_collection("mini", tracker)
        self.assertEqual(result.books, [])
        self.assertEqual(len(client.calls), 4)
        self.assertEqual({error.error_type for error in tracker.state.errors}, {"parse"})
        self.assertEqual(len(tracker.state.errors), 4)

    def test_html_snapshots(self) -> None:
        self.settings.save_html = True
        Scraper(self.settings, FakeClient()).scrape_collection("mini", self.tracker())
        self.assertTrue((self.settings.html_dir / "mini" / "3b.html").exists())


class FlatCollectionTests(ScraperTestCase):
    def test_flat_collection(self) -> None:
        tracker = self.tracker()
        result = Scraper(self.settings, FakeClient()).scrape_collection("miniflat", tracker)
        self.assertIsNone(result.books)
        self.assertEqual([hadith.hadith_number for hadith in result.hadiths], ["1", "2", "3"])
        self.assertEqual(result.stats.total_hadiths, 3)
        self.assertEqual(result.stats.total_books, 0)
        self.assertTrue((self.settings.books_dir / "miniflat" / "index.json").exists())

    def test_failed_flat_collection_stays_pending(self) -> None:
        failing = FakeClient(failures={"https://sunnah.com/miniflat": requests.Timeout("timed out")})
        tracker = self.tracker()
        with self.assertLogs("hadith_scraper", level="WARNING"):
            self.assertIsNone(Scraper(self.settings, failing).scrape_collection("miniflat", tracker))
        self.assertFalse(tracker.is_collection_completed("miniflat"))

        result = Scraper(self.settings, FakeClient()).scrape_collection("miniflat", tracker)
        self.assertEqual(result.stats.total_hadiths, 3)
        self.assertTrue(tracker.is_collection_completed("miniflat"))


class RunTests(ScraperTestCase):
    def test_scrape_all_reports_errors(self) -> None:
        client = FakeClient(failures={"https://sunnah.com/mini/4": requests.ConnectionError("down")})
        tracker = self.tracker()
        with self.assertLogs("hadith_scraper.scraper", level="INFO") as logs:
            results = Scraper(self.settings, client).scrape_all(tracker)
        self.assertEqual([result.collection.id for result in results], ["mini", "miniflat"])
        self.assertTrue(any("1 errors recorded" in line for line in logs.output))

    def test_unknown_collection_fails_before_fetching(self) -> None:
        client = FakeClient()
        with self.assertRaises(KeyError):
            Scraper(self.settings, client).scrape_all(self.tracker(), ["mini", "missing"])
        self.assertEqual(client.calls, [])

    def test_rescrape_ignores_state_and_cache(self) -> None:
        tracker = self.tracker()
        tracker.mark_collection_completed("mini")
        storage.write_book(Book(book_number=1, name_en="Stale"), self.settings.books_dir, "mini", 1)
        client = FakeClient()

        result = Scraper(self.settings, client).rescrape_collection("mini")

        self.assertEqual(len(client.calls), 4)
        self.assertEqual(result.books[0].name_en, "Book")
        self.assertEqual(storage.read_book(self.settings.books_dir, "mini", 1).name_en, "Book")
        self.assertEqual(self.tracker().state.completed_collections, ["mini"])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
