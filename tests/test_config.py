from __future__ import annotations

import os
import unittest
from pathlib import Path
from unittest.mock import patch

from hadith_scraper.config import COLLECTIONS, ScraperSettings, UnknownCollectionError, get_collection


class CollectionRegistryTests(unittest.TestCase):
    def test_registry_contents(self) -> None:
        self.assertEqual(len(COLLECTIONS), 17)
        self.assertEqual(list(COLLECTIONS)[:3], ["bukhari", "muslim", "malik"])

    def test_string_keys_and_gaps(self) -> None:
        self.assertIn("35b", get_collection("nasai").books)
        self.assertIn("8b", get_collection("shamail").books)
        mishkat = get_collection("mishkat").books
        self.assertEqual(mishkat[0], "introduction")
        self.assertNotIn(25, mishkat)
        self.assertNotIn(26, mishkat)

    def test_flat_collections(self) -> None:
        flat = sorted(config.id for config in COLLECTIONS.values() if config.is_flat)
        self.assertEqual(flat, ["nawawi40", "qudsi40", "shahwaliullah40"])

    def test_urls_and_reference_names(self) -> None:
        ahmad = get_collection("ahmad")
        self.assertEqual(ahmad.reference_name, "Musnad Ahmad ibn Hanbal")
        self.assertEqual(ahmad.book_url(31), "https://sunnah.com/ahmad/31")
        self.assertEqual(get_collection("nawawi40").url, "https://sunnah.com/nawawi40")

    def test_unknown_collection(self) -> None:
        with self.assertRaises(UnknownCollectionError):
            get_collection("tabari")


class ScraperSettingsTests(unittest.TestCase):
    def test_defaults_and_paths(self) -> None:
        settings = ScraperSettings(data_dir=Path("out"))
        self.assertEqual(settings.state_path, Path("out/scraper-state.json"))
        self.assertEqual(settings.error_log_path, Path("out/errors.log"))
        self.assertEqual(settings.books_dir, Path("out/books"))
        self.assertEqual(settings.rate_limit_seconds, 1.5)
        self.assertEqual(settings.max_retries, 3)

    def test_from_env(self) -> None:
        env = {
            "HADITH_SCRAPER_DATA_DIR": "/tmp/hadith",
            "HADITH_SCRAPER_RATE_LIMIT": "0.5",
            "HADITH_SCRAPER_MAX_RETRIES": "5",
        }
        with patch.dict(os.environ, env, clear=False):
            settings = ScraperSettings.from_env(save_html=True)
        self.assertEqual(settings.data_dir, Path("/tmp/hadith"))
        self.assertEqual(settings.rate_limit_seconds, 0.5)
        self.assertEqual(settings.max_retries, 5)
        self.assertTrue(settings.save_html)

    def test_overrides_win_over_env(self) -> None:
        with patch.dict(os.environ, {"HADITH_SCRAPER_DATA_DIR": "/tmp/env"}, clear=False):
            settings = ScraperSettings.from_env(data_dir=Path("/tmp/cli"), save_html=None)
        self.assertEqual(settings.data_dir, Path("/tmp/cli"))
        self.assertFalse(settings.save_html)

    def test_invalid_env_value(self) -> None:
        with patch.dict(os.environ, {"HADITH_SCRAPER_MAX_RETRIES": "many"}, clear=False):
            with self.assertRaises(ValueError) as ctx:
                ScraperSettings.from_env()
        self.assertIn("HADITH_SCRAPER_MAX_RETRIES", str(ctx.exception))

    def test_retries_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            ScraperSettings(max_retries=0)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
