"""Scraper that turns sunnah.com collection pages into structured hadith records."""

from .config import COLLECTIONS, CollectionConfig, ScraperSettings, get_collection
from .models import Book, Chapter, Hadith, ScrapedCollection
from .parser import parse_book_page, parse_flat_collection_page
from .scraper import Scraper
from .state import ProgressTracker

__all__ = [
    "COLLECTIONS",
    "Book",
    "Chapter",
    "CollectionConfig",
    "Hadith",
    "ProgressTracker",
    "ScrapedCollection",
    "Scraper",
    "ScraperSettings",
    "get_collection",
    "parse_book_page",
    "parse_flat_collection_page",
]
