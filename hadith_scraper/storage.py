"""Storage helpers for scraper outputs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, TypeVar

from pydantic import BaseModel, ValidationError

from .config import BookKey
from .models import Book, FlatPage, ScrapedCollection, ScraperError

LOGGER = logging.getLogger(__name__)

FLAT_PAGE_KEY = "index"

ModelT = TypeVar("ModelT", bound=BaseModel)


def ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def write_model(model: BaseModel, path: Path) -> None:
    ensure_parent(path)
    path.write_text(model.model_dump_json(indent=2), encoding="utf-8")


def read_model(path: Path, model_type: type[ModelT]) -> Optional[ModelT]:
    """Load a cached model, treating a missing or undecodable file as absent."""
    if not path.exists():
        return None
    try:
        return model_type.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as exc:
        LOGGER.warning("Ignoring corrupt cache file %s: %s", path, exc.errors()[:1])
        return None


def book_path(books_dir: Path, collection_id: str, key: BookKey) -> Path:
    return books_dir / collection_id / f"{key}.json"


def write_book(book: Book, books_dir: Path, collection_id: str, key: BookKey) -> Path:
    path = book_path(books_dir, collection_id, key)
    write_model(book, path)
    return path


def read_book(books_dir: Path, collection_id: str, key: BookKey) -> Optional[Book]:
    return read_model(book_path(books_dir, collection_id, key), Book)


def write_flat_page(page: FlatPage, books_dir: Path, collection_id: str) -> Path:
    path = book_path(books_dir, collection_id, FLAT_PAGE_KEY)
    write_model(page, path)
    return path


def read_flat_page(books_dir: Path, collection_id: str) -> Optional[FlatPage]:
    return read_model(book_path(books_dir, collection_id, FLAT_PAGE_KEY), FlatPage)


def write_collection(collection: ScrapedCollection, collections_dir: Path) -> Path:
    path = collections_dir / f"{collection.collection.id}.json"
    write_model(collection, path)
    return path


def append_error_log(error: ScraperError, path: Path) -> None:
    ensure_parent(path)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(error.log_line())
        handle.write("\n")


def write_html_snapshot(html: str, path: Path) -> None:
    ensure_parent(path)
    path.write_text(html, encoding="utf-8")
