"""Persisted scrape progress so an interrupted run can resume."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from . import storage
from .config import BookKey
from .models import ErrorType, ScraperError, ScraperState, utcnow

LOGGER = logging.getLogger(__name__)


class ProgressTracker:
    """Owns the on-disk :class:`ScraperState`; every mutation is saved immediately."""

    def __init__(self, state: ScraperState, state_path: Path, error_log_path: Path) -> None:
        self.state = state
        self.state_path = state_path
        self.error_log_path = error_log_path

    @classmethod
    def load(cls, state_path: Path, error_log_path: Path) -> "ProgressTracker":
        if not state_path.exists():
            return cls(ScraperState(), state_path, error_log_path)
        raw = state_path.read_text(encoding="utf-8")
        try:
            state = ScraperState.model_validate_json(raw)
        except ValidationError as exc:
            LOGGER.warning("State file %s is unreadable, starting fresh: %s", state_path, exc.errors()[:1])
            state = ScraperState()
        return cls(state, state_path, error_log_path)

    def save(self) -> None:
        self.state.last_update = utcnow()
        storage.write_model(self.state, self.state_path)

    def start_collection(self, collection_id: str) -> None:
        if self.state.current_collection != collection_id:
            # Book progress of another collection does not carry over
            self.state.completed_books = []
        self.state.current_collection = collection_id
        self.save()

    def is_collection_completed(self, collection_id: str) -> bool:
        return collection_id in self.state.completed_collections

    def is_book_completed(self, key: BookKey) -> bool:
        return key in self.state.completed_books

    def mark_book_completed(self, key: BookKey) -> None:
        if key not in self.state.completed_books:
            self.state.completed_books.append(key)
        self.save()

    def mark_collection_completed(self, collection_id: str) -> None:
        if collection_id not in self.state.completed_collections:
            self.state.completed_collections.append(collection_id)
        self.state.current_collection = None
        self.state.completed_books = []
        self.save()

    def record_error(
        self,
        collection_id: str,
        error_type: ErrorType,
        message: str,
        url: str,
        *,
        book: Optional[BookKey] = None,
        hadith_number: Optional[str] = None,
    ) -> ScraperError:
        error = ScraperError(
            collection=collection_id,
            book=book,
            hadith_number=hadith_number,
            error_type=error_type,
            message=message,
            url=url,
        )
        LOGGER.error("%s error for %s/%s: %s", error_type, collection_id, book, message)
        self.state.errors.append(error)
        storage.append_error_log(error, self.error_log_path)
        self.save()
        return error

    def reset(self) -> None:
        self.state = ScraperState()
        self.save()

    def recent_errors(self, limit: int = 5) -> list[ScraperError]:
        return self.state.errors[-limit:] if limit > 0 else []

    def summary_lines(self) -> list[str]:
        state = self.state
        lines = [
            f"Last update: {state.last_update.isoformat()}",
            f"Current collection: {state.current_collection or '-'}",
            f"Completed collections ({len(state.completed_collections)}): "
            + (", ".join(state.completed_collections) or "-"),
            f"Completed books in current collection: {len(state.completed_books)}",
            f"Errors: {len(state.errors)}",
        ]
        for error in self.recent_errors():
            lines.append(f"  {error.log_line()}")
        return lines


__all__ = ["ProgressTracker"]
