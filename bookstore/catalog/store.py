"""
Record stores for the catalogue.

``InMemoryBookStore`` keeps the collection in a process-local dict and
serialises writes with a lock. ``JsonFileBookStore`` adds persistence: the
collection is loaded from a JSON file at start-up and rewritten after every
write. Both keep a unique index on ``title`` (exact, case-sensitive) that
is checked inside the lock, so two concurrent creates for the same title
cannot both succeed; the loser gets ``DuplicateTitleError``.

``seed_from_file()`` fills an empty store from a JSON array of book
documents, the same format the persistent store writes.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, TypeVar
from uuid import uuid4

from pydantic import ValidationError

from ..errors import StoreUnavailable
from .query import Predicate, SortSpec
from .schemas import Book, BookCreate


logger = logging.getLogger(__name__)

T = TypeVar("T")


class DuplicateTitleError(Exception):
    """Raised when a write would give two records the same title."""

    def __init__(self, title: str):
        self.title = title
        super().__init__(f"Duplicate title: {title!r}")


class InMemoryBookStore:
    """Process-local book collection with a unique title index."""

    def __init__(self, books: Iterable[Book] = ()):
        self._lock = threading.RLock()
        self._books: Dict[str, Book] = {}
        self._titles: Dict[str, str] = {}
        for book in books:
            self._books[book.id] = book
        self._reindex()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def find(
        self,
        filters: Iterable[Predicate] = (),
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Book]:
        filters = tuple(filters)
        with self._lock:
            items = [b for b in self._books.values() if all(p.matches(b) for p in filters)]
        if sort is not None:
            items.sort(key=lambda b: getattr(b, sort.field), reverse=sort.descending)
        end = None if limit is None else skip + limit
        return items[skip:end]

    def count(self, filters: Iterable[Predicate] = ()) -> int:
        filters = tuple(filters)
        with self._lock:
            return sum(1 for b in self._books.values() if all(p.matches(b) for p in filters))

    def get(self, book_id: str) -> Optional[Book]:
        with self._lock:
            return self._books.get(str(book_id))

    def find_by_title(self, title: str) -> Optional[Book]:
        with self._lock:
            book_id = self._titles.get(title)
            return self._books.get(book_id) if book_id is not None else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._books)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def insert(self, data: BookCreate) -> Book:
        def mutator() -> Book:
            if data.title in self._titles:
                raise DuplicateTitleError(data.title)
            book = Book(id=uuid4().hex, **data.model_dump())
            self._books[book.id] = book
            self._titles[book.title] = book.id
            return book

        return self._write(mutator)

    def update(self, book_id: str, changes: Dict) -> Optional[Book]:
        """Apply ``changes`` to a record, ``$set`` style.

        ``changes`` must already hold validated field values. Returns the
        updated record or ``None`` when ``book_id`` does not exist.
        """
        target = str(book_id)

        def mutator() -> Optional[Book]:
            current = self._books.get(target)
            if current is None:
                return None
            new_title = changes.get("title", current.title)
            owner = self._titles.get(new_title)
            if owner is not None and owner != target:
                raise DuplicateTitleError(new_title)
            updated = current.model_copy(update=changes)
            self._books[target] = updated
            if updated.title != current.title:
                del self._titles[current.title]
                self._titles[updated.title] = target
            return updated

        return self._write(mutator)

    def delete(self, book_id: str) -> bool:
        target = str(book_id)

        def mutator() -> bool:
            book = self._books.pop(target, None)
            if book is None:
                return False
            self._titles.pop(book.title, None)
            return True

        return self._write(mutator)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _write(self, mutator: Callable[[], T]) -> T:
        with self._lock:
            snapshot = dict(self._books)
            result = mutator()
            try:
                self._flush()
            except StoreUnavailable:
                self._books = snapshot
                self._reindex()
                raise
            return result

    def _flush(self) -> None:
        pass

    def _reindex(self) -> None:
        self._titles = {}
        for book in self._books.values():
            if book.title in self._titles:
                raise DuplicateTitleError(book.title)
            self._titles[book.title] = book.id


class JsonFileBookStore(InMemoryBookStore):
    """Book collection persisted as a JSON array on disk."""

    def __init__(self, path):
        self.path = Path(path)
        try:
            super().__init__(self._load())
        except DuplicateTitleError as exc:
            raise StoreUnavailable(f"Cannot load {self.path}: {exc}") from exc

    def _load(self) -> List[Book]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
            return [Book.model_validate(entry) for entry in raw]
        except (OSError, ValueError, TypeError) as exc:
            # json.JSONDecodeError and pydantic's ValidationError are ValueErrors
            raise StoreUnavailable(f"Cannot load {self.path}: {exc}") from exc

    def _flush(self) -> None:
        data = [book.model_dump() for book in self._books.values()]
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError as exc:
            raise StoreUnavailable(f"Cannot write {self.path}: {exc}") from exc


def seed_from_file(store: InMemoryBookStore, path) -> int:
    """Insert the books listed in a JSON file into an empty store.

    Entries that fail validation or repeat a title are skipped with a
    warning; a missing or unreadable file inserts nothing.

    Parameters
    ----------
    store : InMemoryBookStore
        Target store. Nothing is inserted unless it is empty.
    path : str or Path
        JSON array of book documents, in the format ``JsonFileBookStore``
        writes.

    Returns
    -------
    int
        The number of books inserted.
    """
    if len(store):
        return 0
    seed = Path(path)
    if not seed.exists():
        logger.info("Seed file %s not found, starting with an empty catalogue", seed)
        return 0
    try:
        with seed.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Could not read seed file %s: %s", seed, exc)
        return 0

    inserted = 0
    for position, entry in enumerate(raw if isinstance(raw, list) else []):
        try:
            store.insert(BookCreate.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping seed entry %d: %s", position, exc.errors()[0].get("msg"))
            continue
        except DuplicateTitleError as exc:
            logger.warning("Skipping seed entry %d: %s", position, exc)
            continue
        inserted += 1
    logger.info("Seeded %d books from %s", inserted, seed)
    return inserted
