"""Read path: run a ``QuerySpec`` against the store and build the page."""

from __future__ import annotations

import math

from ..errors import NotFound
from .query import QuerySpec
from .schemas import Book, PaginatedBooks


def list_books(store, spec: QuerySpec) -> PaginatedBooks:
    """Fetch one page of books plus pagination metadata.

    The total is counted over the same filter without skip/limit. A page
    past the end is not an error: it comes back empty with the computed
    ``total_pages``.
    """
    books = store.find(spec.filters, sort=spec.sort, skip=spec.skip, limit=spec.limit)
    total = store.count(spec.filters)
    return PaginatedBooks(
        books=books,
        total_pages=math.ceil(total / spec.limit),
        current_page=spec.page,
    )


def get_book(store, book_id: str) -> Book:
    book = store.get(book_id)
    if book is None:
        raise NotFound()
    return book
