"""
Route definitions for the catalogue API.

Endpoints under /api/books:
- GET    /                : list in-stock books with filters, sorting, pagination
- GET    /{book_id}       : get one book
- POST   /                : create a book (admin)
- PATCH  /{book_id}       : update some fields of a book (admin)
- DELETE /{book_id}       : delete a book (admin)

Write bodies arrive as any JSON value (or none) and are validated by the
mutation workflow, after the existence and role checks.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..auth import get_caller
from ..models import CallerIdentity
from ..storage import get_store
from . import mutations, reader
from .query import plan_query
from .schemas import Book, CreatedBook, ErrorPayload, MessageResponse, PaginatedBooks, UpdatedBook


router = APIRouter(prefix="/api/books", tags=["books"])

_errors = {
    400: {"model": ErrorPayload},
    401: {"model": ErrorPayload},
    403: {"model": ErrorPayload},
    404: {"model": ErrorPayload},
    409: {"model": ErrorPayload},
    422: {"model": ErrorPayload},
}


@router.get("", response_model=PaginatedBooks, responses={400: _errors[400]})
def list_books(
    category: Optional[str] = Query(default=None, description="Exact category"),
    author: Optional[str] = Query(default=None, description="Exact author"),
    rating: Optional[str] = Query(default=None, description="Minimum rating"),
    title: Optional[str] = Query(default=None, description="Case-insensitive title fragment"),
    page: Optional[str] = Query(default=None, description="Page number (1-indexed, default 1)"),
    limit: Optional[str] = Query(default=None, description="Page size (default 10, capped)"),
    sort_by: Optional[str] = Query(default=None, alias="sortBy", description="title, price, rating or stock"),
    order: Optional[str] = Query(default=None, description="asc (default) or desc"),
    store=Depends(get_store),
) -> PaginatedBooks:
    spec = plan_query(
        category=category,
        author=author,
        rating=rating,
        title=title,
        page=page,
        limit=limit,
        sort_by=sort_by,
        order=order,
    )
    return reader.list_books(store, spec)


@router.get("/{book_id}", response_model=Book, responses={404: _errors[404]})
def get_book(book_id: str, store=Depends(get_store)) -> Book:
    return reader.get_book(store, book_id)


@router.post("", response_model=CreatedBook, status_code=201, responses=_errors)
def create_book(
    payload: Any = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    store=Depends(get_store),
) -> CreatedBook:
    book = mutations.create_book(store, caller, payload)
    return CreatedBook(new_book=book)


@router.patch("/{book_id}", response_model=UpdatedBook, responses=_errors)
def update_book(
    book_id: str,
    payload: Any = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    store=Depends(get_store),
) -> UpdatedBook:
    book = mutations.update_book(store, caller, book_id, payload)
    return UpdatedBook(message="Successfully updated the book", updated_book=book)


@router.delete("/{book_id}", response_model=MessageResponse, responses=_errors)
def delete_book(
    book_id: str,
    caller: CallerIdentity = Depends(get_caller),
    store=Depends(get_store),
) -> MessageResponse:
    mutations.delete_book(store, caller, book_id)
    return MessageResponse(message="Successfully deleted the book")
