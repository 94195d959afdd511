"""
Guarded create/update/delete of catalogue records.

Each operation checks its preconditions in a fixed order and stops at the
first failure:

- create: title not taken (``Conflict``), caller is admin (``Forbidden``),
  payload valid (``InvalidInput``), insert.
- update: record exists (``NotFound``), caller is admin, supplied fields
  valid, write.
- delete: record exists, caller is admin, remove.

With ``authorize_first`` (``BOOKSTORE_AUTHORIZE_FIRST``) the role check
moves in front of the existence/uniqueness lookup, so callers without the
admin role cannot discover which ids or titles exist.

The store's unique title index is the final word on duplicates: a
``DuplicateTitleError`` raised by the write is reported as ``Conflict``
even when the earlier lookup passed.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .. import config
from ..auth import authorize
from ..errors import Conflict, InvalidInput, NotFound, error_entry
from ..models import CallerIdentity
from .schemas import Book, BookCreate, BookUpdate
from .store import DuplicateTitleError


logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _validate(model: Type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        errors = [
            error_entry(err["msg"], ".".join(str(part) for part in err["loc"]) or None)
            for err in exc.errors()
        ]
        raise InvalidInput(errors=errors) from exc


def _authorize_first(flag: Optional[bool]) -> bool:
    return config.AUTHORIZE_FIRST if flag is None else flag


def create_book(
    store,
    caller: Optional[CallerIdentity],
    payload: Any,
    authorize_first: Optional[bool] = None,
) -> Book:
    """Create a book from a raw JSON payload.

    Parameters
    ----------
    store : InMemoryBookStore
        Record store to write to.
    caller : Optional[CallerIdentity]
        The authenticated caller; ``None`` is always rejected.
    payload : Any
        Decoded request body. Anything other than a valid ``BookCreate``
        object fails at the validation step.
    authorize_first : Optional[bool]
        Check the role before the title lookup. Defaults to
        ``config.AUTHORIZE_FIRST``.

    Returns
    -------
    Book
        The stored record, including its new ``id``.

    Raises
    ------
    Conflict, Unauthorized, Forbidden, InvalidInput
        The first precondition that fails, in that order.
    """
    early = _authorize_first(authorize_first)
    if early:
        authorize(caller, "create")

    title = payload.get("title") if isinstance(payload, dict) else None
    if isinstance(title, str) and store.find_by_title(title) is not None:
        raise Conflict()

    if not early:
        authorize(caller, "create")

    data = _validate(BookCreate, payload)
    try:
        book = store.insert(data)
    except DuplicateTitleError as exc:
        raise Conflict() from exc

    logger.info("Book %s created by %s", book.id, caller.user_id)
    return book


def update_book(
    store,
    caller: Optional[CallerIdentity],
    book_id: str,
    payload: Any,
    authorize_first: Optional[bool] = None,
) -> Book:
    """Apply the supplied fields of ``payload`` to an existing book.

    On any failure the stored record is left untouched.

    Parameters
    ----------
    store : InMemoryBookStore
        Record store holding the book.
    caller : Optional[CallerIdentity]
        The authenticated caller; ``None`` is always rejected.
    book_id : str
        Identifier of the book to change.
    payload : Any
        Decoded request body; must be an object whose keys are
        ``BookUpdate`` fields.
    authorize_first : Optional[bool]
        Check the role before the existence lookup. Defaults to
        ``config.AUTHORIZE_FIRST``.

    Returns
    -------
    Book
        The updated record.

    Raises
    ------
    NotFound, Unauthorized, Forbidden, InvalidInput, Conflict
        The first precondition that fails, in that order. ``Conflict``
        comes from renaming onto a title another book already has.
    """
    early = _authorize_first(authorize_first)
    if early:
        authorize(caller, "update")

    current = store.get(book_id)
    if current is None:
        raise NotFound()

    if not early:
        authorize(caller, "update")

    changes = _validate(BookUpdate, payload).changes()
    _validate(Book, {**current.model_dump(), **changes})

    try:
        updated = store.update(book_id, changes)
    except DuplicateTitleError as exc:
        raise Conflict() from exc
    if updated is None:
        # deleted between the lookup and the write
        raise NotFound()

    logger.info("Book %s updated by %s (%s)", book_id, caller.user_id, ", ".join(sorted(changes)) or "no changes")
    return updated


def delete_book(
    store,
    caller: Optional[CallerIdentity],
    book_id: str,
    authorize_first: Optional[bool] = None,
) -> None:
    early = _authorize_first(authorize_first)
    if early:
        authorize(caller, "delete")

    if store.get(book_id) is None:
        raise NotFound()

    if not early:
        authorize(caller, "delete")

    if not store.delete(book_id):
        raise NotFound()
    logger.info("Book %s deleted by %s", book_id, caller.user_id)
