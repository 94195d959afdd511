"""
Translation of untrusted list parameters into a validated ``QuerySpec``.

``plan_query()`` accepts the raw query-string values (each ``None`` or a
string) and returns an immutable plan: a conjunction of field predicates,
an optional sort and a page descriptor. Numeric predicate values are parsed
here, so nothing that reaches the record store is an uninterpreted client
string. Malformed input raises ``InvalidQuery``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from typing_extensions import Literal

from .. import config
from ..errors import InvalidQuery, error_entry


Operator = Literal["gt", "eq", "gte", "icontains"]

SORTABLE_FIELDS = ("title", "price", "rating", "stock")


@dataclass(frozen=True)
class Predicate:
    """A single ``field <op> value`` condition on a record."""

    field: str
    op: Operator
    value: Any

    def matches(self, record: Any) -> bool:
        actual = getattr(record, self.field, None)
        if actual is None:
            return False
        if self.op == "gt":
            return actual > self.value
        if self.op == "gte":
            return actual >= self.value
        if self.op == "eq":
            return actual == self.value
        if self.op == "icontains":
            return self.value.casefold() in str(actual).casefold()
        raise ValueError(f"Unknown operator: {self.op}")


@dataclass(frozen=True)
class SortSpec:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class QuerySpec:
    filters: Tuple[Predicate, ...]
    sort: Optional[SortSpec]
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def matches(self, record: Any) -> bool:
        return all(p.matches(record) for p in self.filters)


IN_STOCK = Predicate("stock", "gt", 0)

# plain ASCII decimal integers only
_INTEGER = re.compile(r"-?[0-9]+")


def _present(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    text = str(raw)
    return text if text.strip() else None


def _parse_positive_int(name: str, raw: Optional[str], default: int) -> int:
    text = _present(raw)
    if text is None:
        return default
    match = _INTEGER.fullmatch(text.strip())
    value = int(match.group(0)) if match else 0
    if value < 1:
        raise InvalidQuery(errors=[error_entry(f"{name} must be a positive integer", name)])
    return value


def _parse_number(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        raise InvalidQuery(errors=[error_entry(f"{name} must be a number", name)])
    return value


def plan_query(
    category: Optional[str] = None,
    author: Optional[str] = None,
    rating: Optional[str] = None,
    title: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    sort_by: Optional[str] = None,
    order: Optional[str] = None,
    default_limit: Optional[int] = None,
    max_limit: Optional[int] = None,
) -> QuerySpec:
    """Build a ``QuerySpec`` from raw list parameters.

    Out-of-stock records are always excluded. Blank values count as
    absent.

    Parameters
    ----------
    category, author : Optional[str]
        Exact-match filters.
    rating : Optional[str]
        Minimum rating; must parse as a finite number.
    title : Optional[str]
        Case-insensitive title fragment, matched literally.
    page, limit : Optional[str]
        Positive decimal integers. ``page`` defaults to 1 and ``limit`` to
        ``default_limit``; ``limit`` is clamped to ``max_limit``.
    sort_by : Optional[str]
        One of ``SORTABLE_FIELDS``. Unknown fields are rejected rather
        than ignored.
    order : Optional[str]
        ``"desc"`` sorts descending; anything else sorts ascending.
    default_limit, max_limit : Optional[int]
        Overrides for ``config.DEFAULT_PAGE_SIZE`` and
        ``config.MAX_PAGE_SIZE``.

    Returns
    -------
    QuerySpec
        The validated filter, sort and page descriptor.

    Raises
    ------
    InvalidQuery
        When ``rating``, ``page``, ``limit`` or ``sort_by`` is malformed.
    """
    default_limit = default_limit or config.DEFAULT_PAGE_SIZE
    max_limit = max_limit or config.MAX_PAGE_SIZE

    filters = [IN_STOCK]

    category = _present(category)
    if category:
        filters.append(Predicate("category", "eq", category))

    author = _present(author)
    if author:
        filters.append(Predicate("author", "eq", author))

    rating = _present(rating)
    if rating:
        filters.append(Predicate("rating", "gte", _parse_number("rating", rating)))

    title = _present(title)
    if title:
        filters.append(Predicate("title", "icontains", title))

    page_number = _parse_positive_int("page", page, 1)
    page_size = min(_parse_positive_int("limit", limit, default_limit), max_limit)

    sort = None
    sort_by = _present(sort_by)
    if sort_by:
        if sort_by not in SORTABLE_FIELDS:
            raise InvalidQuery(
                errors=[
                    error_entry(
                        f"sortBy must be one of: {', '.join(SORTABLE_FIELDS)}",
                        "sortBy",
                    )
                ]
            )
        sort = SortSpec(sort_by, descending=(order == "desc"))

    return QuerySpec(filters=tuple(filters), sort=sort, page=page_number, limit=page_size)
