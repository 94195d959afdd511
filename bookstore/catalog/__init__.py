"""
Catalog package for the bookstore API.

The query planner (``query``) turns list parameters into a validated
``QuerySpec``, the reader (``reader``) runs it against a record store
(``store``), and ``mutations`` holds the guarded create/update/delete
workflow. ``router`` exposes all of it under ``/api/books``.
"""

from .router import router as catalog_router  # noqa: F401
