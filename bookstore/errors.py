# bookstore/errors.py
"""
Error taxonomy of the catalog engine and its mapping to HTTP responses.

Every failure the engine can report is a ``CatalogError`` subclass carrying
an HTTP status and a list of ``{"message": ..., "field": ...}`` entries.
``register_exception_handlers()`` installs handlers that render those, plus
framework validation errors and unexpected exceptions, as the uniform
``{"errors": [...]}`` payload.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server Error"


def error_entry(message: str, field: Optional[str] = None) -> Dict[str, str]:
    entry = {"message": message}
    if field:
        entry["field"] = field
    return entry


class CatalogError(Exception):
    """Base class for failures surfaced to the caller."""

    status_code = 500
    default_message = SERVER_ERROR_MESSAGE

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, str]]] = None):
        self.errors = errors or [error_entry(message or self.default_message)]
        super().__init__(self.errors[0]["message"])

    @property
    def message(self) -> str:
        return self.errors[0]["message"]


class InvalidQuery(CatalogError):
    status_code = 400
    default_message = "Invalid query parameters"


class InvalidInput(CatalogError):
    status_code = 422
    default_message = "Invalid book data"


class Unauthorized(CatalogError):
    status_code = 401
    default_message = "No token, authorization denied"


class Forbidden(CatalogError):
    status_code = 403
    default_message = "Only admin can modify books"


class NotFound(CatalogError):
    status_code = 404
    default_message = "Could not find a book by this id"


class Conflict(CatalogError):
    status_code = 409
    default_message = "Book already exists"


class StoreUnavailable(CatalogError):
    """The record store could not serve the request.

    The message shown to callers is fixed; the underlying cause is only
    logged and kept as ``__cause__``.
    """

    status_code = 503
    default_message = "Catalog storage is unavailable"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(self.default_message)
        self.detail = detail


def _error_response(status_code: int, errors: List[Dict[str, str]]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"errors": errors})


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    if isinstance(exc, StoreUnavailable):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc.detail)
    return _error_response(exc.status_code, exc.errors)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for err in exc.errors():
        # loc starts with "body"/"query"/"path"
        loc = [str(part) for part in err.get("loc", ())[1:]]
        errors.append(error_entry(err.get("msg", "Invalid request"), ".".join(loc) or None))
    return _error_response(422, errors or [error_entry("Invalid request")])


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, [error_entry(str(exc.detail))])


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, [error_entry(SERVER_ERROR_MESSAGE)])


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
