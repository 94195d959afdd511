"""
Pydantic schema definitions for the catalog module.

``Book`` is a stored catalogue record; every instance satisfies the field
constraints below, so a record is never partially valid. ``BookCreate`` is
the full field set accepted on creation and ``BookUpdate`` the explicit
optional-field structure accepted by partial updates. The remaining models
describe response payloads, serialised with the camelCase keys clients
expect (``totalPages``, ``newBook``...).
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


TITLE_MIN_LENGTH = 2
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
RATING_MAX = 5


def _blank_description_to_none(value):
    # An empty description is stored as absent
    if isinstance(value, str) and value == "":
        return None
    return value


class BookCreate(BaseModel):
    """Field set required to create a book.

    Unknown keys are ignored, so a client echoing back an ``id`` cannot
    choose the identifier of the new record. Numeric fields are strict:
    strings and booleans are rejected, integers are accepted for floats.
    """

    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    price: float = Field(..., ge=0, strict=True, allow_inf_nan=False)
    stock: int = Field(..., ge=0, strict=True)
    category: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    rating: float = Field(..., ge=0, le=RATING_MAX, strict=True, allow_inf_nan=False)

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, value):
        return _blank_description_to_none(value)


class Book(BookCreate):
    """A stored catalogue record, including its store-assigned ``id``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str


class BookUpdate(BaseModel):
    """Partial update payload.

    Only the keys the client sent are applied. Unknown keys are rejected
    and ``null`` is accepted for ``description`` alone.
    """

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    price: Optional[float] = Field(default=None, ge=0, strict=True, allow_inf_nan=False)
    stock: Optional[int] = Field(default=None, ge=0, strict=True)
    category: Optional[str] = Field(default=None, min_length=1)
    author: Optional[str] = Field(default=None, min_length=1)
    rating: Optional[float] = Field(default=None, ge=0, le=RATING_MAX, strict=True, allow_inf_nan=False)

    @field_validator("title", "price", "stock", "category", "author", "rating", mode="before")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field may not be null")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, value):
        return _blank_description_to_none(value)

    def changes(self) -> dict:
        """Return only the fields the client supplied."""
        return self.model_dump(exclude_unset=True)


class PaginatedBooks(BaseModel):
    """A page of books plus pagination metadata, returned by ``GET /api/books``."""

    model_config = ConfigDict(populate_by_name=True)

    books: List[Book]
    total_pages: int = Field(alias="totalPages")
    current_page: int = Field(alias="currentPage")


class CreatedBook(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_book: Book = Field(alias="newBook")


class UpdatedBook(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    updated_book: Book = Field(alias="updatedBook")


class MessageResponse(BaseModel):
    message: str


class ErrorEntry(BaseModel):
    message: str
    field: Optional[str] = None


class ErrorPayload(BaseModel):
    errors: List[ErrorEntry]
