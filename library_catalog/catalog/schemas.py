"""
Pydantic schema definitions for the catalog module.

``Book`` is the stored record. Field names are snake_case in Python
and camelCase on the wire (``publishedYear``, ``lastBorrowed`` ...).
The borrow fields and ``lastUpdated`` are omitted from the serialized
record while they are unset, so a book that is on the shelf never
carries a ``borrowedBy`` key at all.
``ReturnReceipt`` likewise drops ``returnedBy`` when the book had no
recorded borrower.

The request models describe the JSON bodies accepted by each endpoint.
Required fields are declared optional here and checked by the store,
which reports missing values with the catalogue's own error envelope
instead of FastAPI's generic 422 response.
"""

from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Union

from pydantic import BaseModel, ConfigDict, model_serializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# A borrower is identified by whatever the client sent, string or number.
UserId = Union[str, int]


class SparseModel(CamelModel):
    """A model whose listed fields are left out of the output while None."""

    omitted_when_unset: ClassVar[FrozenSet[str]] = frozenset()

    @model_serializer(mode="wrap")
    def _omit_unset_fields(self, handler) -> Dict[str, Any]:
        data = handler(self)
        skip = set()
        for name in self.omitted_when_unset:
            if getattr(self, name) is None:
                field = type(self).model_fields[name]
                skip.update((name, field.alias or name))
        return {key: value for key, value in data.items() if key not in skip}


class Book(SparseModel):
    """A single catalogue entry."""

    omitted_when_unset: ClassVar[FrozenSet[str]] = frozenset(
        {"last_updated", "borrowed_by", "borrow_date", "return_date"}
    )

    id: int
    title: str
    author: str
    isbn: str
    published_year: Optional[int] = None
    genre: str = "Unknown"
    available: bool = True
    location: str = "Unassigned"
    last_borrowed: Optional[str] = None
    added_date: Optional[str] = None
    last_updated: Optional[str] = None

    # Present only while the book is on loan.
    borrowed_by: Optional[UserId] = None
    borrow_date: Optional[str] = None
    return_date: Optional[str] = None

    def to_public(self) -> Dict[str, Any]:
        """Return the JSON-ready representation sent to clients."""
        return self.model_dump(by_alias=True)


class CreateBookRequest(CamelModel):
    title: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None
    published_year: Optional[int] = None
    genre: Optional[str] = None
    location: Optional[str] = None


class UpdateBookRequest(CamelModel):
    title: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None
    published_year: Optional[int] = None
    genre: Optional[str] = None
    available: Optional[bool] = None
    location: Optional[str] = None


class BorrowRequest(CamelModel):
    user_id: Optional[UserId] = None


class BorrowReceipt(CamelModel):
    book_id: int
    title: str
    borrowed_by: UserId
    borrow_date: str
    return_date: str


class ReturnReceipt(SparseModel):
    omitted_when_unset: ClassVar[FrozenSet[str]] = frozenset({"returned_by"})

    book_id: int
    title: str
    returned_by: Optional[UserId] = None
    return_date: str


class PaginatedBooks(CamelModel):
    """A wrapper for paginated results returned from the ``/books`` endpoint."""

    total: int
    page: int
    limit: int
    total_pages: int
    data: List[Book]
