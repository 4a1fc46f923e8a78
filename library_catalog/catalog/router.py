"""
Route definitions for the catalogue API.

Endpoints:
- GET    /books                   : list books with filters and pagination
- GET    /books/{book_id}         : get one book with links to its actions
- POST   /books                   : add a book
- PUT    /books/{book_id}         : partial update
- DELETE /books/{book_id}         : remove a book
- POST   /books/{book_id}/borrow  : lend a book to a user
- POST   /books/{book_id}/return  : bring a borrowed book back

Handlers stay thin: they parse request parameters, call the
``CatalogStore`` held on ``app.state`` and wrap the result in the
response envelope. Failures are raised as ``CatalogError`` and turned
into JSON by the exception handlers installed in ``main``.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Optional, Type, TypeVar

from fastapi import APIRouter, Body, Depends, Query, Request, status
from pydantic import BaseModel, ValidationError

from ..config import Settings
from .errors import BookNotFoundError, InvalidRequestError, summarize_validation_errors
from .schemas import BorrowRequest, CreateBookRequest, PaginatedBooks, UpdateBookRequest
from .store import CatalogStore


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: Optional[str]) -> Optional[int]:
    """Read the leading integer of ``value`` (``"12abc"`` gives 12).

    Returns ``None`` when the string does not start with a number.
    """
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def get_store(request: Request) -> CatalogStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _book_id(raw: str, detailed: bool = False) -> int:
    book_id = parse_int(raw)
    if book_id is None:
        raise BookNotFoundError(raw, detailed=detailed)
    return book_id


ModelT = TypeVar("ModelT", bound=BaseModel)


def _read_body(model: Type[ModelT], payload: Any) -> ModelT:
    """Validate a raw JSON body. A missing body counts as ``{}``."""
    try:
        return model.model_validate({} if payload is None else payload)
    except ValidationError as exc:
        raise InvalidRequestError(summarize_validation_errors(exc.errors())) from exc


router = APIRouter(tags=["books"])


@router.get("/books", response_model=PaginatedBooks)
@router.get("/books/", response_model=PaginatedBooks, include_in_schema=False)
def list_books(
    available: Optional[str] = Query(default=None, description="'true' for books on the shelf"),
    genre: Optional[str] = Query(default=None, description="Filter by genre (case-insensitive)"),
    search: Optional[str] = Query(default=None, description="Search title and author"),
    page: Optional[str] = Query(default=None, description="Page number (1-indexed)"),
    limit: Optional[str] = Query(default=None, description="Page size"),
    store: CatalogStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> PaginatedBooks:
    """
    Returns a paginated list of books.

    Malformed or non-positive ``page``/``limit`` values fall back to the
    configured defaults rather than failing the request.
    """
    page_number = parse_int(page)
    if page_number is None or page_number < 1:
        page_number = settings.default_page
    page_size = parse_int(limit)
    if page_size is None or page_size < 1:
        page_size = settings.default_limit

    books, total = store.list_books(
        available=(available == "true") if available else None,
        genre=genre,
        search=search,
        page=page_number,
        limit=page_size,
    )

    return PaginatedBooks(
        total=total,
        page=page_number,
        limit=page_size,
        total_pages=math.ceil(total / page_size),
        data=books,
    )


@router.get("/books/{book_id}")
@router.get("/books/{book_id}/", include_in_schema=False)
def get_book(book_id: str, store: CatalogStore = Depends(get_store)) -> Dict[str, Any]:
    book = store.find_by_id(_book_id(book_id, detailed=True))
    if book is None:
        raise BookNotFoundError(book_id, detailed=True)
    return {
        "success": True,
        "data": book.to_public(),
        "links": {
            "borrow": f"/books/{book.id}/borrow",
            "return": f"/books/{book.id}/return",
        },
    }


@router.post("/books", status_code=status.HTTP_201_CREATED)
@router.post("/books/", status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_book(
    payload: Optional[CreateBookRequest] = Body(default=None),
    store: CatalogStore = Depends(get_store),
) -> Dict[str, Any]:
    book = store.insert(payload or CreateBookRequest())
    return {
        "success": True,
        "message": "Book added successfully",
        "data": book.to_public(),
    }


@router.put("/books/{book_id}")
@router.put("/books/{book_id}/", include_in_schema=False)
def update_book(
    book_id: str,
    payload: Any = Body(default=None),
    store: CatalogStore = Depends(get_store),
) -> Dict[str, Any]:
    key = _book_id(book_id)
    store.get(key)
    book = store.update(key, _read_body(UpdateBookRequest, payload))
    return {
        "success": True,
        "message": "Book updated successfully",
        "data": book.to_public(),
    }


@router.delete("/books/{book_id}")
@router.delete("/books/{book_id}/", include_in_schema=False)
def delete_book(book_id: str, store: CatalogStore = Depends(get_store)) -> Dict[str, Any]:
    book = store.remove_by_id(_book_id(book_id))
    return {
        "success": True,
        "message": "Book deleted successfully",
        "data": book.to_public(),
    }


@router.post("/books/{book_id}/borrow")
@router.post("/books/{book_id}/borrow/", include_in_schema=False)
def borrow_book(
    book_id: str,
    payload: Any = Body(default=None),
    store: CatalogStore = Depends(get_store),
) -> Dict[str, Any]:
    # Existence and availability are reported before any body problem.
    key = _book_id(book_id)
    store.ensure_lendable(key)
    receipt = store.borrow(key, _read_body(BorrowRequest, payload).user_id)
    return {
        "success": True,
        "message": "Book borrowed successfully",
        "data": receipt.model_dump(by_alias=True),
    }


@router.post("/books/{book_id}/return")
@router.post("/books/{book_id}/return/", include_in_schema=False)
def return_book(book_id: str, store: CatalogStore = Depends(get_store)) -> Dict[str, Any]:
    receipt = store.return_book(_book_id(book_id))
    return {
        "success": True,
        "message": "Book returned successfully",
        "data": receipt.model_dump(by_alias=True),
    }
