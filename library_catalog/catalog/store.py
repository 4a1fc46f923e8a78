"""
In-memory data store for the catalogue API.

``CatalogStore`` owns the list of ``Book`` records and is the only
code allowed to touch it. Every read and write runs under a single
lock and hands back copies, so callers can never observe or mutate a
record halfway through another request. Nothing is persisted: the
collection lives as long as the process does.

The sample dataset shipped in ``library_catalog/data`` can be loaded
with ``load_sample_books()`` to give a fresh process something to
serve.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from .errors import (
    BookAlreadyAvailableError,
    BookNotFoundError,
    BookUnavailableError,
    DuplicateIsbnError,
    MissingFieldsError,
    UserIdRequiredError,
)
from .schemas import (
    Book,
    BorrowReceipt,
    CreateBookRequest,
    ReturnReceipt,
    UpdateBookRequest,
    UserId,
)


logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "author", "isbn")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(moment: datetime) -> str:
    """Render a timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def _norm(s: Optional[str]) -> str:
    return (s or "").lower()


def load_sample_books(path: Path, loaded_at: Optional[datetime] = None) -> List[Book]:
    """Load sample books from a JSON file.

    Parameters
    ----------
    path : Path
        A JSON file holding a list of book objects in wire format.
    loaded_at : Optional[datetime]
        Timestamp used as ``addedDate`` for entries that lack one.

    Returns
    -------
    List[Book]
        The parsed books, or an empty list when the file is missing or
        malformed. Failures are logged, never raised.
    """
    added = isoformat(loaded_at or utcnow())
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            raw = json.load(f)
        books = [Book.model_validate({"addedDate": added, **entry}) for entry in raw]
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("Could not load sample books from %s: %s", path, exc)
        return []
    logger.info("Loaded %d sample books from %s", len(books), path)
    return books


class CatalogStore:
    """Thread-safe owner of the book collection."""

    def __init__(
        self,
        books: Optional[Iterable[Book]] = None,
        loan_period_days: int = 14,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._books: List[Book] = [b.model_copy() for b in (books or [])]
        self._lock = threading.Lock()
        self.loan_period = timedelta(days=loan_period_days)
        self._clock = clock

    def __len__(self) -> int:
        with self._lock:
            return len(self._books)

    # -- lookups -----------------------------------------------------------

    def _index_of(self, book_id: int) -> int:
        for index, book in enumerate(self._books):
            if book.id == book_id:
                return index
        return -1

    def _require(self, book_id: int) -> Book:
        index = self._index_of(book_id)
        if index == -1:
            raise BookNotFoundError(book_id)
        return self._books[index]

    def _require_lendable(self, book_id: int) -> Book:
        book = self._require(book_id)
        if not book.available:
            raise BookUnavailableError(book.borrowed_by, book.return_date)
        return book

    def find_by_id(self, book_id: int) -> Optional[Book]:
        with self._lock:
            index = self._index_of(book_id)
            return self._books[index].model_copy() if index != -1 else None

    def get(self, book_id: int) -> Book:
        """Like ``find_by_id`` but raises ``BookNotFoundError`` on a miss."""
        with self._lock:
            return self._require(book_id).model_copy()

    def ensure_lendable(self, book_id: int) -> Book:
        """Raise unless the book exists and is on the shelf."""
        with self._lock:
            return self._require_lendable(book_id).model_copy()

    def list_books(
        self,
        available: Optional[bool] = None,
        genre: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Book], int]:
        """Filter the collection and return one page of it.

        Filters apply in order (``available``, ``genre``, ``search``) and
        only when given. ``genre`` is a case-insensitive exact match and
        ``search`` a case-insensitive substring of the title or author.

        Returns
        -------
        Tuple[List[Book], int]
            The books on the requested page and the number of books
            that passed the filters (before pagination).
        """
        with self._lock:
            items = list(self._books)

            if available is not None:
                items = [b for b in items if b.available == available]

            if genre:
                ngenre = _norm(genre)
                items = [b for b in items if _norm(b.genre) == ngenre]

            if search:
                term = _norm(search)
                items = [
                    b for b in items if term in _norm(b.title) or term in _norm(b.author)
                ]

            total = len(items)
            start = (page - 1) * limit
            return [b.model_copy() for b in items[start:start + limit]], total

    # -- mutations ---------------------------------------------------------

    def insert(self, request: CreateBookRequest) -> Book:
        missing = [name for name in REQUIRED_FIELDS if not getattr(request, name)]
        if missing:
            raise MissingFieldsError(list(REQUIRED_FIELDS), missing)

        with self._lock:
            if any(b.isbn == request.isbn for b in self._books):
                raise DuplicateIsbnError(request.isbn)

            book = Book(
                id=max((b.id for b in self._books), default=0) + 1,
                title=request.title,
                author=request.author,
                isbn=request.isbn,
                published_year=request.published_year or None,
                genre=request.genre or "Unknown",
                available=True,
                location=request.location or "Unassigned",
                last_borrowed=None,
                added_date=isoformat(self._clock()),
            )
            self._books.append(book)
            logger.info("Added book %d (ISBN %s)", book.id, book.isbn)
            return book.model_copy()

    def update(self, book_id: int, request: UpdateBookRequest) -> Book:
        """Apply a partial update.

        Empty strings and a zero ``publishedYear`` count as absent and
        leave the stored value alone. ``available`` is applied whenever
        the request carries a boolean for it, ``false`` included.
        """
        with self._lock:
            book = self._require(book_id)

            for name in ("title", "author", "isbn", "published_year", "genre", "location"):
                value = getattr(request, name)
                if value:
                    setattr(book, name, value)
            if request.available is not None:
                book.available = request.available

            book.last_updated = isoformat(self._clock())
            logger.info("Updated book %d", book_id)
            return book.model_copy()

    def remove_by_id(self, book_id: int) -> Book:
        with self._lock:
            index = self._index_of(book_id)
            if index == -1:
                raise BookNotFoundError(book_id)
            book = self._books.pop(index)
            logger.info("Deleted book %d", book_id)
            return book

    def borrow(self, book_id: int, user_id: Optional[UserId]) -> BorrowReceipt:
        with self._lock:
            book = self._require_lendable(book_id)
            if not user_id:
                raise UserIdRequiredError()

            now = self._clock()
            book.available = False
            book.borrowed_by = user_id
            book.borrow_date = isoformat(now)
            book.return_date = isoformat(now + self.loan_period)
            book.last_borrowed = book.borrow_date
            logger.info("Book %d borrowed by %s until %s", book_id, user_id, book.return_date)
            return BorrowReceipt(
                book_id=book.id,
                title=book.title,
                borrowed_by=user_id,
                borrow_date=book.borrow_date,
                return_date=book.return_date,
            )

    def return_book(self, book_id: int) -> ReturnReceipt:
        with self._lock:
            book = self._require(book_id)
            if book.available:
                raise BookAlreadyAvailableError()

            returned_by = book.borrowed_by
            now = isoformat(self._clock())
            book.available = True
            book.borrowed_by = None
            book.borrow_date = None
            book.return_date = None
            book.last_borrowed = now
            logger.info("Book %d returned by %s", book_id, returned_by)
            return ReturnReceipt(
                book_id=book.id,
                title=book.title,
                returned_by=returned_by,
                return_date=now,
            )
