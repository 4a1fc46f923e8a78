"""
Domain errors raised by the catalogue store.

Each error knows the HTTP status it maps to and how to render itself
as the JSON envelope returned to clients, so route handlers never
build error bodies by hand.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional


def summarize_validation_errors(errors: Iterable[Mapping[str, Any]]) -> str:
    """Flatten pydantic error dicts into one readable line."""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Malformed request"


class CatalogError(Exception):
    """Base class for expected, validated failures."""

    status_code = 400
    error = "Bad request"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.error)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": False, "error": self.error}
        if self.message is not None:
            payload["message"] = self.message
        return payload


class BookNotFoundError(CatalogError):
    status_code = 404
    error = "Book not found"

    def __init__(self, book_id: Any, detailed: bool = False) -> None:
        super().__init__(f"No book exists with ID {book_id}" if detailed else None)
        self.book_id = book_id


class MissingFieldsError(CatalogError):
    status_code = 400
    error = "Missing required fields"

    def __init__(self, required: List[str], missing: List[str]) -> None:
        super().__init__()
        self.required = list(required)
        self.missing = list(missing)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.error,
            "required": self.required,
            "missing": self.missing,
        }


class InvalidRequestError(CatalogError):
    status_code = 400
    error = "Invalid request body"


class UserIdRequiredError(CatalogError):
    status_code = 400
    error = "User ID required"

    def __init__(self) -> None:
        super().__init__("Please provide the user ID borrowing this book")


class DuplicateIsbnError(CatalogError):
    status_code = 409
    error = "Book already exists"

    def __init__(self, isbn: str) -> None:
        super().__init__(f"A book with ISBN {isbn} is already in the system")
        self.isbn = isbn


class BookUnavailableError(CatalogError):
    status_code = 400
    error = "Book not available"

    def __init__(self, borrowed_by: Any, return_date: Optional[str]) -> None:
        super().__init__(
            f"This book is currently borrowed by {borrowed_by or 'another user'}"
        )
        self.expected_return = return_date or "Unknown"

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["expectedReturn"] = self.expected_return
        return payload


class BookAlreadyAvailableError(CatalogError):
    status_code = 400
    error = "Book already available"

    def __init__(self) -> None:
        super().__init__("This book is not currently borrowed")


class RouteNotFoundError(CatalogError):
    status_code = 404
    error = "Endpoint not found"

    def __init__(self, method: str, path: str) -> None:
        super().__init__(f"The requested endpoint {method} {path} does not exist")
