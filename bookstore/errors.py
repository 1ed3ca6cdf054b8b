"""Domain error kinds and their HTTP status mapping.

Repositories and the validator raise these; the app installs one exception
handler that looks the status up in ``ERROR_STATUS``.
"""

from typing import Any

from fastapi import status


class BookstoreError(Exception):
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, *, details: list[dict[str, Any]] | None = None):
        self.message = message or self.default_message
        self.details = details or []
        super().__init__(self.message)

    def to_payload(self, status_code: int) -> dict[str, Any]:
        error: dict[str, Any] = {"message": self.message, "status": status_code}
        if self.details:
            error["details"] = self.details
        return {"error": error}


class ValidationError(BookstoreError):
    default_message = "Invalid book payload"


class NotFound(BookstoreError):
    def __init__(self, isbn: str):
        self.isbn = isbn
        super().__init__(f"There is no book with an isbn of '{isbn}'")


class Conflict(BookstoreError):
    def __init__(self, isbn: str):
        self.isbn = isbn
        super().__init__(f"A book with an isbn of '{isbn}' already exists")


class Internal(BookstoreError):
    pass


ERROR_STATUS: dict[type[BookstoreError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    # Existing clients expect a duplicate isbn to fail as a generic server error.
    Conflict: status.HTTP_500_INTERNAL_SERVER_ERROR,
    Internal: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: BookstoreError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR
