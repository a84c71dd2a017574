"""Custom exception classes for the application."""
from typing import Any, Optional


class AppException(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, detail: Any = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class NotFoundError(AppException):
    """Resource not found."""
    pass


class DuplicateError(AppException):
    """Duplicate resource detected."""
    pass


class ValidationError(AppException):
    """Input rejected by a validation boundary.

    ``field`` names the offending input key so the HTTP layer can report it.
    """

    def __init__(self, field: Optional[str], message: str, detail: Any = None):
        self.field = field
        super().__init__(f"{field}: {message}" if field else message, detail)
