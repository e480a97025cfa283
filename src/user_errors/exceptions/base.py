"""
Application-level exceptions.
"""

from typing import Mapping

# canonical application-level exception

class AppError(Exception):
    """
    Base exception for errors the application reports to its clients.

    - message: human-friendly message (safe to show to clients)
    - error_code: canonical short code (e.g., 'user_error') used by clients
    """

    # Map canonical error_code -> default HTTP status.
    ERROR_CODE_TO_STATUS = {
        "user_error": 422,
        "catalog_error": 500,
        "database_error": 500,
        # fallback: default to 400 for anything else
    }

    def __init__(self, message: str, *, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self) -> str:
        if self.error_code:
            return f"{self.message} (code: {self.error_code})"
        return self.message

    def to_payload(self) -> dict:
        """
        Return a JSON-serializable dict suitable for HTTP responses.
        Standard shape:
            {
                "detail": "A human-friendly message",
                "code": "user_error",          # optional canonical code
            }
        Raw driver messages never go in here.
        """
        payload = {"detail": self.message}
        if self.error_code:
            payload["code"] = self.error_code
        return payload

    def http_status(self) -> int:
        """
        Return the HTTP status code that should accompany this error.
        Looked up from ERROR_CODE_TO_STATUS, 400 when the code is unknown or missing.
        """
        if self.error_code:
            return self.ERROR_CODE_TO_STATUS.get(self.error_code, 400)
        return 400


class UserError(AppError):
    """
    A user-error raised by a database routine, already translated.

    The original driver exception is chained as `__cause__` by whoever raises it.
    """

    def __init__(self, message: str, *, key: str, parameters: Mapping[str, str] | None = None):
        super().__init__(message, error_code="user_error")
        self.key = key
        self.parameters = dict(parameters) if parameters else {}

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["key"] = self.key
        if self.parameters:
            # clients get plain names, not the %name% placeholders
            payload["parameters"] = {name.strip("%"): value for name, value in self.parameters.items()}
        return payload


class CatalogError(AppError):
    """Raised when a message catalog cannot be loaded."""

    def __init__(self, message: str):
        super().__init__(message, error_code="catalog_error")


class DatabaseError(AppError):
    """Generic, non-leaking wrapper for unexpected database failures."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message, error_code="database_error")


__all__ = [
    "AppError",
    "UserError",
    "CatalogError",
    "DatabaseError",
]
