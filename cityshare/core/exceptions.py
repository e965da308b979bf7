"""
Catalog error taxonomy - one exception per HTTP outcome.
Services raise these; handlers in main.py render them as {"error": message}.
"""

from fastapi import status


class CatalogError(Exception):
    """Base for errors that terminate the current request."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(CatalogError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "invalid input"


class Unauthorized(CatalogError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "unauthorized"


class Forbidden(CatalogError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "forbidden"


class NotFound(CatalogError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "not found"


class StorageFailure(CatalogError):
    """Persistence collaborator rejected the operation. Never retried."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "storage failure"
