"""
Domain exceptions raised by the service layer.

Each exception carries the HTTP status it maps to; the handlers registered
in ``main.py`` turn them into the standard response envelope.
"""

from fastapi import status

from employee_registry.messages import GeneralMessages


class RegistryError(Exception):
    """Base class for expected, caller-facing failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class RequestValidationFailed(RegistryError):
    """One or more fields failed validation (400)."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors: list[str]):
        super().__init__(GeneralMessages.VALIDATION_FAILED, errors)


class NotFoundError(RegistryError):
    """Record is absent or not in the expected state (404)."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(RegistryError):
    """Uniqueness, dependency or version conflict (409)."""

    status_code = status.HTTP_409_CONFLICT
