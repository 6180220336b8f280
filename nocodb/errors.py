"""Exceptions raised by the NocoDB client."""

from typing import Any


class NocoDBError(Exception):
    """Base class for all NocoDB client failures."""


class NocoDBConfigError(NocoDBError):
    """Connection settings are missing or unusable."""


class NocoDBRequestError(NocoDBError):
    """An HTTP request to NocoDB failed."""

    def __init__(self, message: str, status: int | None = None, data: Any = None):
        super().__init__(message)
        self.status = status
        self.data = data


class NocoDBValidationError(NocoDBError):
    """A NocoDB response did not match the expected record schema."""

    def __init__(self, message: str, issues: list | None = None):
        super().__init__(message)
        self.issues = issues or []
