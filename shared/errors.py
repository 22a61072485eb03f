"""
Defines custom exceptions so the HTTP layer can map failures to responses.
"""

from typing import Optional


class RemixBankError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(RemixBankError):
    """Raised for invalid configuration values."""


class StoreNotConfiguredError(RemixBankError):
    """Raised when a request needs the object store but no store is bound."""


class StoreUnavailableError(RemixBankError):
    """Raised when the object store cannot be reached or answers with an unexpected error."""


class RangeNotSatisfiableError(RemixBankError):
    """
    Raised when a requested byte range starts at or beyond the end of the object.
    """

    def __init__(self, total_size: int, message: Optional[str] = None):
        self.total_size = total_size
        super().__init__(message or f"Range not satisfiable for object of {total_size} bytes")
