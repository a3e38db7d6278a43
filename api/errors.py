"""Exceptions raised by the truck storage layer.

Every error carries a human-readable ``message`` which the HTTP layer returns
verbatim as ``{"error": message}``.
"""

from typing import Optional


class TruckStoreError(Exception):
    """Base class for truck storage errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TruckNotFoundError(TruckStoreError):
    """Raised when a truck id is absent from the store."""

    def __init__(self, truck_id: str):
        # Callers match on this exact wording
        super().__init__(f"Truck not found: {truck_id}")
        self.truck_id = truck_id


class InvalidFormatError(TruckStoreError):
    """Raised when an import document is malformed."""


class StoreUnavailableError(TruckStoreError):
    """Raised when the durable medium cannot be read, written or reached."""


class RequestFailedError(TruckStoreError):
    """Raised by the remote backend for a non-2xx response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidCredentialsError(Exception):
    """Raised when an admin login is rejected."""


class NotAuthenticatedError(Exception):
    """Raised when an admin session is required but missing."""
