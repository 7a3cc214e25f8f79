from __future__ import annotations
from typing import List, Optional


class WishlistError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors: List[str] = list(errors or [])


class AuthorizationError(WishlistError):
    status_code = 401


class InputError(WishlistError):
    status_code = 400


class MalformedOptionError(InputError):
    pass


class NotFoundError(WishlistError):
    status_code = 404


class StorageError(WishlistError):
    """
    Persistence failed after the business logic ran. In-memory changes are not
    rolled back, so callers should re-read state instead of retrying blindly.
    """

    status_code = 500
