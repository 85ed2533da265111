# stockboard/errors.py
from __future__ import annotations

from typing import Optional


class StockboardError(Exception):
    """Base class for errors surfaced to the user."""


class AuthError(StockboardError):
    """
    Sign-in / sign-up failures.
    `code` mirrors the identity backend error code, `message` is user-facing.
    """

    INVALID_CREDENTIAL = "invalid-credential"
    EMAIL_IN_USE = "email-already-in-use"
    NOT_SIGNED_IN = "not-signed-in"

    _MESSAGES = {
        INVALID_CREDENTIAL: "Invalid email or password.",
        EMAIL_IN_USE: "This email is already in use.",
        NOT_SIGNED_IN: "You must be signed in to do that.",
    }

    def __init__(self, code: str, message: Optional[str] = None) -> None:
        self.code = code
        self.message = message or self._MESSAGES.get(code, "Something went wrong. Please try again.")
        super().__init__(self.message)


class WriteError(StockboardError):
    """A create/update/delete against the record store failed; stored state is unchanged."""

    def __init__(self, message: str, record_id: Optional[str] = None) -> None:
        self.record_id = record_id
        super().__init__(message)


class ValidationError(StockboardError, ValueError):
    """Bad user input caught before any request is sent."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")
