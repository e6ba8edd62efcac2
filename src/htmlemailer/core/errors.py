"""Exception types shared by the client library and the proxy."""

from __future__ import annotations

from typing import Optional


class EmailerError(Exception):
    """Base class for every error raised by htmlemailer."""


class InvalidInputError(EmailerError):
    """Input has the wrong shape (not a string, missing, oversized)."""


class MissingFieldError(InvalidInputError):
    """A required request field is absent or blank."""


class UnsafeContentError(EmailerError):
    """HTML was classified unsafe. ``reason`` is shown to the user verbatim."""

    def __init__(self, reason: str, rule: Optional[str] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.rule = rule


class ProviderUnavailableError(EmailerError):
    """The email provider could not be reached at all."""


class SendError(EmailerError):
    """A send attempt failed; the message is caller-facing."""


class ProviderError(SendError):
    """The proxy or provider answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
