"""Exception types raised by SMS Forwarder components."""

from __future__ import annotations


class SmsForwarderError(Exception):
    """Base class for all SMS Forwarder errors."""


class PermissionDenied(SmsForwarderError):
    """The device inbox cannot be read."""


class ValidationError(SmsForwarderError):
    """A required field is empty."""


class ApiError(SmsForwarderError):
    """The remote API answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthError(ApiError):
    """Authentication was rejected or returned no usable body."""


class NetworkError(SmsForwarderError):
    """Transport-level failure talking to the remote API."""


class PersistenceError(SmsForwarderError):
    """Reading or writing the settings store failed."""


class EmptyAuthResponse(AuthError):
    """Authentication returned 2xx without a usable token body."""
