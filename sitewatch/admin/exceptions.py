"""Exception hierarchy for the administrative action surface."""

from __future__ import annotations


class AdminError(Exception):
    """Base exception for administrative action failures."""

    status = 400


class PermissionDeniedError(AdminError):
    """Caller is not authenticated or not allowed to manage warnings."""

    status = 403

    def __init__(self, message: str = "Permission denied.") -> None:
        super().__init__(message)


class InvalidNonceError(AdminError):
    """Request-forgery token missing, expired, or forged."""

    status = 403

    def __init__(self, message: str = "Invalid security token.") -> None:
        super().__init__(message)


class InvalidRequestError(AdminError):
    """A required parameter is missing or out of range."""

    def __init__(self, message: str = "Invalid request.") -> None:
        super().__init__(message)
