"""Errors raised by entity and session operations."""
from typing import Optional

ADMIN_ONLY_MESSAGE = "Access Denied: The Admin Panel is restricted to administrators."


class OpsError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(OpsError):
    """A required form field is missing or invalid. Nothing was written."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotAuthenticated(OpsError):
    status_code = 401

    def __init__(self, message: str = "Not logged in"):
        super().__init__(message)


class AccessDenied(OpsError):
    status_code = 403

    def __init__(self, message: str = ADMIN_ONLY_MESSAGE):
        super().__init__(message)


class NotFound(OpsError):
    status_code = 404
