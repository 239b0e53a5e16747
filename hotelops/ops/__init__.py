"""
HotelOps Operations
Application state, operator session and the entity operations behind the API.
"""
from .errors import AccessDenied, NotAuthenticated, NotFound, OpsError, ValidationError
from .session import SessionManager
from .state import HotelOpsState

__all__ = [
    "AccessDenied",
    "HotelOpsState",
    "NotAuthenticated",
    "NotFound",
    "OpsError",
    "SessionManager",
    "ValidationError",
]
