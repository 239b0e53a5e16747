"""
HotelOps Persistence
Hydrate-then-sync state containers with debounced write-back.
"""
from .scheduler import WriteScheduler
from .state import PersistentState, KIND_STORE, KIND_SETTING

__all__ = [
    "WriteScheduler",
    "PersistentState",
    "KIND_STORE",
    "KIND_SETTING",
]
