"""
HotelOps Local Storage
Object store for record collections and settings, plus immediate-write
session slots.
"""
from .models import (
    COLLECTIONS,
    ObjectStore,
    SessionSlots,
    UnknownCollectionError,
)

__all__ = [
    "COLLECTIONS",
    "ObjectStore",
    "SessionSlots",
    "UnknownCollectionError",
]
