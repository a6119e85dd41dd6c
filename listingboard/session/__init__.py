"""
Client session lifecycle - idle timeout, warning countdown, auto-logout,
plus the client-local listings cache.
"""

from listingboard.session.events import SessionEvents
from listingboard.session.local_listings import CapacityError, LocalListingStore
from listingboard.session.manager import SessionManager, SessionState, SessionUser
from listingboard.session.storage import (
    JsonFileStorage, KeyValueStorage, MemoryStorage, StorageUnavailable,
)
from listingboard.session.timers import AsyncioScheduler, ManualScheduler

__all__ = [
    "AsyncioScheduler",
    "CapacityError",
    "JsonFileStorage",
    "KeyValueStorage",
    "LocalListingStore",
    "ManualScheduler",
    "MemoryStorage",
    "SessionEvents",
    "SessionManager",
    "SessionState",
    "SessionUser",
    "StorageUnavailable",
]
