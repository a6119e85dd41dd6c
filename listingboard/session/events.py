"""Publish/subscribe helper for session lifecycle notifications."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, List

from listingboard.core.logging_config import get_logger

logger = get_logger(__name__)

Listener = Callable[[Dict[str, Any]], None]


class SessionEvents:
    """Synchronous fan-out of {"type", "payload", "ts"} messages."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event_type: str, payload: Dict[str, Any]) -> None:
        message = {"type": event_type, "payload": payload, "ts": time.time()}
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception:
                # A broken listener must not stop the session timers
                logger.exception("Session listener failed on %s", event_type)
