"""
Client session lifecycle: who is logged in, and when that belief expires.

States:
    LOGGED_OUT -> login() -> ACTIVE
    ACTIVE -> (idle for timeout - warning) -> WARNING
    WARNING -> activity / extend_session() -> ACTIVE
    WARNING -> (idle for timeout) -> LOGGED_OUT, "expired" event
    any -> logout() -> LOGGED_OUT

The record lives in a key-value store under "user" and "lastActivity"
(milliseconds since the epoch). It is advisory only: the API checks the
bearer token on every privileged request.
"""

from __future__ import annotations

import json
import math
import uuid
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from listingboard.core.logging_config import get_logger
from listingboard.session.events import SessionEvents
from listingboard.session.storage import KeyValueStorage, StorageUnavailable
from listingboard.session.timers import Scheduler, TimerHandle

logger = get_logger(__name__)

USER_KEY = "user"
ACTIVITY_KEY = "lastActivity"

TRACKED_EVENTS = frozenset({"mousedown", "keydown", "scroll", "touchstart", "click"})

EXPIRED_NOTICE = "Your session has expired due to inactivity. Please log in again."
LOGIN_PATH = "/auth/login"


class SessionState(str, Enum):
    LOGGED_OUT = "logged_out"
    ACTIVE = "active"
    WARNING = "warning"


@dataclass
class SessionUser:
    id: str
    email: str
    name: str
    role: str = "user"

    @classmethod
    def from_dict(cls, data: dict) -> "SessionUser":
        return cls(
            id=str(data["id"]),
            email=data["email"],
            name=data.get("name") or data["email"].split("@")[0],
            role=data.get("role") or "user",
        )


class SessionManager:
    """Idle-timeout tracker with a warning window before forced logout."""

    def __init__(
        self,
        storage: KeyValueStorage,
        scheduler: Scheduler,
        *,
        timeout: float = 300,
        warning: float = 60,
        welcome_seconds: float = 5,
        admin_emails: Iterable[str] = (),
        current_path: Optional[Callable[[], str]] = None,
        events: Optional[SessionEvents] = None,
    ) -> None:
        if warning < 0 or timeout <= 0 or warning >= timeout:
            raise ValueError("need 0 <= warning < timeout")
        self.storage = storage
        self.scheduler = scheduler
        self.timeout = timeout
        self.warning = warning
        self.welcome_seconds = welcome_seconds
        self.admin_emails = {e.strip().lower() for e in admin_emails}
        self.current_path = current_path or (lambda: "/")
        self.events = events or SessionEvents()

        self.user: Optional[SessionUser] = None
        self.state = SessionState.LOGGED_OUT
        self.show_welcome = False
        self.expires_at: Optional[float] = None
        self.last_notice: Optional[str] = None
        self.redirect_to: Optional[str] = None

        self._warning_timer: Optional[TimerHandle] = None
        self._expiry_timer: Optional[TimerHandle] = None
        self._welcome_timer: Optional[TimerHandle] = None

    @classmethod
    def from_settings(cls, settings, storage: KeyValueStorage, scheduler: Scheduler, **kwargs) -> "SessionManager":
        return cls(
            storage,
            scheduler,
            timeout=settings.session_timeout_seconds,
            warning=settings.session_warning_seconds,
            admin_emails=settings.admin_allow_list(),
            **kwargs,
        )

    # ------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        """Display hint only."""
        return self.user is not None and self.user.role == "admin"

    @property
    def show_session_warning(self) -> bool:
        return self.state is SessionState.WARNING

    def countdown(self) -> Optional[int]:
        """Whole seconds left before forced logout, while the warning is shown."""
        if self.state is not SessionState.WARNING or self.expires_at is None:
            return None
        remaining = math.ceil(self.expires_at - self.scheduler.now())
        return int(min(self.warning, max(0, remaining)))

    # ------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------

    def restore(self) -> SessionState:
        """Pick up a persisted session on load, or discard it if it went stale."""
        try:
            raw_user = self.storage.get_item(USER_KEY)
            raw_activity = self.storage.get_item(ACTIVITY_KEY)
        except StorageUnavailable as exc:
            logger.warning("Session storage unavailable: %s", exc)
            self._reset_memory()
            return self.state

        if not raw_user or not raw_activity:
            return self.state

        try:
            user = SessionUser.from_dict(json.loads(raw_user))
            last_activity = int(raw_activity) / 1000.0
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding unreadable session record: %s", exc)
            self.logout()
            return self.state

        now = self.scheduler.now()
        # a timestamp ahead of the clock never buys more than one full window
        last_activity = min(last_activity, now)
        elapsed = now - last_activity
        if elapsed > self.timeout:
            logger.info("Stored session for %s is stale (%.0fs idle)", user.email, elapsed)
            self.logout()
            return self.state

        self.user = user
        self.state = SessionState.ACTIVE
        self._arm(last_activity)
        return self.state

    def login(self, email: str, name: Optional[str] = None, role: Optional[str] = None) -> Optional[SessionUser]:
        """Start a session. Returns None, and stays logged out, if storage refuses the record."""
        if role is None:
            role = "admin" if email.strip().lower() in self.admin_emails else "user"
        user = SessionUser(
            id=uuid.uuid4().hex,
            email=email,
            name=name or email.split("@")[0],
            role=role,
        )
        self._cancel_timers()
        self.user = user
        self.state = SessionState.ACTIVE
        if not self._persist(USER_KEY, json.dumps(asdict(user))) or not self._touch():
            self._reset_memory()
            self._remove(USER_KEY)
            return None

        self.show_welcome = True
        self._cancel(self._welcome_timer)
        self._welcome_timer = self.scheduler.call_later(self.welcome_seconds, self.dismiss_welcome)

        self.events.publish("login", {"user": asdict(user)})
        return user

    def record_activity(self, event: str = "click") -> bool:
        """Handle a UI interaction. Returns True when it reset the timers."""
        if event not in TRACKED_EVENTS:
            return False
        if self.state is SessionState.LOGGED_OUT:
            return False
        if not self._touch():
            self._drop()
            return False
        self.events.publish("activity", {"event": event})
        return True

    def extend_session(self) -> bool:
        """'Stay logged in' from the warning dialog."""
        if self.state is not SessionState.WARNING:
            return False
        if not self._touch():
            self._drop()
            return False
        self.events.publish("activity", {"event": "extend"})
        return True

    def logout(self) -> None:
        was_logged_in = self.user is not None
        self._reset_memory()
        self._remove(USER_KEY)
        self._remove(ACTIVITY_KEY)
        if was_logged_in:
            self.events.publish("logout", {})

    def dismiss_welcome(self) -> None:
        self._cancel(self._welcome_timer)
        self._welcome_timer = None
        if self.show_welcome:
            self.show_welcome = False
            self.events.publish("welcome_dismissed", {})

    # ------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------

    def _touch(self) -> bool:
        """Record activity now and restart both timers from it. False if the write failed."""
        now = self.scheduler.now()
        if not self._persist(ACTIVITY_KEY, str(int(now * 1000))):
            return False
        self.state = SessionState.ACTIVE
        self._arm(now)
        return True

    def _arm(self, reference: float) -> None:
        """(Re)schedule warning and expiry from one reference instant."""
        self._cancel_timers()
        now = self.scheduler.now()
        self.expires_at = reference + self.timeout
        warn_at = self.expires_at - self.warning

        if warn_at <= now:
            self._enter_warning()
        else:
            self._warning_timer = self.scheduler.call_later(warn_at - now, self._enter_warning)
        self._expiry_timer = self.scheduler.call_later(self.expires_at - now, self._expire)

    def _enter_warning(self) -> None:
        self._warning_timer = None
        if self.state is SessionState.ACTIVE:
            self.state = SessionState.WARNING
            self.events.publish("warning", {"seconds": self.countdown()})

    def _expire(self) -> None:
        self._expiry_timer = None
        if self.user is None:
            return
        email = self.user.email
        self.logout()
        self.last_notice = EXPIRED_NOTICE
        logger.info("Session for %s expired after %ss idle", email, self.timeout)

        redirect = None
        if "/auth/" not in (self.current_path() or ""):
            redirect = LOGIN_PATH
        self.redirect_to = redirect
        self.events.publish("expired", {"message": EXPIRED_NOTICE, "redirect": redirect})

    def _drop(self) -> None:
        """Storage stopped accepting writes: forget the session instead of keeping an unpersisted one."""
        self._reset_memory()
        self._remove(USER_KEY)
        self._remove(ACTIVITY_KEY)
        self.events.publish("logout", {"reason": "storage"})

    def _reset_memory(self) -> None:
        self._cancel_timers()
        self._cancel(self._welcome_timer)
        self._welcome_timer = None
        self.user = None
        self.state = SessionState.LOGGED_OUT
        self.show_welcome = False
        self.expires_at = None

    def _cancel_timers(self) -> None:
        self._cancel(self._warning_timer)
        self._cancel(self._expiry_timer)
        self._warning_timer = None
        self._expiry_timer = None

    @staticmethod
    def _cancel(timer: Optional[TimerHandle]) -> None:
        if timer is not None:
            timer.cancel()

    def _persist(self, key: str, value: str) -> bool:
        try:
            self.storage.set_item(key, value)
        except StorageUnavailable as exc:
            logger.warning("Could not persist %s: %s", key, exc)
            return False
        return True

    def _remove(self, key: str) -> None:
        try:
            self.storage.remove_item(key)
        except StorageUnavailable as exc:
            logger.warning("Could not remove %s: %s", key, exc)
