import json

import pytest

from listingboard.core.config import Settings
from listingboard.session import (
    JsonFileStorage, ManualScheduler, MemoryStorage, SessionManager, SessionState,
    StorageUnavailable,
)
from listingboard.session.manager import ACTIVITY_KEY, EXPIRED_NOTICE, USER_KEY

T0 = 1_700_000_000.0


class BrokenStorage(MemoryStorage):
    def get_item(self, key):
        raise StorageUnavailable("blocked")

    def set_item(self, key, value):
        raise StorageUnavailable("blocked")

    def remove_item(self, key):
        raise StorageUnavailable("blocked")


class ReadOnlyStorage(MemoryStorage):
    """Reads work, writes are refused (quota exceeded, private mode)."""

    writable = False

    def set_item(self, key, value):
        if not self.writable:
            raise StorageUnavailable("quota exceeded")
        super().set_item(key, value)


@pytest.fixture
def scheduler():
    return ManualScheduler(start=T0)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def events():
    return []


@pytest.fixture
def manager(storage, scheduler, events):
    m = SessionManager(storage, scheduler, admin_emails=["admin@example.com"])
    m.events.subscribe(events.append)
    return m


def _types(events):
    return [e["type"] for e in events]


def test_login_persists_record_and_defaults(manager, storage):
    user = manager.login("jane.doe@example.com")
    assert manager.state is SessionState.ACTIVE
    assert user.name == "jane.doe"
    assert user.role == "user"
    assert json.loads(storage.get_item(USER_KEY))["email"] == "jane.doe@example.com"
    assert int(storage.get_item(ACTIVITY_KEY)) == int(T0 * 1000)


def test_login_role_from_allow_list_unless_given(manager):
    assert manager.login("Admin@Example.com").role == "admin"
    assert manager.is_admin
    assert manager.login("admin@example.com", role="user").role == "user"
    assert manager.login("x@example.com", name="X", role="admin").name == "X"


def test_no_warning_before_240s_and_logged_out_after_300s(manager, scheduler, events):
    manager.login("jane@example.com")
    scheduler.advance(239.5)
    assert manager.state is SessionState.ACTIVE
    assert not manager.show_session_warning

    scheduler.advance(0.5)
    assert manager.state is SessionState.WARNING
    assert manager.countdown() == 60

    scheduler.advance(59.5)
    assert manager.state is SessionState.WARNING
    assert manager.countdown() == 1

    scheduler.advance(0.5)
    assert manager.state is SessionState.LOGGED_OUT
    assert manager.user is None
    assert manager.last_notice == EXPIRED_NOTICE
    assert manager.redirect_to == "/auth/login"
    assert _types(events)[-2:] == ["logout", "expired"]


def test_activity_resets_expiry(manager, scheduler, storage):
    manager.login("jane@example.com")
    scheduler.advance(200)
    assert manager.record_activity("keydown")
    assert manager.expires_at == T0 + 200 + 300
    assert int(storage.get_item(ACTIVITY_KEY)) == int((T0 + 200) * 1000)

    scheduler.advance(299)
    assert manager.is_authenticated
    scheduler.advance(1)
    assert not manager.is_authenticated


def test_activity_clears_warning(manager, scheduler):
    manager.login("jane@example.com")
    scheduler.advance(250)
    assert manager.state is SessionState.WARNING
    manager.record_activity("scroll")
    assert manager.state is SessionState.ACTIVE
    assert manager.countdown() is None


def test_untracked_events_and_logged_out_activity_are_ignored(manager, scheduler):
    assert not manager.record_activity("click")
    manager.login("jane@example.com")
    scheduler.advance(100)
    assert not manager.record_activity("mousemove")
    assert manager.expires_at == T0 + 300


def test_extend_session_only_while_warning(manager, scheduler):
    manager.login("jane@example.com")
    assert not manager.extend_session()
    scheduler.advance(270)
    assert manager.extend_session()
    assert manager.state is SessionState.ACTIVE
    assert manager.expires_at == T0 + 270 + 300


def test_logout_from_any_state(manager, scheduler, storage):
    manager.logout()
    assert manager.state is SessionState.LOGGED_OUT

    manager.login("jane@example.com")
    scheduler.advance(250)
    manager.logout()
    assert manager.state is SessionState.LOGGED_OUT
    assert storage.get_item(USER_KEY) is None
    assert storage.get_item(ACTIVITY_KEY) is None
    assert scheduler.pending() == 0


def test_welcome_auto_dismisses(manager, scheduler, events):
    manager.login("jane@example.com")
    assert manager.show_welcome
    scheduler.advance(4.5)
    assert manager.show_welcome
    scheduler.advance(0.5)
    assert not manager.show_welcome
    assert "welcome_dismissed" in _types(events)


def test_welcome_dismiss_explicitly(manager):
    manager.login("jane@example.com")
    manager.dismiss_welcome()
    assert not manager.show_welcome


def test_restore_resumes_remaining_budget(storage, scheduler):
    first = SessionManager(storage, scheduler)
    first.login("jane@example.com")
    scheduler.advance(100)

    reloaded = SessionManager(storage, scheduler)
    assert reloaded.restore() is SessionState.ACTIVE
    assert reloaded.user.email == "jane@example.com"
    assert reloaded.expires_at == T0 + 300

    scheduler.advance(140)
    assert reloaded.state is SessionState.WARNING
    scheduler.advance(60)
    assert reloaded.state is SessionState.LOGGED_OUT


def test_restore_discards_stale_record(storage, scheduler):
    SessionManager(storage, scheduler).login("jane@example.com")
    later = ManualScheduler(start=T0 + 301)
    reloaded = SessionManager(storage, later)
    assert reloaded.restore() is SessionState.LOGGED_OUT
    assert storage.get_item(USER_KEY) is None


def test_restore_inside_warning_window(storage, scheduler):
    SessionManager(storage, scheduler).login("jane@example.com")
    later = ManualScheduler(start=T0 + 270)
    reloaded = SessionManager(storage, later)
    assert reloaded.restore() is SessionState.WARNING
    assert reloaded.countdown() == 30


def test_restore_never_grants_more_than_one_window(scheduler):
    ahead = str(int((T0 + 1000) * 1000))
    storage = MemoryStorage({USER_KEY: json.dumps({"id": "1", "email": "jane@example.com"}), ACTIVITY_KEY: ahead})
    manager = SessionManager(storage, scheduler)
    assert manager.restore() is SessionState.ACTIVE
    assert manager.expires_at == T0 + 300

    scheduler.advance(300)
    assert manager.state is SessionState.LOGGED_OUT


def test_restore_with_corrupt_record(scheduler):
    storage = MemoryStorage({USER_KEY: "{not json", ACTIVITY_KEY: str(int(T0 * 1000))})
    manager = SessionManager(storage, scheduler)
    assert manager.restore() is SessionState.LOGGED_OUT
    assert storage.get_item(USER_KEY) is None


def test_unavailable_storage_degrades_to_logged_out(scheduler):
    manager = SessionManager(BrokenStorage(), scheduler)
    assert manager.restore() is SessionState.LOGGED_OUT
    assert manager.login("jane@example.com") is None
    assert manager.state is SessionState.LOGGED_OUT
    assert not manager.is_authenticated
    manager.logout()
    assert manager.state is SessionState.LOGGED_OUT


def test_login_that_cannot_be_written_stays_logged_out(scheduler, events):
    storage = ReadOnlyStorage()
    manager = SessionManager(storage, scheduler)
    manager.events.subscribe(events.append)

    assert manager.login("jane@example.com") is None
    assert manager.state is SessionState.LOGGED_OUT
    assert manager.user is None
    assert not manager.show_welcome
    assert scheduler.pending() == 0
    assert "login" not in _types(events)


def test_activity_write_failure_logs_out(scheduler, events):
    storage = ReadOnlyStorage()
    storage.writable = True
    manager = SessionManager(storage, scheduler)
    manager.events.subscribe(events.append)
    manager.login("jane@example.com")
    manager.dismiss_welcome()

    storage.writable = False
    scheduler.advance(10)
    assert not manager.record_activity("keydown")
    assert manager.state is SessionState.LOGGED_OUT
    assert storage.get_item(USER_KEY) is None
    assert scheduler.pending() == 0
    assert _types(events)[-1] == "logout"


def test_no_redirect_when_already_on_auth_page(storage, scheduler):
    manager = SessionManager(storage, scheduler, current_path=lambda: "/auth/signup")
    manager.login("jane@example.com")
    scheduler.advance(300)
    assert manager.last_notice == EXPIRED_NOTICE
    assert manager.redirect_to is None


def test_rejects_warning_not_shorter_than_timeout(storage, scheduler):
    with pytest.raises(ValueError):
        SessionManager(storage, scheduler, timeout=60, warning=60)


def test_from_settings_uses_configured_windows(storage, scheduler):
    settings = Settings(_env_file=None, session_timeout_seconds=120, session_warning_seconds=30,
                        admin_emails=["chief@example.com"])
    manager = SessionManager.from_settings(settings, storage, scheduler)
    assert manager.login("chief@example.com").role == "admin"
    scheduler.advance(90)
    assert manager.state is SessionState.WARNING


def test_json_file_storage_survives_reload(tmp_path, scheduler):
    path = tmp_path / "session.json"
    SessionManager(JsonFileStorage(path), scheduler).login("jane@example.com")
    reloaded = SessionManager(JsonFileStorage(path), scheduler)
    assert reloaded.restore() is SessionState.ACTIVE


def test_broken_listener_does_not_stop_timers(manager, scheduler):
    def explode(message):
        raise RuntimeError("boom")

    manager.events.subscribe(explode)
    manager.login("jane@example.com")
    scheduler.advance(300)
    assert manager.state is SessionState.LOGGED_OUT
