import pytest
from fastapi.testclient import TestClient

from listingboard.core import auth
from listingboard.core.config import Settings
from listingboard.db.postgres import Database
from listingboard.db.tables import create_all
from listingboard.main import create_app

ADMIN_EMAIL = "admin@example.com"
ADMIN_OVERRIDE_PASSWORD = "break-glass-secret"


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    # bcrypt at default cost makes the suite slow
    monkeypatch.setattr(
        auth, "pwd_context", auth.CryptContext(schemes=["bcrypt"], bcrypt__rounds=4)
    )


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_OVERRIDE_PASSWORD,
        admin_emails=[ADMIN_EMAIL, "boss@example.com"],
        jwt_secret_key="test-secret",
        environment="test",
    )


@pytest.fixture
def database(settings):
    db = Database.from_settings(settings)
    create_all(db.engine)
    yield db
    db.dispose()


@pytest.fixture
def client(settings, database):
    app = create_app(settings=settings, database=database)
    with TestClient(app) as c:
        yield c


def signup(client, email="jane@example.com", password="secret123", **extra):
    body = {"email": email, "password": password, "first_name": "Jane", "last_name": "Doe"}
    body.update(extra)
    return client.post("/auth/signup", json=body)


def login_headers(client, email, password):
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    signup(client, email=ADMIN_EMAIL, password="adminpass")
    return login_headers(client, ADMIN_EMAIL, "adminpass")


@pytest.fixture
def user_headers(client):
    signup(client, email="user@example.com", password="userpass")
    return login_headers(client, "user@example.com", "userpass")


def listing_body(**overrides):
    body = {
        "title": "Web Development Internship",
        "short_description": "Build modern web apps with a professional team",
        "full_details": "## About\n\nReal projects.\n\n### What You'll Learn:\n- APIs\n- Testing",
        "apply_url": "https://example.com/apply/web",
        "has_certification": True,
        "location": "Remote",
        "duration": "6 months",
        "deadline": "2026-12-31",
    }
    body.update(overrides)
    return body
