from sqlalchemy import text

from conftest import ADMIN_EMAIL, ADMIN_OVERRIDE_PASSWORD, login_headers, signup


def _rows(database, email):
    with database.session() as db:
        return db.execute(
            text("SELECT email, password_hash, role FROM users WHERE email = :e"), {"e": email}
        ).fetchall()


def test_signup_returns_public_fields_and_hashes_password(client, database):
    response = signup(client, email="Jane@Example.com", password="secret123", phone="555-0101")
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["email"] == "jane@example.com"
    assert user["first_name"] == "Jane"
    assert user["name"] == "Jane Doe"
    assert user["role"] == "user"
    assert user["phone"] == "555-0101"
    assert "password_hash" not in user
    assert "password" not in user

    rows = _rows(database, "jane@example.com")
    assert len(rows) == 1
    assert rows[0].password_hash != "secret123"
    assert rows[0].password_hash.startswith("$2")


def test_signup_assigns_admin_role_from_allow_list(client):
    response = signup(client, email="BOSS@example.com")
    assert response.status_code == 201
    assert response.json()["user"]["role"] == "admin"


def test_signup_accepts_camel_case_fields(client):
    response = client.post("/auth/signup", json={
        "email": "camel@example.com", "password": "secret123",
        "firstName": "Cam", "lastName": "El",
    })
    assert response.status_code == 201
    assert response.json()["user"]["last_name"] == "El"


def test_duplicate_signup_conflicts_without_second_row(client, database):
    assert signup(client, email="dup@example.com").status_code == 201
    response = signup(client, email="DUP@example.com")
    assert response.status_code == 409
    assert response.json() == {"error": "Email already registered"}
    assert len(_rows(database, "dup@example.com")) == 1


def test_signup_validation_failures(client):
    missing = client.post("/auth/signup", json={"email": "a@b.co", "password": "secret123"})
    assert missing.status_code == 400
    assert missing.json()["error"] == "Missing required fields"

    bad_email = signup(client, email="not-an-email")
    assert bad_email.status_code == 400
    assert bad_email.json()["error"] == "Invalid email format"

    short = signup(client, email="short@example.com", password="12345")
    assert short.status_code == 400
    assert "at least 6" in short.json()["error"]

    unknown = signup(client, email="extra@example.com", is_admin=True)
    assert unknown.status_code == 400


def test_login_is_case_insensitive(client):
    signup(client, email="mixed@example.com", password="secret123")
    response = client.post("/auth/login", json={"email": "MiXeD@Example.COM", "password": "secret123"})
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"].lower() == "mixed@example.com"
    assert body["token_type"] == "bearer"
    assert body["access_token"]


def test_login_failures_are_uniform(client):
    signup(client, email="known@example.com", password="secret123")
    wrong = client.post("/auth/login", json={"email": "known@example.com", "password": "nope-nope"})
    unknown = client.post("/auth/login", json={"email": "ghost@example.com", "password": "secret123"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"error": "Invalid email or password"}


def test_login_requires_both_fields(client):
    response = client.post("/auth/login", json={"email": "", "password": "x"})
    assert response.status_code == 400


def test_admin_override_password(client, database):
    signup(client, email=ADMIN_EMAIL, password="real-password")
    response = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_OVERRIDE_PASSWORD})
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"

    # the normal hash still works too
    assert client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": "real-password"}).status_code == 200


def test_override_password_only_applies_to_admin_email(client):
    signup(client, email="other@example.com", password="secret123")
    response = client.post("/auth/login", json={"email": "other@example.com", "password": ADMIN_OVERRIDE_PASSWORD})
    assert response.status_code == 401


def test_me_requires_valid_token(client):
    signup(client, email="me@example.com", password="secret123")
    headers = login_headers(client, "me@example.com", "secret123")
    response = client.get("/auth/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "me@example.com"

    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_routes_are_also_served_under_api_prefix(client):
    response = client.post("/api/auth/signup", json={
        "email": "prefixed@example.com", "password": "secret123",
        "first_name": "P", "last_name": "X",
    })
    assert response.status_code == 201
