import pytest

from secure_app.services import users as user_store

GOOD_PASSWORD = "Abc123!@"
GENERIC_LOGIN_ERROR = {"error": "Invalid email or password."}


def register(client, email="alice@example.com", password=GOOD_PASSWORD, confirm=None):
    return client.post(
        "/api/register",
        json={"email": email, "password": password, "confirmPassword": confirm if confirm is not None else password},
    )


def login(client, email="alice@example.com", password=GOOD_PASSWORD):
    return client.post("/api/login", json={"email": email, "password": password})


def test_register_then_whoami(client):
    r = register(client, email="  Alice@Example.COM ")

    assert r.status_code == 200
    assert r.json() == {"success": True, "role": "user"}
    assert "secure_app_session" in client.cookies

    me = client.get("/api/me").json()["user"]
    assert me["email"] == "alice@example.com"
    assert me["role"] == "user"
    assert isinstance(me["id"], int)


def test_session_cookie_attributes(client):
    r = register(client)

    cookie = r.headers["set-cookie"].lower()
    assert cookie.startswith("secure_app_session=")
    assert "httponly" in cookie
    assert "samesite=lax" in cookie
    assert "max-age=604800" in cookie
    assert "path=/" in cookie
    assert "secure" not in cookie.replace("secure_app_session", "")


def test_duplicate_registration_is_conflict_and_keeps_original_password(client):
    assert register(client).status_code == 200
    client.post("/api/logout")

    r = register(client, email="ALICE@example.com", password="Zyx987#$")

    assert r.status_code == 409
    assert r.json() == {"error": "An account with this email already exists."}
    assert "set-cookie" not in r.headers
    assert login(client, password="Zyx987#$").status_code == 401
    assert login(client).status_code == 200


def test_duplicate_registration_race_is_settled_by_unique_index(client, monkeypatch):
    assert register(client).status_code == 200

    async def _never_found(session, email):
        return None

    # Simulate a second request whose existence check ran before the first insert.
    monkeypatch.setattr(user_store, "get_user_by_email", _never_found)
    r = register(client, email="alice@EXAMPLE.com")

    assert r.status_code == 409
    assert r.json() == {"error": "An account with this email already exists."}


@pytest.mark.parametrize("password", ["Ab1!", "ABCDEFG1!", "abcdefg1!", "Abcdefgh!", "Abcdefgh1"])
def test_register_rejects_weak_password(client, password):
    r = register(client, password=password)

    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation failed"
    assert body["details"]["password"]
    assert client.get("/api/me").json() == {"user": None}


def test_register_confirmation_mismatch(client):
    r = register(client, confirm="Abc123!#")

    assert r.status_code == 400
    assert r.json()["details"] == {"confirmPassword": ["Passwords do not match"]}


def test_register_invalid_json(client):
    r = client.post("/api/register", content=b"{not json", headers={"content-type": "application/json"})

    assert r.status_code == 400
    assert r.json()["details"] == {"form": ["Request body must be valid JSON"]}


def test_login_success_sets_session(client):
    register(client)
    client.post("/api/logout")
    assert client.get("/api/me").json() == {"user": None}

    r = login(client, email="ALICE@Example.com")

    assert r.status_code == 200
    assert r.json() == {"success": True, "role": "user"}
    assert client.get("/api/me").json()["user"]["email"] == "alice@example.com"


def test_login_failures_are_indistinguishable(client):
    register(client)
    client.post("/api/logout")

    wrong_password = login(client, password="wrongpass")
    unknown_email = login(client, email="bob@example.com", password="wrongpass")

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == GENERIC_LOGIN_ERROR
    assert "set-cookie" not in wrong_password.headers
    assert client.get("/api/me").json() == {"user": None}


def test_login_validation_error(client):
    r = client.post("/api/login", json={"email": "alice@example.com"})

    assert r.status_code == 400
    assert r.json()["details"] == {"password": ["Password is required"]}


def test_login_with_corrupt_stored_hash_is_rejected(client, run_db):
    register(client)
    client.post("/api/logout")

    async def _corrupt(session):
        user = await user_store.get_user_by_email(session, "alice@example.com")
        user.password_hash = "not-a-hash"

    run_db(_corrupt)

    r = login(client)
    assert r.status_code == 401
    assert r.json() == GENERIC_LOGIN_ERROR


def test_unexpected_store_failure_is_generic_500(client, monkeypatch):
    async def _boom(session, email):
        raise RuntimeError("connection refused")

    monkeypatch.setattr(user_store, "get_user_by_email", _boom)

    r = register(client)
    assert r.status_code == 500
    assert r.json() == {"error": "Registration failed."}

    r = login(client)
    assert r.status_code == 500
    assert r.json() == {"error": "Login failed."}


def test_logout_is_idempotent(client):
    register(client)

    for _ in range(2):
        r = client.post("/api/logout")
        assert r.status_code == 200
        assert r.json() == {"success": True}
        assert client.get("/api/me").json() == {"user": None}


def test_logout_without_session(client):
    r = client.post("/api/logout")

    assert r.status_code == 200
    assert r.json() == {"success": True}


def test_logout_reports_success_even_if_destroy_fails(client, app, monkeypatch):
    register(client)

    def _fail(response, session):
        raise RuntimeError("boom")

    monkeypatch.setattr(app.state.session_manager, "destroy", _fail)

    r = client.post("/api/logout")
    assert r.status_code == 200
    assert r.json() == {"success": True}


def test_whoami_anonymous(client):
    r = client.get("/api/me")

    assert r.status_code == 200
    assert r.json() == {"user": None}


def test_whoami_with_forged_cookie(client):
    client.cookies.set("secure_app_session", "forged-value")

    assert client.get("/api/me").json() == {"user": None}


def test_production_cookie_is_secure(tmp_path):
    from fastapi.testclient import TestClient

    from conftest import make_settings
    from secure_app.main import create_app

    app = create_app(make_settings(tmp_path, production=True))
    with TestClient(app, base_url="https://testserver") as client:
        r = register(client)

        assert r.status_code == 200
        assert "; secure" in r.headers["set-cookie"].lower()
        assert client.get("/api/me").json()["user"]["email"] == "alice@example.com"
