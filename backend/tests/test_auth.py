from datetime import datetime, timedelta, timezone
from http import HTTPStatus

from dating_api.core.security import decode_access_token
from dating_api.models.user import User

LONG_AGO = datetime(2000, 1, 1)


PUBLIC_FIELDS = {
    "id", "name", "nickname", "email", "role", "avatar_url", "bio", "location",
    "birthday", "gender", "is_verified", "interested_in_genders", "interested_in_roles",
}


def test_register_returns_token_for_created_user(client, profile_factory):
    response = client.post("/api/auth/register", json=profile_factory())
    assert response.status_code == HTTPStatus.CREATED

    body = response.json()
    assert body["message"] == "User registered successfully"
    assert set(body["user"]) == PUBLIC_FIELDS
    assert decode_access_token(body["token"])["userId"] == body["user"]["id"]


def test_register_applies_defaults_and_normalization(client, profile_factory):
    payload = profile_factory(email="  Alice@Example.COM ", nickname="  alice  ")
    body = client.post("/api/auth/register", json=payload).json()

    user = body["user"]
    assert user["email"] == "alice@example.com"
    assert user["nickname"] == "alice"
    assert user["avatar_url"] == ""
    assert user["bio"] == ""
    assert user["location"] == ""
    assert user["is_verified"] is False
    assert user["birthday"] == "1995-04-02"
    assert user["interested_in_genders"] == ["male", "other"]
    assert user["interested_in_roles"] == ["man"]


def test_register_duplicate_email_names_email(client, register_user, profile_factory):
    register_user()

    response = client.post(
        "/api/auth/register", json=profile_factory(nickname="someone-else"))
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json() == {"error": "Duplicate field value entered", "field": "email"}


def test_register_duplicate_email_is_case_insensitive(client, register_user, profile_factory):
    register_user()

    response = client.post(
        "/api/auth/register",
        json=profile_factory(nickname="other", email="ALICE@example.com"))
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()["field"] == "email"


def test_register_duplicate_nickname_names_nickname(client, register_user, profile_factory):
    register_user()

    response = client.post(
        "/api/auth/register", json=profile_factory(email="other@example.com"))
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json() == {"error": "Duplicate field value entered", "field": "nickname"}


def test_register_rejects_invalid_fields(client, profile_factory):
    payload = profile_factory(
        email="not-an-email",
        password="123",
        role="robot",
        gender="unknown",
        birthday="yesterday",
        interested_in_roles="man",
    )
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == HTTPStatus.BAD_REQUEST

    body = response.json()
    assert body["error"] == "Validation Error"
    assert set(body["details"]) == {
        "Please enter a valid email",
        "Password must be at least 6 characters long",
        "Invalid role",
        "Invalid gender",
        "Invalid birthday format",
        "Interested in roles must be an array",
    }


def test_register_reports_missing_and_blank_fields(client, profile_factory):
    payload = profile_factory(name="   ")
    del payload["nickname"]

    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert set(response.json()["details"]) == {"Name cannot be empty", "Nickname is required"}


def test_register_rejects_unknown_list_values(client, profile_factory):
    response = client.post(
        "/api/auth/register",
        json=profile_factory(interested_in_genders=["male", "robot"]))
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()["details"] == ["Invalid gender"]


def test_register_rejects_non_iso_birthday(client, profile_factory):
    for birthday in (0, 799459200, "799459200", True):
        response = client.post("/api/auth/register", json=profile_factory(birthday=birthday))
        assert response.status_code == HTTPStatus.BAD_REQUEST, birthday
        assert response.json()["details"] == ["Invalid birthday format"]


def test_register_treats_null_as_missing(client, profile_factory):
    response = client.post(
        "/api/auth/register", json=profile_factory(name=None, role=None, birthday=None))
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert set(response.json()["details"]) == {
        "Name is required",
        "Role is required",
        "Birthday is required",
    }


def test_login_returns_token_for_user(client, register_user):
    registered = register_user()

    response = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert response.status_code == HTTPStatus.OK

    body = response.json()
    assert body["message"] == "Login successful"
    assert set(body["user"]) == PUBLIC_FIELDS
    assert decode_access_token(body["token"])["userId"] == registered["user"]["id"]


def test_login_writes_current_time_to_last_active(client, register_user, auth_headers, db_session):
    registered = register_user()
    db_session.query(User).filter(User.id == registered["user"]["id"]).update(
        {"last_active_at": LONG_AGO})
    db_session.commit()

    headers = auth_headers(registered["token"])
    stale = client.get("/api/auth/me", headers=headers).json()["user"]
    assert datetime.fromisoformat(stale["last_active_at"]) == LONG_AGO

    response = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert response.status_code == HTTPStatus.OK

    fresh = client.get("/api/auth/me", headers=headers).json()["user"]
    last_active = datetime.fromisoformat(fresh["last_active_at"]).replace(tzinfo=None)
    assert last_active > LONG_AGO
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    assert abs(now - last_active) < timedelta(minutes=1)


def test_login_email_is_case_insensitive(client, register_user):
    register_user()

    response = client.post(
        "/api/auth/login", json={"email": "ALICE@example.com", "password": "secret123"})
    assert response.status_code == HTTPStatus.OK


def test_login_failures_are_indistinguishable(client, register_user):
    register_user()

    wrong_password = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"})
    unknown_email = client.post(
        "/api/auth/login", json={"email": "nobody@example.com", "password": "secret123"})

    assert wrong_password.status_code == HTTPStatus.UNAUTHORIZED
    assert unknown_email.status_code == HTTPStatus.UNAUTHORIZED
    assert wrong_password.json() == unknown_email.json() == {"error": "Invalid email or password"}


def test_login_requires_email_and_password(client):
    response = client.post("/api/auth/login", json={"email": "bad", "password": ""})
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert set(response.json()["details"]) == {
        "Please enter a valid email",
        "Password cannot be empty",
    }


def test_me_returns_full_profile(client, register_user, auth_headers):
    registered = register_user()

    response = client.get("/api/auth/me", headers=auth_headers(registered["token"]))
    assert response.status_code == HTTPStatus.OK

    user = response.json()["user"]
    assert user["id"] == registered["user"]["id"]
    assert user["created_at"] is not None
    assert user["last_active_at"] is not None
    assert "is_deleted" not in user


def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == HTTPStatus.UNAUTHORIZED
    assert response.json() == {"error": "Authentication required"}


def test_password_never_serialized(client, register_user, auth_headers):
    registered = register_user()
    headers = auth_headers(registered["token"])
    user_id = registered["user"]["id"]

    bodies = [
        registered,
        client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "secret123"}).json(),
        client.get("/api/auth/me", headers=headers).json(),
        client.get(f"/api/users/{user_id}", headers=headers).json(),
        client.patch("/api/users/me", json={"bio": "hi"}, headers=headers).json(),
    ]
    for body in bodies:
        assert "password" not in body["user"]
        assert "hashed_password" not in body["user"]
        assert "secret123" not in str(body)
