"""Tests for the /auth endpoints."""

from fastapi.testclient import TestClient

from src.library_api.entities import User
from tests.fixtures.core import DEFAULT_PASSWORD

REGISTRATION = {
    "fullName": "Reader One",
    "email": "reader@example.com",
    "password": "Str0ng!Pass",
    "username": "reader",
}


def _login(client: TestClient, identifier: str, password: str = DEFAULT_PASSWORD):
    return client.post("/auth/login", json={"identifier": identifier, "password": password})


class TestRegister:
    def test_register_returns_public_user(self, client: TestClient):
        response = client.post("/auth/register", json=REGISTRATION)

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "reader@example.com"
        assert body["fullName"] == "Reader One"
        assert body["role"] == "USER"
        assert "password" not in body
        assert "tokens" not in body

    def test_weak_password_lists_every_problem(self, client: TestClient):
        response = client.post("/auth/register", json={**REGISTRATION, "password": "weak"})

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Validation failed"
        assert "Password should contain at least one digit" in body["errors"]["password"]
        assert "Password should be at least 8 characters long" in body["errors"]["password"]

    def test_duplicate_email(self, client: TestClient, member: User):
        response = client.post(
            "/auth/register", json={**REGISTRATION, "email": "MEMBER@example.com", "username": "new"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "User with this email already exists"

    def test_role_cannot_be_chosen_at_registration(self, client: TestClient):
        response = client.post("/auth/register", json={**REGISTRATION, "role": "ADMIN"})

        assert response.status_code == 201
        assert response.json()["role"] == "USER"


class TestLogin:
    def test_login_with_email_or_username(self, client: TestClient, member: User):
        for identifier in ("member@example.com", "member"):
            response = _login(client, identifier)

            assert response.status_code == 200
            body = response.json()
            assert body["tokenType"] == "bearer"
            assert body["expiresIn"] > 0
            assert body["accessToken"]
            assert body["user"]["id"] == member.id

    def test_bad_credentials(self, client: TestClient, member: User):
        assert _login(client, "member", "Wr0ng!Pass").status_code == 401
        response = _login(client, "nobody@example.com")
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_missing_fields(self, client: TestClient):
        response = client.post("/auth/login", json={})

        assert response.status_code == 400
        assert set(response.json()["errors"]) == {"identifier", "password"}

    def test_token_grants_access(self, client: TestClient, member: User):
        token = _login(client, "member").json()["accessToken"]

        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["email"] == "member@example.com"

    def test_only_the_latest_tokens_are_kept(self, client: TestClient, member: User):
        tokens = [_login(client, "member").json()["accessToken"] for _ in range(6)]

        oldest = client.get("/auth/me", headers={"Authorization": f"Bearer {tokens[0]}"})
        newest = client.get("/auth/me", headers={"Authorization": f"Bearer {tokens[-1]}"})

        assert oldest.status_code == 401
        assert newest.status_code == 200


class TestLogout:
    def test_logout_revokes_token(self, client: TestClient, member: User):
        headers = {"Authorization": f"Bearer {_login(client, 'member').json()['accessToken']}"}

        response = client.post("/auth/logout", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}
        revoked = client.get("/auth/me", headers=headers)
        assert revoked.status_code == 401
        assert revoked.json()["detail"] == "Token has been revoked"

    def test_other_sessions_survive(self, client: TestClient, member: User):
        first = {"Authorization": f"Bearer {_login(client, 'member').json()['accessToken']}"}
        second = {"Authorization": f"Bearer {_login(client, 'member').json()['accessToken']}"}

        client.post("/auth/logout", headers=first)

        assert client.get("/auth/me", headers=second).status_code == 200

    def test_requires_token(self, client: TestClient):
        response = client.post("/auth/logout")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["detail"] == "Missing Bearer token"
