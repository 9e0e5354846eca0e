"""Tests for the user (email sign-in) endpoints."""

from taskapi.services.auth import get_token_service

USERS_URL = "/api/users"


class TestLoginOrRegister:
    """POST /api/users."""

    def test_first_call_creates_second_finds(self, client):
        """The same address registers once, then signs in."""
        first = client.post(USERS_URL, json={"mail": "a@b.com"})
        second = client.post(USERS_URL, json={"mail": "a@b.com"})

        assert first.status_code == 201
        assert first.json()["exists"] is False
        assert first.json()["message"] == "User created successfully"
        assert second.status_code == 200
        assert second.json()["exists"] is True
        assert second.json()["message"] == "User already exists"
        assert first.json()["token"]
        assert second.json()["token"]
        assert first.json()["user"]["id"] == second.json()["user"]["id"]

    def test_mail_is_normalized(self, client, user_repository):
        response = client.post(USERS_URL, json={"mail": "  Foo@BAR.com  "})

        body = response.json()
        assert body["user"]["mail"] == "foo@bar.com"
        assert [user.mail for user in user_repository.users.values()] == ["foo@bar.com"]

    def test_response_exposes_only_safe_fields(self, client):
        body = client.post(USERS_URL, json={"mail": "a@b.com"}).json()

        assert body["data"] is None
        assert set(body["user"]) == {"id", "mail"}

    def test_token_identifies_the_user(self, client):
        body = client.post(USERS_URL, json={"mail": "a@b.com"}).json()

        identity = get_token_service().verify(body["token"])

        assert identity.user_id == body["user"]["id"]
        assert identity.mail == "a@b.com"

    def test_invalid_mail(self, client):
        response = client.post(USERS_URL, json={"mail": "not-an-email"})

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Invalid email format"
        assert body["errors"][0]["field"] == "mail"

    def test_missing_mail(self, client):
        response = client.post(USERS_URL, json={})

        assert response.status_code == 400
        assert response.json()["message"] == "Mail is required"


class TestLoginByMail:
    """GET /api/users/{mail}."""

    def test_existing_user(self, client):
        client.post(USERS_URL, json={"mail": "a@b.com"})

        response = client.get(f"{USERS_URL}/A@B.com")

        assert response.status_code == 200
        body = response.json()
        assert body["exists"] is True
        assert body["token"]
        assert body["user"]["mail"] == "a@b.com"

    def test_unknown_user(self, client):
        response = client.get(f"{USERS_URL}/nobody@example.com")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["exists"] is False

    def test_invalid_mail(self, client):
        response = client.get(f"{USERS_URL}/not-an-email")

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "mail"


class TestCurrentUser:
    """GET /api/users/me."""

    def test_profile(self, client):
        token = client.post(USERS_URL, json={"mail": "a@b.com"}).json()["token"]

        response = client.get(f"{USERS_URL}/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["data"]["mail"] == "a@b.com"

    def test_requires_token(self, client):
        response = client.get(f"{USERS_URL}/me")

        assert response.status_code == 401

    def test_deleted_user(self, client, auth_headers):
        """A valid token for a user that no longer exists is 404."""
        response = client.get(f"{USERS_URL}/me", headers=auth_headers("665f1c2e8b3a4d0012345678"))

        assert response.status_code == 404
