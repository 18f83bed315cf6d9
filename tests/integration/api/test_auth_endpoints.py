"""Integration tests for authentication endpoints."""

from datetime import timedelta

import jwt
import pytest
from fastapi.testclient import TestClient

from gatehouse_auth import JWTService
from gatehouse_auth.services.jwt_service import REFRESH_ALGORITHM

pytestmark = pytest.mark.integration


def _cleared(response, name: str) -> bool:
    return any(
        header.startswith(f"{name}=") and "max-age=0" in header.lower()
        for header in response.headers.get_list("set-cookie")
    )


def _register(client: TestClient, prefix: str, data: dict):
    response = client.post(f"{prefix}/auth/register", json=data)
    assert response.status_code == 201, response.text
    return response


class TestAuthRegister:
    """Tests for POST /api/v1/auth/register."""

    def test_register_success(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        signing_key,
        refresh_secret,
        db,
    ):
        """Register creates one identity and one session with verifiable tokens."""
        response = test_client.post(
            f"{api_v1_prefix}/auth/register",
            json={
                "firstName": "A",
                "lastName": "B",
                "email": "a@b.com",
                "password": "12345678",
            },
        )

        assert response.status_code == 201
        user_id = response.json()["id"]
        assert response.json() == {"id": user_id}

        assert db.scalar("SELECT count(*) FROM users") == 1
        assert db.scalar("SELECT count(*) FROM refresh_sessions") == 1

        access_token = response.cookies["accessToken"]
        refresh_token = response.cookies["refreshToken"]
        access = jwt.decode(
            access_token,
            signing_key.public_key,
            algorithms=["RS256"],
            issuer="auth-service",
        )
        refresh = jwt.decode(
            refresh_token,
            refresh_secret,
            algorithms=[REFRESH_ALGORITHM],
            issuer="auth-service",
        )
        assert access["sub"] == str(user_id)
        assert access["role"] == "customer"
        assert refresh["sub"] == str(user_id)
        session_id = db.scalar("SELECT id FROM refresh_sessions")
        assert refresh["id"] == str(session_id)

    def test_cookies_are_http_only_and_strict(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
    ):
        """Token cookies carry the documented attributes."""
        response = _register(test_client, api_v1_prefix, registered_user_data)

        headers = {
            header.split("=", 1)[0]: header.lower()
            for header in response.headers.get_list("set-cookie")
        }
        assert "max-age=3600" in headers["accessToken"]
        assert f"max-age={365 * 24 * 3600}" in headers["refreshToken"]
        for header in headers.values():
            assert "httponly" in header
            assert "samesite=strict" in header

    def test_register_duplicate_email(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
        db,
    ):
        """Registering the same email twice fails and keeps one identity."""
        _register(test_client, api_v1_prefix, registered_user_data)

        response = test_client.post(
            f"{api_v1_prefix}/auth/register",
            json=registered_user_data,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "DUPLICATE_EMAIL"
        assert db.scalar("SELECT count(*) FROM users") == 1
        assert db.scalar("SELECT count(*) FROM refresh_sessions") == 1

    def test_register_weak_password(self, test_client: TestClient, api_v1_prefix: str):
        """Passwords under 8 characters are rejected with 400."""
        response = test_client.post(
            f"{api_v1_prefix}/auth/register",
            json={
                "firstName": "A",
                "lastName": "B",
                "email": "weak@example.com",
                "password": "short",
            },
        )

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert [e["path"] for e in data["errors"]] == ["password"]

    def test_register_invalid_email(self, test_client: TestClient, api_v1_prefix: str):
        """Malformed emails are rejected with 400."""
        response = test_client.post(
            f"{api_v1_prefix}/auth/register",
            json={
                "firstName": "A",
                "lastName": "B",
                "email": "not-an-email",
                "password": "SecurePassword123!",
            },
        )

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert data["errors"][0]["path"] == "email"
        assert data["errors"][0]["msg"] == "Email should be a valid email"

    def test_register_missing_fields_are_itemized(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
    ):
        """Every missing field is reported at once."""
        response = test_client.post(f"{api_v1_prefix}/auth/register", json={})

        assert response.status_code == 400
        paths = {e["path"] for e in response.json()["errors"]}
        assert paths == {"firstName", "lastName", "email", "password"}


class TestAuthLogin:
    """Tests for POST /api/v1/auth/login."""

    def test_login_success(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
        db,
    ):
        """Login returns the id and opens a second session."""
        registered = _register(test_client, api_v1_prefix, registered_user_data)

        response = test_client.post(
            f"{api_v1_prefix}/auth/login",
            json={
                "email": registered_user_data["email"],
                "password": registered_user_data["password"],
            },
        )

        assert response.status_code == 200
        assert response.json() == {"id": registered.json()["id"]}
        assert "accessToken" in response.cookies
        assert "refreshToken" in response.cookies
        assert db.scalar("SELECT count(*) FROM refresh_sessions") == 2

    def test_wrong_password_and_unknown_email_look_the_same(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
    ):
        """Login failures do not reveal whether the email exists."""
        _register(test_client, api_v1_prefix, registered_user_data)

        wrong_password = test_client.post(
            f"{api_v1_prefix}/auth/login",
            json={"email": registered_user_data["email"], "password": "WrongPass1!"},
        )
        unknown_email = test_client.post(
            f"{api_v1_prefix}/auth/login",
            json={"email": "nobody@example.com", "password": "WrongPass1!"},
        )

        assert wrong_password.status_code == unknown_email.status_code == 400
        assert wrong_password.json() == unknown_email.json()
        assert wrong_password.json() == {
            "detail": "Email or Password does not match.",
            "code": "INVALID_CREDENTIALS",
        }

    def test_login_email_is_trimmed(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
    ):
        """Surrounding whitespace in the email is ignored."""
        _register(test_client, api_v1_prefix, registered_user_data)

        response = test_client.post(
            f"{api_v1_prefix}/auth/login",
            json={
                "email": f"  {registered_user_data['email']} ",
                "password": registered_user_data["password"],
            },
        )

        assert response.status_code == 200


class TestAuthSelf:
    """Tests for GET /api/v1/auth/self."""

    def test_self_with_cookie(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
    ):
        """The access token cookie identifies the caller."""
        user_id = _register(test_client, api_v1_prefix, registered_user_data).json()[
            "id"
        ]

        response = test_client.get(f"{api_v1_prefix}/auth/self")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == user_id
        assert data["email"] == registered_user_data["email"]
        assert data["firstName"] == "Ada"
        assert data["lastName"] == "Lovelace"
        assert data["role"] == "customer"
        assert not {"password", "passwordHash", "password_hash"} & data.keys()

    def test_self_with_bearer_header(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
    ):
        """The Authorization header works without cookies."""
        registered = _register(test_client, api_v1_prefix, registered_user_data)
        token = registered.cookies["accessToken"]
        test_client.cookies.clear()

        response = test_client.get(
            f"{api_v1_prefix}/auth/self",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 200
        assert response.json()["id"] == registered.json()["id"]

    def test_self_without_token(self, test_client: TestClient, api_v1_prefix: str):
        """Anonymous callers get 401."""
        response = test_client.get(f"{api_v1_prefix}/auth/self")

        assert response.status_code == 401
        assert response.json()["code"] == "NOT_AUTHENTICATED"

    def test_self_with_garbage_token(self, test_client: TestClient, api_v1_prefix: str):
        """Unreadable tokens get 401."""
        response = test_client.get(
            f"{api_v1_prefix}/auth/self",
            headers={"Authorization": "Bearer garbage"},
        )

        assert response.status_code == 401
        assert response.json()["code"] == "MALFORMED_TOKEN"

    def test_self_with_expired_token(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
        signing_key,
        refresh_secret,
    ):
        """Expired tokens get 401 with a distinct code."""
        user_id = _register(test_client, api_v1_prefix, registered_user_data).json()[
            "id"
        ]
        expired = JWTService(
            key_material=signing_key,
            refresh_secret=refresh_secret,
        ).create_access_token(
            subject=str(user_id),
            role="customer",
            expires_delta=timedelta(seconds=-5),
        )
        test_client.cookies.clear()

        response = test_client.get(
            f"{api_v1_prefix}/auth/self",
            headers={"Authorization": f"Bearer {expired}"},
        )

        assert response.status_code == 401
        assert response.json()["code"] == "TOKEN_EXPIRED"

    def test_self_with_foreign_key(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        other_signing_key,
        refresh_secret,
    ):
        """Tokens signed by an unpublished key get 401."""
        token = JWTService(
            key_material=other_signing_key,
            refresh_secret=refresh_secret,
        ).create_access_token(subject="1", role="admin")

        response = test_client.get(
            f"{api_v1_prefix}/auth/self",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_SIGNATURE"


class TestAuthRefresh:
    """Tests for POST /api/v1/auth/refresh."""

    def test_refresh_rotates_session(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
        db,
        refresh_secret,
    ):
        """The old session is gone and exactly one new one exists."""
        registered = _register(test_client, api_v1_prefix, registered_user_data)
        user_id = registered.json()["id"]
        (old_session_id,) = db.column("SELECT id FROM refresh_sessions")

        response = test_client.post(f"{api_v1_prefix}/auth/refresh")

        assert response.status_code == 200
        assert response.json() == {"id": user_id}
        sessions = db.column(
            "SELECT id FROM refresh_sessions WHERE user_id = :user_id",
            user_id=user_id,
        )
        assert len(sessions) == 1
        assert old_session_id not in sessions
        new_refresh = jwt.decode(
            response.cookies["refreshToken"],
            refresh_secret,
            algorithms=[REFRESH_ALGORITHM],
        )
        assert new_refresh["id"] == str(sessions[0])

    def test_refresh_with_revoked_token_still_succeeds(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
        db,
    ):
        """Replaying a rotated refresh token issues a new pair."""
        registered = _register(test_client, api_v1_prefix, registered_user_data)
        old_refresh = registered.cookies["refreshToken"]
        assert test_client.post(f"{api_v1_prefix}/auth/refresh").status_code == 200

        test_client.cookies.clear()
        response = test_client.post(
            f"{api_v1_prefix}/auth/refresh",
            headers={"Cookie": f"refreshToken={old_refresh}"},
        )

        assert response.status_code == 200
        assert "refreshToken" in response.cookies
        assert db.scalar("SELECT count(*) FROM refresh_sessions") == 2

    def test_refresh_without_cookie(self, test_client: TestClient, api_v1_prefix: str):
        """Refresh requires the refresh cookie."""
        response = test_client.post(f"{api_v1_prefix}/auth/refresh")

        assert response.status_code == 401
        assert response.json()["code"] == "NOT_AUTHENTICATED"

    def test_refresh_with_access_token_in_cookie(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
    ):
        """An access token is not accepted as a refresh token."""
        registered = _register(test_client, api_v1_prefix, registered_user_data)
        access = registered.cookies["accessToken"]
        test_client.cookies.clear()

        response = test_client.post(
            f"{api_v1_prefix}/auth/refresh",
            headers={"Cookie": f"refreshToken={access}"},
        )

        assert response.status_code == 401

    def test_refresh_for_deleted_user(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
        db,
    ):
        """A refresh token for a vanished identity is refused."""
        _register(test_client, api_v1_prefix, registered_user_data)
        db.execute("DELETE FROM users")

        response = test_client.post(f"{api_v1_prefix}/auth/refresh")

        assert response.status_code == 400
        assert response.json() == {"detail": "No User found", "code": "USER_NOT_FOUND"}


class TestStrictRefresh:
    """Tests for refresh with session verification enabled."""

    @pytest.fixture
    def settings_overrides(self) -> dict:
        return {"auth_verify_refresh_session": True}

    def test_replayed_refresh_token_rejected(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
    ):
        """A rotated refresh token cannot be used again."""
        registered = _register(test_client, api_v1_prefix, registered_user_data)
        old_refresh = registered.cookies["refreshToken"]
        assert test_client.post(f"{api_v1_prefix}/auth/refresh").status_code == 200

        test_client.cookies.clear()
        response = test_client.post(
            f"{api_v1_prefix}/auth/refresh",
            headers={"Cookie": f"refreshToken={old_refresh}"},
        )

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_REFRESH_TOKEN"


class TestAuthLogout:
    """Tests for POST /api/v1/auth/logout."""

    def test_logout_revokes_session_and_clears_cookies(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
        db,
    ):
        """Logout deletes this device's session and both cookies."""
        _register(test_client, api_v1_prefix, registered_user_data)

        response = test_client.post(f"{api_v1_prefix}/auth/logout")

        assert response.status_code == 200
        assert response.json() == {}
        assert _cleared(response, "accessToken")
        assert _cleared(response, "refreshToken")
        assert db.scalar("SELECT count(*) FROM refresh_sessions") == 0

    def test_logout_keeps_other_devices(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
        db,
    ):
        """Only the presented session is revoked."""
        _register(test_client, api_v1_prefix, registered_user_data)
        login = test_client.post(
            f"{api_v1_prefix}/auth/login",
            json={
                "email": registered_user_data["email"],
                "password": registered_user_data["password"],
            },
        )
        assert login.status_code == 200

        assert test_client.post(f"{api_v1_prefix}/auth/logout").status_code == 200
        assert db.scalar("SELECT count(*) FROM refresh_sessions") == 1

    def test_logout_requires_access_token(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
    ):
        """A refresh cookie alone does not log out."""
        registered = _register(test_client, api_v1_prefix, registered_user_data)
        refresh = registered.cookies["refreshToken"]
        test_client.cookies.clear()

        response = test_client.post(
            f"{api_v1_prefix}/auth/logout",
            headers={"Cookie": f"refreshToken={refresh}"},
        )

        assert response.status_code == 401

    def test_logout_twice(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
    ):
        """Logging out with an already revoked session still succeeds."""
        registered = _register(test_client, api_v1_prefix, registered_user_data)
        cookie = "; ".join(
            f"{name}={registered.cookies[name]}"
            for name in ("accessToken", "refreshToken")
        )
        test_client.cookies.clear()

        first = test_client.post(
            f"{api_v1_prefix}/auth/logout",
            headers={"Cookie": cookie},
        )
        second = test_client.post(
            f"{api_v1_prefix}/auth/logout",
            headers={"Cookie": cookie},
        )

        assert first.status_code == second.status_code == 200

    def test_logout_with_rotated_away_token_keeps_live_session(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
        db,
    ):
        """A refresh token replaced by rotation cannot revoke its successor."""
        registered = _register(test_client, api_v1_prefix, registered_user_data)
        old_refresh = registered.cookies["refreshToken"]
        rotated = test_client.post(f"{api_v1_prefix}/auth/refresh")
        assert rotated.status_code == 200
        (live_session_id,) = db.column("SELECT id FROM refresh_sessions")
        test_client.cookies.clear()

        response = test_client.post(
            f"{api_v1_prefix}/auth/logout",
            headers={
                "Cookie": (
                    f"accessToken={rotated.cookies['accessToken']}; "
                    f"refreshToken={old_refresh}"
                ),
            },
        )

        assert response.status_code == 200
        assert db.column("SELECT id FROM refresh_sessions") == [live_session_id]

    def test_logout_with_another_users_refresh_token(
        self,
        test_client: TestClient,
        api_v1_prefix: str,
        registered_user_data: dict,
        db,
    ):
        """Access and refresh token must belong to the same user."""
        first = _register(test_client, api_v1_prefix, registered_user_data)
        second = _register(
            test_client,
            api_v1_prefix,
            {**registered_user_data, "email": "grace@example.com"},
        )
        test_client.cookies.clear()

        response = test_client.post(
            f"{api_v1_prefix}/auth/logout",
            headers={
                "Cookie": (
                    f"accessToken={first.cookies['accessToken']}; "
                    f"refreshToken={second.cookies['refreshToken']}"
                ),
            },
        )

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_REFRESH_TOKEN"
        assert db.scalar("SELECT count(*) FROM refresh_sessions") == 2
