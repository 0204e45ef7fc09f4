"""Tests for bearer token verification and profile provisioning."""

import uuid
from datetime import timedelta
from types import SimpleNamespace

import httpx
import pytest
from fastapi.testclient import TestClient
from supabase import AuthError, AuthRetryableError

from app.core import auth
from app.core.errors import Unauthorized
from app.main import app
from app.routers import matches as matches_router

from conftest import make_token

URL = "/api/v1/profiles/me"


class TestDecodeAccessToken:
    def test_valid_token(self):
        sub = uuid.uuid4()

        claims = auth.decode_access_token(make_token(sub, email="a@b.io"))

        assert claims["sub"] == str(sub)
        assert claims["email"] == "a@b.io"

    def test_expired_token(self):
        token = make_token(uuid.uuid4(), expires_in=timedelta(minutes=-5))

        with pytest.raises(Unauthorized):
            auth.decode_access_token(token)

    def test_garbage_token(self):
        with pytest.raises(Unauthorized):
            auth.decode_access_token("not-a-jwt")


class TestDefaultProfileName:
    def test_prefers_signup_name(self):
        claims = {"sub": "x", "email": "sam@example.com", "user_metadata": {"name": "Sam"}}
        assert auth.default_profile_name(claims) == "Sam"

    def test_falls_back_to_full_email(self):
        claims = {"sub": "x", "email": "sam@example.com", "user_metadata": {}}
        assert auth.default_profile_name(claims) == "sam@example.com"

    def test_long_email_is_cut_to_column_width(self):
        email = "a" * 120 + "@example.com"
        name = auth.default_profile_name({"sub": "x", "email": email})
        assert name == email[: auth.NAME_MAX_LENGTH]

    def test_long_signup_name_is_cut_to_column_width(self):
        claims = {"sub": "x", "user_metadata": {"name": "b" * 150}}
        assert len(auth.default_profile_name(claims)) == auth.NAME_MAX_LENGTH

    def test_falls_back_to_subject(self):
        assert auth.default_profile_name({"sub": "abc"}) == "abc"


class TestHttp:
    def test_wrong_scheme_is_unauthorized(self, client):
        response = client.get(URL, headers={"Authorization": "Basic dXNlcjpwYXNz"})

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_non_uuid_subject(self, client):
        token = make_token("not-a-uuid")

        response = client.get(URL, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized", "details": "Invalid sub in token"}


class TestSupabaseVerification:
    """Without a JWT secret, tokens are checked by Supabase Auth."""

    @pytest.fixture(autouse=True)
    def no_jwt_secret(self, monkeypatch):
        monkeypatch.setattr(auth.settings, "SUPABASE_JWT_SECRET", None)

    def fake_client(self, user):
        return SimpleNamespace(
            auth=SimpleNamespace(get_user=lambda token: SimpleNamespace(user=user))
        )

    def test_known_user(self, client, monkeypatch, get_profile):
        sub = uuid.uuid4()
        user = SimpleNamespace(id=str(sub), email="kai@example.com", user_metadata={"name": "Kai"})
        monkeypatch.setattr(auth, "supabase_admin", lambda: self.fake_client(user))

        response = client.get(URL, headers={"Authorization": "Bearer opaque-token"})

        assert response.status_code == 200
        assert response.json()["name"] == "Kai"
        assert get_profile(sub) is not None

    def test_rejected_token(self, client, monkeypatch):
        monkeypatch.setattr(auth, "supabase_admin", lambda: self.fake_client(None))

        response = client.get(URL, headers={"Authorization": "Bearer opaque-token"})

        assert response.status_code == 401

    def failing_client(self, exc):
        def get_user(token):
            raise exc

        return SimpleNamespace(auth=SimpleNamespace(get_user=get_user))

    def test_network_failure_is_a_dependency_failure(self, client, monkeypatch, count_matches):
        failure = httpx.ConnectError("connection refused")
        monkeypatch.setattr(auth, "supabase_admin", lambda: self.failing_client(failure))

        response = client.post(
            "/api/v1/find-match",
            headers={"Authorization": "Bearer opaque-token", "Origin": "https://soulmate.example"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to verify credentials"}
        assert response.headers["access-control-allow-origin"] == "*"
        assert count_matches() == 0

    def test_missing_service_key_is_a_dependency_failure(self, client, monkeypatch):
        def no_service_key():
            raise RuntimeError("Missing SUPABASE_SERVICE_ROLE_KEY in .env")

        monkeypatch.setattr(auth, "supabase_admin", no_service_key)

        response = client.post("/api/v1/find-match", headers={"Authorization": "Bearer opaque-token"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to verify credentials"}
        assert "SUPABASE" not in response.text

    def test_auth_outage_is_retryable_not_unauthorized(self, client, monkeypatch):
        class Upstream503(AuthError):
            def __init__(self):
                Exception.__init__(self, "upstream 503")
                self.message = "upstream 503"
                self.status = 503

        monkeypatch.setattr(auth, "supabase_admin", lambda: self.failing_client(Upstream503()))

        response = client.get(URL, headers={"Authorization": "Bearer opaque-token"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to verify credentials"}

    def test_retryable_auth_error_is_a_dependency_failure(self, client, monkeypatch):
        class FetchFailed(AuthRetryableError):
            def __init__(self):
                Exception.__init__(self, "fetch failed")
                self.message = "fetch failed"

        monkeypatch.setattr(auth, "supabase_admin", lambda: self.failing_client(FetchFailed()))

        response = client.get(URL, headers={"Authorization": "Bearer opaque-token"})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to verify credentials"

    def test_client_side_auth_error_stays_unauthorized(self, client, monkeypatch):
        class BadJwt(AuthError):
            def __init__(self):
                Exception.__init__(self, "invalid JWT")
                self.message = "invalid JWT"
                self.status = 401

        monkeypatch.setattr(auth, "supabase_admin", lambda: self.failing_client(BadJwt()))

        response = client.get(URL, headers={"Authorization": "Bearer opaque-token"})

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized", "details": "Invalid or expired token"}


class TestUnhandledFaults:
    def test_fault_outside_services_renders_json_with_cors(self, create_profile, monkeypatch):
        me = create_profile()

        def explode(*args, **kwargs):
            raise RuntimeError("secret stack detail")

        monkeypatch.setattr(matches_router.service, "list_history", explode)
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get(
            "/api/v1/matches/me",
            headers={"Authorization": f"Bearer {make_token(me)}", "Origin": "https://soulmate.example"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert response.headers["access-control-allow-origin"] == "*"
        assert "secret" not in response.text
