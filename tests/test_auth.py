"""
Session flows: login, refresh, logout, session check, role, password reset.
"""

import pytest

from portal.config import settings
from portal.modules.auth import service as auth_service


class TestLogin:

    def test_login_returns_tokens(self, client, member):
        user, _ = member
        response = client.post("/api/auth/login", json={"email": "member@example.com", "password": "secret123"})
        assert response.status_code == 200
        body = response.json()
        assert body["user_id"] == user.id
        assert body["access_token"]
        assert body["refresh_token"]
        assert body["token_type"] == "bearer"

    def test_wrong_password(self, client, member):
        response = client.post("/api/auth/login", json={"email": "member@example.com", "password": "wrong"})
        assert response.status_code == 401

    def test_inactive_profile_is_refused(self, client, fake_db):
        fake_db.add_user("gone@example.com", is_active=False)
        response = client.post("/api/auth/login", json={"email": "gone@example.com", "password": "secret123"})
        assert response.status_code == 403
        assert fake_db.auth.signed_out == 1

    def test_disabled_auth_user_is_refused(self, client, fake_db):
        user, _ = fake_db.add_user("disabled@example.com")
        user.app_metadata = {"disabled": True}
        response = client.post("/api/auth/login", json={"email": "disabled@example.com", "password": "secret123"})
        assert response.status_code == 403

    def test_refresh(self, client, member):
        login = client.post("/api/auth/login", json={"email": "member@example.com", "password": "secret123"}).json()
        response = client.post("/api/auth/refresh", json={"refresh_token": login["refresh_token"]})
        assert response.status_code == 200
        assert response.json()["user_id"] == login["user_id"]

    def test_refresh_with_bad_token(self, client):
        assert client.post("/api/auth/refresh", json={"refresh_token": "refresh-nobody"}).status_code == 401


class TestSession:

    def test_session_reports_profile(self, client, fake_db, admin, admin_headers):
        response = client.get("/api/auth/session", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["email"] == "admin@example.com"
        assert body["is_admin"] is True
        assert body["role"] == "admin"

    def test_session_without_token(self, client):
        assert client.get("/api/auth/session").status_code == 401

    def test_session_of_deactivated_user(self, client, fake_db, member, member_headers):
        user, _ = member
        fake_db.rows("profiles")[0]["is_active"] = False
        assert client.get("/api/auth/session", headers=member_headers).status_code == 403

    def test_logout_drops_cached_session(self, client, fake_db, member, member_headers):
        user, _ = member
        assert client.get("/api/auth/session", headers=member_headers).status_code == 200

        assert client.post("/api/auth/logout", headers=member_headers).status_code == 200
        assert fake_db.auth.signed_out == 1

        # Token revoked upstream: the next request must hit auth again and fail
        fake_db.auth.tokens.clear()
        assert client.get("/api/auth/session", headers=member_headers).status_code == 401


class TestRole:

    def test_plain_user(self, client, member_headers):
        response = client.get("/api/auth/role", headers=member_headers)
        assert response.json() == {"is_admin": False, "role": "user", "workspace_id": None, "is_owner": False}

    def test_workspace_owner(self, client, fake_db, member, member_headers):
        user, _ = member
        workspace = fake_db.seed("workspaces", name="Finance", owner_id=user.id)
        fake_db.seed("workspace_users", workspace_id=workspace["id"], user_id=user.id, role="owner", status="active")

        response = client.get("/api/auth/role", headers=member_headers)
        assert response.json()["workspace_id"] == workspace["id"]
        assert response.json()["is_owner"] is True


class TestPasswords:

    @pytest.mark.parametrize("email", ["member@example.com", "unknown@example.com"])
    def test_reset_request_always_succeeds(self, client, fake_db, member, email):
        response = client.post("/api/auth/password-reset", json={"email": email})
        assert response.status_code == 200
        assert fake_db.auth.reset_requests == [(email, {"redirect_to": settings.password_reset_redirect_url})]

    def test_short_password_is_rejected(self, client, member, member_headers):
        response = client.post("/api/auth/password", json={"password": "123"}, headers=member_headers)
        assert response.status_code == 400
        assert member[0].password == "secret123"

    def test_password_update(self, client, member, member_headers):
        response = client.post("/api/auth/password", json={"password": "n3w-secret"}, headers=member_headers)
        assert response.status_code == 200
        assert member[0].password == "n3w-secret"


class TestRegister:

    def test_register(self, client, fake_db):
        response = client.post(
            "/api/auth/register",
            json={"email": "fresh@example.com", "password": "secret123", "name": "Fresh"},
        )
        assert response.status_code == 201
        assert response.json()["email"] == "fresh@example.com"

    def test_register_existing(self, client, member):
        response = client.post("/api/auth/register", json={"email": "member@example.com", "password": "secret123"})
        assert response.status_code == 400


class TestDeactivatedSessions:

    def _deactivate(self, client, admin_headers, user_id):
        response = client.put(f"/api/users/{user_id}", json={"is_active": False}, headers=admin_headers)
        assert response.status_code == 200

    def test_refresh_after_deactivation_is_refused(self, client, fake_db, member, admin_headers):
        user, _ = member
        login = client.post("/api/auth/login", json={"email": "member@example.com", "password": "secret123"}).json()
        self._deactivate(client, admin_headers, user.id)

        response = client.post("/api/auth/refresh", json={"refresh_token": login["refresh_token"]})
        assert response.status_code == 403
        assert fake_db.auth.signed_out == 1

    def test_existing_token_stops_working(self, client, fake_db, member, member_headers, admin_headers):
        user, _ = member
        assert client.get("/api/support-tickets", headers=member_headers).status_code == 200
        self._deactivate(client, admin_headers, user.id)

        response = client.post(
            "/api/support-tickets",
            json={"title": "t", "description": "d", "category": "c"},
            headers=member_headers,
        )
        assert response.status_code == 403
        assert fake_db.rows("support_tickets") == []

    def test_deactivated_admin_loses_admin_routes(self, client, fake_db, admin, admin_headers):
        user, _ = admin
        _, other_admin_headers = fake_db.add_user("second-admin@example.com", role="admin")
        self._deactivate(client, other_admin_headers, user.id)

        response = client.post("/api/admin/companies", json={"name": "Acme"}, headers=admin_headers)
        assert response.status_code == 403
        assert fake_db.rows("companies") == []

    def test_deactivated_user_chats_anonymously(self, client, fake_db, member, member_headers):
        fake_db.rows("profiles")[0]["is_active"] = False
        response = client.post("/api/chatbot", json={"message": "oi"}, headers=member_headers)
        assert response.status_code == 200
        assert fake_db.rows("chatbot_messages")[0]["user_id"] == "anonymous"


class TestSessionCache:

    def test_full_cache_drops_expired_entries(self, monkeypatch):
        monkeypatch.setattr(auth_service, "_AUTH_CACHE_MAX_SIZE", 2)
        auth_service.clear_auth_cache()
        auth_service._cache_user("a", {"id": "a"}, now=0)
        auth_service._cache_user("b", {"id": "b"}, now=0)

        later = auth_service._AUTH_CACHE_TTL_SEC + 1
        auth_service._cache_user("c", {"id": "c"}, now=later)

        assert set(auth_service._AUTH_USER_CACHE) == {"c"}
        assert auth_service._cached_user("c", later) == {"id": "c"}
        auth_service.clear_auth_cache()

    def test_full_cache_of_live_entries_skips_new_ones(self, monkeypatch):
        monkeypatch.setattr(auth_service, "_AUTH_CACHE_MAX_SIZE", 1)
        auth_service.clear_auth_cache()
        auth_service._cache_user("a", {"id": "a"}, now=0)
        auth_service._cache_user("b", {"id": "b"}, now=1)

        assert set(auth_service._AUTH_USER_CACHE) == {"a"}
        assert auth_service._cached_user("a", auth_service._AUTH_CACHE_TTL_SEC) is None
        auth_service.clear_auth_cache()
