"""
End-user workspace management: detail/stats, settings, invites, removal, roles.
"""

import pytest


@pytest.fixture
def workspace(fake_db, member):
    """Workspace owned by `member`, licensed through its company for 4 users"""
    user, _ = member
    license_row = fake_db.seed("licenses", type="premium", max_users=4, features=["export"])
    company = fake_db.seed("companies", name="Acme", license_id=license_row["id"])
    workspace = fake_db.seed(
        "workspaces",
        name="Finance",
        company_id=company["id"],
        owner_id=user.id,
        settings={"allowUserInvite": True},
    )
    fake_db.seed("workspace_users", workspace_id=workspace["id"], user_id=user.id, role="owner", status="active")
    return workspace


class TestWorkspaceDetail:

    def test_detail_with_stats_and_license(self, client, fake_db, workspace, member_headers):
        guest, _ = fake_db.add_user("guest@example.com", name="Guest")
        fake_db.seed("workspace_users", workspace_id=workspace["id"], user_id=guest.id, role="user", status="invited")

        response = client.get(f"/api/workspaces/{workspace['id']}", headers=member_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["stats"] == {
            "total_users": 2,
            "active_users": 1,
            "pending_invites": 1,
            "license_usage": 50,
        }
        assert body["license"]["max_users"] == 4
        emails = sorted(u["email"] for u in body["workspace"]["users"])
        assert emails == ["guest@example.com", "member@example.com"]

    def test_detail_without_license(self, client, fake_db, member_headers):
        workspace = fake_db.seed("workspaces", name="Loose")
        response = client.get(f"/api/workspaces/{workspace['id']}", headers=member_headers)
        assert response.status_code == 200
        assert response.json()["license"] is None
        assert response.json()["stats"]["license_usage"] is None
        assert response.json()["stats"]["total_users"] == 0

    def test_detail_requires_session(self, client, workspace):
        assert client.get(f"/api/workspaces/{workspace['id']}").status_code == 401

    def test_detail_missing_workspace(self, client, member_headers):
        assert client.get("/api/workspaces/missing", headers=member_headers).status_code == 404


class TestWorkspaceSettings:

    def test_owner_replaces_settings(self, client, fake_db, workspace, member_headers):
        new_settings = {"allowUserInvite": False, "allowDashboardSharing": True, "allowExport": False}
        response = client.patch(
            f"/api/workspaces/{workspace['id']}/settings",
            json=new_settings,
            headers=member_headers,
        )
        assert response.status_code == 200
        assert fake_db.rows("workspaces")[0]["settings"] == new_settings

    def test_plain_user_cannot_change_settings(self, client, fake_db, workspace):
        outsider, headers = fake_db.add_user("outsider@example.com")
        fake_db.seed("workspace_users", workspace_id=workspace["id"], user_id=outsider.id, role="user", status="active")

        response = client.patch(f"/api/workspaces/{workspace['id']}/settings", json={"allowExport": True}, headers=headers)
        assert response.status_code == 403
        assert fake_db.rows("workspaces")[0]["settings"] == {"allowUserInvite": True}


class TestInvites:

    def test_invite_existing_profile(self, client, fake_db, workspace, member_headers):
        existing, _ = fake_db.add_user("existing@example.com")

        response = client.post(
            f"/api/workspaces/{workspace['id']}/users",
            json={"email": "existing@example.com", "role": "admin"},
            headers=member_headers,
        )
        assert response.status_code == 200
        assert response.json()["user_id"] == existing.id
        row = [r for r in fake_db.rows("workspace_users") if r["user_id"] == existing.id][0]
        assert row["status"] == "invited"
        assert row["role"] == "admin"

    def test_invite_unknown_email_creates_auth_user(self, client, fake_db, workspace, member_headers):
        response = client.post(
            f"/api/workspaces/{workspace['id']}/users",
            json={"email": "newcomer@example.com"},
            headers=member_headers,
        )
        assert response.status_code == 200
        created = [u for u in fake_db.auth.users.values() if u.email == "newcomer@example.com"]
        assert len(created) == 1
        assert created[0].user_metadata == {"invited_to": workspace["id"]}
        row = [r for r in fake_db.rows("workspace_users") if r["user_id"] == created[0].id][0]
        assert row["role"] == "user"

    def test_invite_twice_conflicts(self, client, fake_db, workspace, member_headers):
        fake_db.add_user("existing@example.com")
        url = f"/api/workspaces/{workspace['id']}/users"
        assert client.post(url, json={"email": "existing@example.com"}, headers=member_headers).status_code == 200
        assert client.post(url, json={"email": "existing@example.com"}, headers=member_headers).status_code == 409

    def test_non_member_cannot_invite(self, client, fake_db, workspace):
        _, headers = fake_db.add_user("outsider@example.com")
        response = client.post(
            f"/api/workspaces/{workspace['id']}/users",
            json={"email": "friend@example.com"},
            headers=headers,
        )
        assert response.status_code == 403
        assert len(fake_db.rows("workspace_users")) == 1

    def test_workspace_admin_cannot_grant_owner(self, client, fake_db, workspace):
        manager, headers = fake_db.add_user("manager@example.com")
        fake_db.seed("workspace_users", workspace_id=workspace["id"], user_id=manager.id, role="admin", status="active")
        url = f"/api/workspaces/{workspace['id']}/users"

        response = client.post(url, json={"email": "friend@example.com", "role": "owner"}, headers=headers)
        assert response.status_code == 403
        assert len(fake_db.rows("workspace_users")) == 2

        assert client.post(url, json={"email": "friend@example.com"}, headers=headers).status_code == 200

    def test_owner_can_grant_owner(self, client, fake_db, workspace, member_headers):
        response = client.post(
            f"/api/workspaces/{workspace['id']}/users",
            json={"email": "cofounder@example.com", "role": "owner"},
            headers=member_headers,
        )
        assert response.status_code == 200


class TestRemovalAndRoles:

    def test_owner_cannot_be_removed(self, client, fake_db, workspace, member):
        owner, _ = member
        workspace_admin, headers = fake_db.add_user("wsadmin@example.com")
        fake_db.seed("workspace_users", workspace_id=workspace["id"], user_id=workspace_admin.id, role="admin", status="active")

        response = client.delete(f"/api/workspaces/{workspace['id']}/users/{owner.id}", headers=headers)
        assert response.status_code == 403
        assert any(r["user_id"] == owner.id for r in fake_db.rows("workspace_users"))

    def test_owner_removes_member(self, client, fake_db, workspace, member_headers):
        guest, _ = fake_db.add_user("guest@example.com")
        fake_db.seed("workspace_users", workspace_id=workspace["id"], user_id=guest.id, role="user", status="active")

        response = client.delete(f"/api/workspaces/{workspace['id']}/users/{guest.id}", headers=member_headers)
        assert response.status_code == 200
        assert not any(r["user_id"] == guest.id for r in fake_db.rows("workspace_users"))

    def test_only_owner_changes_roles(self, client, fake_db, workspace):
        workspace_admin, headers = fake_db.add_user("wsadmin@example.com")
        fake_db.seed("workspace_users", workspace_id=workspace["id"], user_id=workspace_admin.id, role="admin", status="active")

        response = client.patch(
            f"/api/workspaces/{workspace['id']}/users/{workspace_admin.id}",
            json={"role": "owner"},
            headers=headers,
        )
        assert response.status_code == 403

    def test_owner_changes_role(self, client, fake_db, workspace, member_headers):
        guest, _ = fake_db.add_user("guest@example.com")
        fake_db.seed("workspace_users", workspace_id=workspace["id"], user_id=guest.id, role="user", status="active")

        response = client.patch(
            f"/api/workspaces/{workspace['id']}/users/{guest.id}",
            json={"role": "admin"},
            headers=member_headers,
        )
        assert response.status_code == 200
        row = [r for r in fake_db.rows("workspace_users") if r["user_id"] == guest.id][0]
        assert row["role"] == "admin"

    def test_unknown_role_is_rejected(self, client, fake_db, workspace, member_headers, member):
        owner, _ = member
        response = client.patch(
            f"/api/workspaces/{workspace['id']}/users/{owner.id}",
            json={"role": "superuser"},
            headers=member_headers,
        )
        assert response.status_code == 400
