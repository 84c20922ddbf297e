from supabase import Client
from portal.modules.workspace_members.schemas import (
    WorkspaceMember, WorkspaceStats, WorkspaceDetail, WorkspaceDetailResponse,
    InviteRequest, MemberMutationResponse
)
from portal.modules.users.service import auth_users_by_id
from portal.core.errors import raise_for_postgrest
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class WorkspaceMemberService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_workspace_row(self, workspace_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("workspaces")\
                .select("*")\
                .eq("id", workspace_id)\
                .single()\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "fetch workspace", not_found="Workspace not found")
        if not result.data:
            raise HTTPException(status_code=404, detail="Workspace not found")
        return result.data

    def _get_license(self, company_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if not company_id:
            return None
        try:
            company = self.supabase.table("companies")\
                .select("license_id")\
                .eq("id", company_id)\
                .maybe_single()\
                .execute()
            license_id = company.data.get("license_id") if company and company.data else None
            if not license_id:
                return None
            license_row = self.supabase.table("licenses")\
                .select("*")\
                .eq("id", license_id)\
                .maybe_single()\
                .execute()
            return license_row.data if license_row else None
        except Exception as e:
            logger.warning(f"Error fetching license for company {company_id}: {e}")
            return None

    def _get_members(self, workspace_id: str) -> List[WorkspaceMember]:
        try:
            result = self.supabase.table("workspace_users")\
                .select("*")\
                .eq("workspace_id", workspace_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "fetch workspace users")
        rows = result.data or []
        if not rows:
            return []

        profiles_by_id = {}
        try:
            profiles = self.supabase.table("profiles")\
                .select("id, email, name")\
                .in_("id", [row["user_id"] for row in rows])\
                .execute()
            profiles_by_id = {p["id"]: p for p in profiles.data or []}
        except Exception as e:
            logger.warning(f"Error fetching member profiles for workspace {workspace_id}: {e}")

        auth_by_id = {}
        try:
            auth_by_id = auth_users_by_id(self.supabase.auth.admin.list_users())
        except Exception as e:
            logger.warning(f"Error listing auth users: {e}")

        members = []
        for row in rows:
            profile = profiles_by_id.get(row["user_id"], {})
            auth_user = auth_by_id.get(row["user_id"])
            members.append(WorkspaceMember(
                id=row["id"],
                user_id=row["user_id"],
                email=profile.get("email") or getattr(auth_user, "email", None),
                name=profile.get("name"),
                role=row.get("role") or "user",
                status=row.get("status") or "active",
                last_access=getattr(auth_user, "last_sign_in_at", None)
            ))
        return members

    def get_workspace_detail(self, workspace_id: str) -> WorkspaceDetailResponse:
        """Workspace with members, usage stats and the license of its company"""
        workspace = self._get_workspace_row(workspace_id)
        members = self._get_members(workspace_id)
        license_row = self._get_license(workspace.get("company_id"))

        license_usage = None
        if license_row and license_row.get("max_users"):
            license_usage = round(len(members) / license_row["max_users"] * 100)

        stats = WorkspaceStats(
            total_users=len(members),
            active_users=len([m for m in members if m.status == "active"]),
            pending_invites=len([m for m in members if m.status == "invited"]),
            license_usage=license_usage
        )
        detail = WorkspaceDetail(
            id=workspace["id"],
            name=workspace["name"],
            company_id=workspace.get("company_id"),
            owner_id=workspace.get("owner_id"),
            settings=workspace.get("settings"),
            users=members,
            created_at=workspace.get("created_at"),
            updated_at=workspace.get("updated_at")
        )
        return WorkspaceDetailResponse(workspace=detail, stats=stats, license=license_row)

    def update_settings(self, workspace_id: str, settings: Dict[str, Any]) -> Dict[str, Any]:
        """Replace the settings document of a workspace"""
        try:
            result = self.supabase.table("workspaces")\
                .update({
                    "settings": settings,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("id", workspace_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "update workspace settings")
        if not result.data:
            raise HTTPException(status_code=404, detail="Workspace not found")
        return result.data[0]

    def _find_user_id(self, email: str) -> Optional[str]:
        result = self.supabase.table("profiles")\
            .select("id")\
            .eq("email", email)\
            .limit(1)\
            .execute()
        return result.data[0]["id"] if result.data else None

    def invite_user(self, workspace_id: str, invite: InviteRequest) -> MemberMutationResponse:
        """Add a user to the workspace with status 'invited'.
        Unknown emails get a new confirmed auth user."""
        try:
            user_id = self._find_user_id(invite.email)
        except Exception as e:
            raise_for_postgrest(e, "look up user")

        if not user_id:
            try:
                response = self.supabase.auth.admin.create_user({
                    "email": invite.email,
                    "email_confirm": True,
                    "user_metadata": {"invited_to": workspace_id}
                })
            except Exception as e:
                logger.error(f"Error creating invited user {invite.email}: {e}")
                raise HTTPException(status_code=500, detail="Failed to create user")
            if not response.user:
                raise HTTPException(status_code=500, detail="Failed to create user")
            user_id = response.user.id

        try:
            self.supabase.table("workspace_users").insert({
                "workspace_id": workspace_id,
                "user_id": user_id,
                "role": invite.role,
                "status": "invited"
            }).execute()
        except Exception as e:
            raise_for_postgrest(e, "add user to workspace", conflict="User is already a member of this workspace")
        logger.info(f"User {user_id} invited to workspace {workspace_id}")
        return MemberMutationResponse(success=True, user_id=user_id)

    def remove_user(self, workspace_id: str, user_id: str) -> MemberMutationResponse:
        """Remove a member; the workspace owner cannot be removed"""
        try:
            target = self.supabase.table("workspace_users")\
                .select("role")\
                .eq("workspace_id", workspace_id)\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "fetch workspace user")
        if target.data and target.data[0].get("role") == "owner":
            raise HTTPException(status_code=403, detail="The workspace owner cannot be removed")

        try:
            self.supabase.table("workspace_users")\
                .delete()\
                .eq("workspace_id", workspace_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "remove user from workspace")
        logger.info(f"User {user_id} removed from workspace {workspace_id}")
        return MemberMutationResponse(success=True, user_id=user_id)

    def update_role(self, workspace_id: str, user_id: str, role: str) -> MemberMutationResponse:
        try:
            self.supabase.table("workspace_users")\
                .update({"role": role})\
                .eq("workspace_id", workspace_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "update user role")
        return MemberMutationResponse(success=True, user_id=user_id)
