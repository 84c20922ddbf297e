from fastapi import APIRouter, Depends, Body
from portal.database.supabase_client import get_service_supabase
from portal.modules.workspace_members.schemas import (
    WorkspaceDetailResponse, InviteRequest, RoleUpdateRequest, MemberMutationResponse
)
from portal.modules.workspace_members.service import WorkspaceMemberService
from portal.core.dependencies import get_current_user, check_workspace_role
from supabase import Client
from typing import Dict, Any

router = APIRouter(prefix="/workspaces", tags=["workspace-members"])


def get_member_service(supabase: Client = Depends(get_service_supabase)) -> WorkspaceMemberService:
    return WorkspaceMemberService(supabase)


@router.get("/{workspace_id}", response_model=WorkspaceDetailResponse)
async def get_workspace_detail(
    workspace_id: str,
    user_data: Dict = Depends(get_current_user),
    service: WorkspaceMemberService = Depends(get_member_service)
):
    """Workspace members, stats and license"""
    return service.get_workspace_detail(workspace_id)


@router.patch("/{workspace_id}/settings")
async def update_workspace_settings(
    workspace_id: str,
    settings: Dict[str, Any] = Body(...),
    user_data: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase),
    service: WorkspaceMemberService = Depends(get_member_service)
):
    check_workspace_role(workspace_id, user_data, supabase)
    return service.update_settings(workspace_id, settings)


@router.post("/{workspace_id}/users", response_model=MemberMutationResponse)
async def invite_workspace_user(
    workspace_id: str,
    invite: InviteRequest,
    user_data: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase),
    service: WorkspaceMemberService = Depends(get_member_service)
):
    """Invite a user by email (owner or admin); only the owner may grant the owner role"""
    check_workspace_role(workspace_id, user_data, supabase)
    if invite.role == "owner":
        check_workspace_role(
            workspace_id, user_data, supabase,
            allowed_roles=("owner",),
            detail="Only the workspace owner can grant the owner role"
        )
    return service.invite_user(workspace_id, invite)


@router.delete("/{workspace_id}/users/{user_id}", response_model=MemberMutationResponse)
async def remove_workspace_user(
    workspace_id: str,
    user_id: str,
    user_data: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase),
    service: WorkspaceMemberService = Depends(get_member_service)
):
    check_workspace_role(workspace_id, user_data, supabase)
    return service.remove_user(workspace_id, user_id)


@router.patch("/{workspace_id}/users/{user_id}", response_model=MemberMutationResponse)
async def update_workspace_user_role(
    workspace_id: str,
    user_id: str,
    role_update: RoleUpdateRequest,
    user_data: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase),
    service: WorkspaceMemberService = Depends(get_member_service)
):
    """Change a member's role (owner only)"""
    check_workspace_role(
        workspace_id, user_data, supabase,
        allowed_roles=("owner",),
        detail="Only the workspace owner can change roles"
    )
    return service.update_role(workspace_id, user_id, role_update.role)
