from pydantic import BaseModel, EmailStr
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

WorkspaceRole = Literal["owner", "admin", "user"]


class WorkspaceMember(BaseModel):
    id: str
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: str
    status: str
    last_access: Optional[datetime] = None


class WorkspaceStats(BaseModel):
    total_users: int
    active_users: int
    pending_invites: int
    license_usage: Optional[int] = None


class WorkspaceDetail(BaseModel):
    id: str
    name: str
    company_id: Optional[str] = None
    owner_id: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None
    users: List[WorkspaceMember] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class WorkspaceDetailResponse(BaseModel):
    workspace: WorkspaceDetail
    stats: WorkspaceStats
    license: Optional[Dict[str, Any]] = None


class InviteRequest(BaseModel):
    email: EmailStr
    role: WorkspaceRole = "user"


class RoleUpdateRequest(BaseModel):
    role: WorkspaceRole


class MemberMutationResponse(BaseModel):
    success: bool = True
    user_id: Optional[str] = None
