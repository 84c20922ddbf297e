from pydantic import BaseModel, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime


class WorkspaceCreate(BaseModel):
    name: str
    description: Optional[str] = None
    owner: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value):
        if not value or not value.strip():
            raise ValueError("Workspace name is required")
        return value.strip()


class WorkspaceUpdate(WorkspaceCreate):
    companies: Optional[List[str]] = None


class WorkspaceLinksUpdate(BaseModel):
    companies: List[str] = []


class WorkspaceLinksResponse(BaseModel):
    success: bool = True
    companies: List[str]


class WorkspaceResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    owner: Optional[str] = None
    owner_id: Optional[str] = None
    company_id: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None
    companies: Optional[List[str]] = None
    warning: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WorkspaceCreateResponse(BaseModel):
    message: str
    workspace: WorkspaceResponse
