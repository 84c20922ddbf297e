from fastapi import APIRouter, Depends
from portal.database.supabase_client import get_service_supabase
from portal.modules.workspaces.schemas import (
    WorkspaceCreate, WorkspaceUpdate, WorkspaceResponse, WorkspaceCreateResponse,
    WorkspaceLinksUpdate, WorkspaceLinksResponse
)
from portal.modules.workspaces.service import WorkspaceService
from portal.core.dependencies import require_admin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/admin/workspaces", tags=["workspaces"])


def get_workspace_service(supabase: Client = Depends(get_service_supabase)) -> WorkspaceService:
    return WorkspaceService(supabase)


@router.get("", response_model=List[WorkspaceResponse], response_model_exclude_none=True)
async def list_workspaces(
    user_data: Dict = Depends(require_admin),
    service: WorkspaceService = Depends(get_workspace_service)
):
    return service.list_workspaces()


@router.post("", response_model=WorkspaceCreateResponse, status_code=201, response_model_exclude_none=True)
async def create_workspace(
    workspace_data: WorkspaceCreate,
    user_data: Dict = Depends(require_admin),
    service: WorkspaceService = Depends(get_workspace_service)
):
    return service.create_workspace(workspace_data)


@router.get("/{workspace_id}", response_model=WorkspaceResponse, response_model_exclude_none=True)
async def get_workspace(
    workspace_id: str,
    user_data: Dict = Depends(require_admin),
    service: WorkspaceService = Depends(get_workspace_service)
):
    """Get workspace with its linked company ids"""
    return service.get_workspace(workspace_id)


@router.put("/{workspace_id}", response_model=WorkspaceResponse, response_model_exclude_none=True)
async def update_workspace(
    workspace_id: str,
    workspace_data: WorkspaceUpdate,
    user_data: Dict = Depends(require_admin),
    service: WorkspaceService = Depends(get_workspace_service)
):
    return service.update_workspace(workspace_id, workspace_data)


@router.delete("/{workspace_id}")
async def delete_workspace(
    workspace_id: str,
    user_data: Dict = Depends(require_admin),
    service: WorkspaceService = Depends(get_workspace_service)
):
    service.delete_workspace(workspace_id)
    return {"message": "Workspace deleted successfully"}


@router.get("/{workspace_id}/links", response_model=WorkspaceLinksResponse)
async def get_workspace_links(
    workspace_id: str,
    user_data: Dict = Depends(require_admin),
    service: WorkspaceService = Depends(get_workspace_service)
):
    return WorkspaceLinksResponse(companies=service.get_links(workspace_id))


@router.put("/{workspace_id}/links", response_model=WorkspaceLinksResponse)
async def replace_workspace_links(
    workspace_id: str,
    links: WorkspaceLinksUpdate,
    user_data: Dict = Depends(require_admin),
    service: WorkspaceService = Depends(get_workspace_service)
):
    """Replace the full set of companies linked to the workspace"""
    return service.set_links(workspace_id, links.companies)
