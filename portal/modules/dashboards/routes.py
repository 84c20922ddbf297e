from fastapi import APIRouter, Depends
from portal.database.supabase_client import get_service_supabase
from portal.modules.dashboards.schemas import (
    DashboardCreate, DashboardUpdate, DashboardResponse, DashboardMutationResponse,
    CatalogDashboard, FavoriteRequest, FavoriteResponse
)
from portal.modules.dashboards.service import DashboardService
from portal.core.dependencies import get_current_user, require_admin
from supabase import Client
from typing import List, Dict

admin_router = APIRouter(prefix="/admin/dashboards", tags=["dashboards-admin"])
router = APIRouter(prefix="/dashboards", tags=["dashboards"])


def get_dashboard_service(supabase: Client = Depends(get_service_supabase)) -> DashboardService:
    return DashboardService(supabase)


@admin_router.get("", response_model=List[DashboardResponse])
async def list_dashboards(
    user_data: Dict = Depends(require_admin),
    service: DashboardService = Depends(get_dashboard_service)
):
    return service.list_dashboards()


@admin_router.post("", response_model=DashboardMutationResponse, status_code=201)
async def create_dashboard(
    dashboard_data: DashboardCreate,
    user_data: Dict = Depends(require_admin),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Create dashboard and link it to the given workspaces"""
    return service.create_dashboard(dashboard_data)


@admin_router.get("/{dashboard_id}", response_model=DashboardResponse)
async def get_dashboard(
    dashboard_id: str,
    user_data: Dict = Depends(require_admin),
    service: DashboardService = Depends(get_dashboard_service)
):
    return service.get_dashboard(dashboard_id)


@admin_router.put("/{dashboard_id}", response_model=DashboardMutationResponse)
async def update_dashboard(
    dashboard_id: str,
    dashboard_data: DashboardUpdate,
    user_data: Dict = Depends(require_admin),
    service: DashboardService = Depends(get_dashboard_service)
):
    return service.update_dashboard(dashboard_id, dashboard_data)


@admin_router.delete("/{dashboard_id}")
async def delete_dashboard(
    dashboard_id: str,
    user_data: Dict = Depends(require_admin),
    service: DashboardService = Depends(get_dashboard_service)
):
    service.delete_dashboard(dashboard_id)
    return {"message": "Dashboard deleted successfully"}


@router.get("", response_model=List[CatalogDashboard])
async def list_my_dashboards(
    user_data: Dict = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Dashboards available to the current user's company"""
    return service.list_for_user(user_data["id"])


@router.post("/favorites", response_model=FavoriteResponse, response_model_exclude_none=True)
async def set_favorite(
    favorite: FavoriteRequest,
    user_data: Dict = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service)
):
    return service.set_favorite(user_data["id"], favorite.dashboard_id, favorite.is_favorite)


@router.post("/{dashboard_id}/favorite/toggle", response_model=FavoriteResponse, response_model_exclude_none=True)
async def toggle_favorite(
    dashboard_id: str,
    user_data: Dict = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service)
):
    return service.toggle_favorite(user_data["id"], dashboard_id)
