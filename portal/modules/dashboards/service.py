from supabase import Client
from portal.modules.dashboards.schemas import (
    DashboardCreate, DashboardUpdate, DashboardResponse, DashboardMutationResponse,
    CatalogDashboard, FavoriteResponse
)
from portal.core.errors import raise_for_postgrest
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import uuid
import logging

logger = logging.getLogger(__name__)


class DashboardService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # Admin catalog

    def _validate(self, dashboard_data: DashboardCreate):
        if not dashboard_data.title or not dashboard_data.embed_url:
            raise HTTPException(status_code=400, detail="Title and embed URL are required")

    def _ensure_exists(self, dashboard_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("dashboards")\
                .select("*")\
                .eq("id", dashboard_id)\
                .single()\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "fetch dashboard", not_found="Dashboard not found")
        if not result.data:
            raise HTTPException(status_code=404, detail="Dashboard not found")
        return result.data

    def _workspace_ids_by_dashboard(self, dashboard_ids: List[str]) -> Dict[str, List[str]]:
        links: Dict[str, List[str]] = {}
        if not dashboard_ids:
            return links
        result = self.supabase.table("dashboard_workspaces")\
            .select("dashboard_id, workspace_id")\
            .in_("dashboard_id", dashboard_ids)\
            .execute()
        for row in result.data or []:
            links.setdefault(row["dashboard_id"], []).append(row["workspace_id"])
        return links

    def _link_workspaces(self, dashboard_id: str, workspace_ids: List[str]) -> List[str]:
        """Insert workspace links and return the ids actually linked; failures are logged only"""
        if not workspace_ids:
            return []
        try:
            self.supabase.table("dashboard_workspaces").insert([
                {"dashboard_id": dashboard_id, "workspace_id": workspace_id}
                for workspace_id in workspace_ids
            ]).execute()
        except Exception as e:
            logger.error(f"Error linking workspaces to dashboard {dashboard_id}: {e}")
            return []
        return list(workspace_ids)

    def _unlink_workspaces(self, dashboard_id: str):
        try:
            self.supabase.table("dashboard_workspaces")\
                .delete()\
                .eq("dashboard_id", dashboard_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error removing workspace links of dashboard {dashboard_id}: {e}")

    def list_dashboards(self) -> List[DashboardResponse]:
        """All dashboards with the ids of the workspaces they are linked to"""
        try:
            result = self.supabase.table("dashboards")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "list dashboards")
        dashboards = result.data or []

        try:
            links = self._workspace_ids_by_dashboard([d["id"] for d in dashboards])
        except Exception as e:
            raise_for_postgrest(e, "list dashboard workspaces")
        return [DashboardResponse(**d, workspaces=links.get(d["id"], [])) for d in dashboards]

    def get_dashboard(self, dashboard_id: str) -> DashboardResponse:
        dashboard = self._ensure_exists(dashboard_id)
        try:
            workspaces = self._workspace_ids_by_dashboard([dashboard_id]).get(dashboard_id, [])
        except Exception as e:
            logger.error(f"Error fetching workspaces of dashboard {dashboard_id}: {e}")
            workspaces = []
        return DashboardResponse(**dashboard, workspaces=workspaces)

    def create_dashboard(self, dashboard_data: DashboardCreate) -> DashboardMutationResponse:
        self._validate(dashboard_data)
        dashboard_id = str(uuid.uuid4())
        try:
            result = self.supabase.table("dashboards").insert({
                "id": dashboard_id,
                "title": dashboard_data.title,
                "description": dashboard_data.description,
                "category": dashboard_data.category,
                "type": dashboard_data.type,
                "embed_url": dashboard_data.embed_url,
                "thumbnail": dashboard_data.thumbnail,
                "is_new": dashboard_data.is_new,
                "is_favorite": False
            }).execute()
        except Exception as e:
            raise_for_postgrest(e, "create dashboard")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create dashboard")

        workspaces = self._link_workspaces(dashboard_id, dashboard_data.workspaces or [])
        logger.info(f"Dashboard {dashboard_id} created")
        return DashboardMutationResponse(
            message="Dashboard created successfully",
            dashboard=DashboardResponse(**result.data[0], workspaces=workspaces)
        )

    def update_dashboard(self, dashboard_id: str, dashboard_data: DashboardUpdate) -> DashboardMutationResponse:
        """Update fields; when workspaces is supplied its links are replaced (best-effort)"""
        self._validate(dashboard_data)
        self._ensure_exists(dashboard_id)
        try:
            result = self.supabase.table("dashboards")\
                .update({
                    "title": dashboard_data.title,
                    "description": dashboard_data.description,
                    "category": dashboard_data.category,
                    "type": dashboard_data.type,
                    "embed_url": dashboard_data.embed_url,
                    "thumbnail": dashboard_data.thumbnail,
                    "is_new": dashboard_data.is_new,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("id", dashboard_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "update dashboard")
        if not result.data:
            raise HTTPException(status_code=404, detail="Dashboard not found")

        if dashboard_data.workspaces is not None:
            self._unlink_workspaces(dashboard_id)
            workspaces = self._link_workspaces(dashboard_id, dashboard_data.workspaces)
        else:
            try:
                workspaces = self._workspace_ids_by_dashboard([dashboard_id]).get(dashboard_id, [])
            except Exception as e:
                logger.warning(f"Error fetching workspace links of dashboard {dashboard_id}: {e}")
                workspaces = []

        return DashboardMutationResponse(
            message="Dashboard updated successfully",
            dashboard=DashboardResponse(**result.data[0], workspaces=workspaces)
        )

    def delete_dashboard(self, dashboard_id: str) -> bool:
        self._ensure_exists(dashboard_id)
        self._unlink_workspaces(dashboard_id)
        try:
            result = self.supabase.table("dashboards")\
                .delete()\
                .eq("id", dashboard_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "delete dashboard")
        logger.info(f"Dashboard {dashboard_id} deleted")
        return len(result.data or []) > 0

    # User catalog and favorites

    def _favorite_ids(self, user_id: str) -> List[str]:
        try:
            result = self.supabase.table("user_favorites")\
                .select("dashboard_id")\
                .eq("user_id", user_id)\
                .execute()
            return [f["dashboard_id"] for f in result.data or []]
        except Exception as e:
            logger.warning(f"Error fetching favorites of user {user_id}: {e}")
            return []

    def list_for_user(self, user_id: str) -> List[CatalogDashboard]:
        """Dashboards visible through the user's company, newest first"""
        try:
            profile = self.supabase.table("profiles")\
                .select("company_id")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "identify user company")
        company_id = profile.data.get("company_id") if profile and profile.data else None
        if not company_id:
            raise HTTPException(status_code=400, detail="User is not associated with any company")

        try:
            workspace_links = self.supabase.table("workspace_companies")\
                .select("workspace_id")\
                .eq("company_id", company_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "fetch company workspaces")
        workspace_ids = [w["workspace_id"] for w in workspace_links.data or []]
        if not workspace_ids:
            return []

        try:
            dashboard_links = self.supabase.table("dashboard_workspaces")\
                .select("dashboard_id")\
                .in_("workspace_id", workspace_ids)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "fetch workspace dashboards")
        dashboard_ids = list(dict.fromkeys(d["dashboard_id"] for d in dashboard_links.data or []))
        if not dashboard_ids:
            return []

        try:
            dashboards = self.supabase.table("dashboards")\
                .select("*")\
                .in_("id", dashboard_ids)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "fetch dashboards")

        favorite_ids = set(self._favorite_ids(user_id))
        return [
            CatalogDashboard(
                id=d["id"],
                title=d["title"],
                category=d.get("category"),
                type=d.get("type"),
                description=d.get("description"),
                last_updated=d.get("updated_at") or d.get("created_at"),
                is_favorite=d["id"] in favorite_ids,
                thumbnail=d.get("thumbnail"),
                is_new=bool(d.get("is_new")),
                embed_url=d.get("embed_url")
            )
            for d in dashboards.data or []
        ]

    def _is_favorite(self, user_id: str, dashboard_id: str) -> bool:
        try:
            existing = self.supabase.table("user_favorites")\
                .select("id")\
                .eq("user_id", user_id)\
                .eq("dashboard_id", dashboard_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "check favorite")
        return bool(existing is not None and existing.data)

    def set_favorite(self, user_id: str, dashboard_id: Optional[str], is_favorite: bool) -> FavoriteResponse:
        """Make the favorite state equal to is_favorite; a no-op when it already is"""
        if not dashboard_id:
            raise HTTPException(status_code=400, detail="Dashboard id is required")
        self._ensure_exists(dashboard_id)

        currently_favorite = self._is_favorite(user_id, dashboard_id)
        if is_favorite and not currently_favorite:
            try:
                self.supabase.table("user_favorites").insert({
                    "user_id": user_id,
                    "dashboard_id": dashboard_id,
                    "created_at": datetime.now(timezone.utc).isoformat()
                }).execute()
            except Exception as e:
                raise_for_postgrest(e, "add favorite")
            return FavoriteResponse(success=True, is_favorite=True)

        if not is_favorite and currently_favorite:
            try:
                self.supabase.table("user_favorites")\
                    .delete()\
                    .eq("user_id", user_id)\
                    .eq("dashboard_id", dashboard_id)\
                    .execute()
            except Exception as e:
                raise_for_postgrest(e, "remove favorite")
            return FavoriteResponse(success=True, is_favorite=False)

        return FavoriteResponse(success=True, is_favorite=currently_favorite, message="No change needed")

    def toggle_favorite(self, user_id: str, dashboard_id: str) -> FavoriteResponse:
        """Flip the favorite state; set_favorite answers 404 for unknown dashboards"""
        return self.set_favorite(user_id, dashboard_id, not self._is_favorite(user_id, dashboard_id))
