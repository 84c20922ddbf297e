from supabase import Client
from portal.modules.workspaces.schemas import (
    WorkspaceCreate, WorkspaceUpdate, WorkspaceResponse, WorkspaceCreateResponse,
    WorkspaceLinksResponse
)
from portal.core.errors import raise_for_postgrest
from typing import List, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class WorkspaceService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_workspace_row(self, workspace_id: str) -> dict:
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

    def list_workspaces(self) -> List[WorkspaceResponse]:
        try:
            result = self.supabase.table("workspaces")\
                .select("*")\
                .order("name")\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "list workspaces")
        return [WorkspaceResponse(**w) for w in result.data or []]

    def create_workspace(self, workspace_data: WorkspaceCreate) -> WorkspaceCreateResponse:
        try:
            result = self.supabase.table("workspaces").insert({
                "name": workspace_data.name,
                "description": workspace_data.description,
                "owner": workspace_data.owner
            }).execute()
        except Exception as e:
            raise_for_postgrest(e, "create workspace", conflict="A workspace with this name already exists")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create workspace")
        logger.info(f"Workspace {result.data[0]['id']} created")
        return WorkspaceCreateResponse(
            message="Workspace created successfully",
            workspace=WorkspaceResponse(**result.data[0])
        )

    def get_company_ids(self, workspace_id: str) -> List[str]:
        result = self.supabase.table("workspace_companies")\
            .select("company_id")\
            .eq("workspace_id", workspace_id)\
            .execute()
        return [link["company_id"] for link in result.data or []]

    def get_workspace(self, workspace_id: str) -> WorkspaceResponse:
        """Workspace with its linked company ids; link lookup failures yield an empty list"""
        workspace = self._get_workspace_row(workspace_id)
        try:
            companies = self.get_company_ids(workspace_id)
        except Exception as e:
            logger.warning(f"Error fetching company links for workspace {workspace_id}: {e}")
            companies = []
        return WorkspaceResponse(**workspace, companies=companies)

    def _replace_company_links(self, workspace_id: str, company_ids: List[str]) -> None:
        self.supabase.table("workspace_companies")\
            .delete()\
            .eq("workspace_id", workspace_id)\
            .execute()
        if company_ids:
            self.supabase.table("workspace_companies").insert([
                {"workspace_id": workspace_id, "company_id": company_id}
                for company_id in company_ids
            ]).execute()

    def update_workspace(self, workspace_id: str, workspace_data: WorkspaceUpdate) -> WorkspaceResponse:
        """Update workspace fields; when companies is given the links are replaced.
        A link failure is reported as a warning, the field update stands."""
        self._get_workspace_row(workspace_id)
        try:
            result = self.supabase.table("workspaces")\
                .update({
                    "name": workspace_data.name,
                    "description": workspace_data.description,
                    "owner": workspace_data.owner,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("id", workspace_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "update workspace", conflict="A workspace with this name already exists")
        if not result.data:
            raise HTTPException(status_code=404, detail="Workspace not found")
        workspace = result.data[0]

        if workspace_data.companies is None:
            return WorkspaceResponse(**workspace)

        try:
            self._replace_company_links(workspace_id, workspace_data.companies)
        except Exception as e:
            logger.warning(f"Error updating company links of workspace {workspace_id}: {e}")
            return WorkspaceResponse(
                **workspace,
                companies=[],
                warning=f"Workspace updated, but linking companies failed: {str(e)}"
            )
        return WorkspaceResponse(**workspace, companies=workspace_data.companies)

    def delete_workspace(self, workspace_id: str) -> bool:
        self._get_workspace_row(workspace_id)

        for link_table in ("workspace_companies", "dashboard_workspaces"):
            try:
                self.supabase.table(link_table)\
                    .delete()\
                    .eq("workspace_id", workspace_id)\
                    .execute()
            except Exception as e:
                logger.warning(f"Error removing {link_table} rows of workspace {workspace_id}: {e}")

        try:
            result = self.supabase.table("workspaces")\
                .delete()\
                .eq("id", workspace_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "delete workspace")
        logger.info(f"Workspace {workspace_id} deleted")
        return len(result.data or []) > 0

    def get_links(self, workspace_id: str) -> List[str]:
        try:
            return self.get_company_ids(workspace_id)
        except Exception as e:
            raise_for_postgrest(e, "fetch workspace links")

    def set_links(self, workspace_id: str, company_ids: Optional[List[str]]) -> WorkspaceLinksResponse:
        """Replace every company link of the workspace with company_ids"""
        company_ids = list(dict.fromkeys(company_ids or []))
        self._get_workspace_row(workspace_id)
        try:
            self._replace_company_links(workspace_id, company_ids)
        except Exception as e:
            raise_for_postgrest(e, "update workspace links")
        return WorkspaceLinksResponse(success=True, companies=company_ids)
