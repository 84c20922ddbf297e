from supabase import Client
from portal.modules.reports.schemas import ReportResponse
from portal.core.errors import raise_for_postgrest
from typing import List, Dict, Any, Iterable
import logging

logger = logging.getLogger(__name__)

ALL_REPORTS_PERMISSION = "reports:all"


def can_view_report(report: Dict[str, Any], permissions: Iterable[str]) -> bool:
    permissions = set(permissions or [])
    return (
        ALL_REPORTS_PERMISSION in permissions
        or f"report:{report['id']}" in permissions
        or f"workspace:{report.get('workspace_id')}" in permissions
    )


class ReportService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_reports(self, user_id: str) -> List[ReportResponse]:
        """Every report for admins; other users only see what their profile permissions allow"""
        try:
            profile = self.supabase.table("profiles")\
                .select("role, permissions")\
                .eq("id", user_id)\
                .single()\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "fetch user profile", not_found="User profile not found")
        profile_data = profile.data or {}

        try:
            reports = self.supabase.table("powerbi_reports").select("*").execute()
        except Exception as e:
            raise_for_postgrest(e, "fetch reports")
        rows = reports.data or []

        if profile_data.get("role") != "admin":
            rows = [r for r in rows if can_view_report(r, profile_data.get("permissions"))]

        return [
            ReportResponse(
                id=r["id"],
                name=r["name"],
                embed_url=r["embed_url"],
                type=r.get("type"),
                thumbnail=r.get("thumbnail_url"),
                description=r.get("description"),
                created_at=r.get("created_at"),
                workspace=r.get("workspace_name")
            )
            for r in rows
        ]
