from fastapi import APIRouter, Depends
from portal.database.supabase_client import get_service_supabase
from portal.modules.reports.schemas import ReportResponse
from portal.modules.reports.service import ReportService
from portal.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/powerbi", tags=["reports"])


def get_report_service(supabase: Client = Depends(get_service_supabase)) -> ReportService:
    return ReportService(supabase)


@router.get("/reports", response_model=List[ReportResponse])
async def list_reports(
    user_data: Dict = Depends(get_current_user),
    service: ReportService = Depends(get_report_service)
):
    """Power BI reports visible to the current user"""
    return service.list_reports(user_data["id"])
