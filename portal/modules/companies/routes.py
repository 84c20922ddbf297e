from fastapi import APIRouter, Depends, UploadFile, File
from portal.database.supabase_client import get_service_supabase
from portal.modules.companies.schemas import CompanyCreate, CompanyUpdate, CompanyResponse
from portal.modules.companies.service import CompanyService
from portal.core.dependencies import require_admin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/admin/companies", tags=["companies"])


def get_company_service(supabase: Client = Depends(get_service_supabase)) -> CompanyService:
    return CompanyService(supabase)


@router.get("", response_model=List[CompanyResponse])
async def list_companies(
    user_data: Dict = Depends(require_admin),
    service: CompanyService = Depends(get_company_service)
):
    """List companies with their active user counts"""
    return service.list_companies()


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(
    company_data: CompanyCreate,
    user_data: Dict = Depends(require_admin),
    service: CompanyService = Depends(get_company_service)
):
    return service.create_company(company_data)


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: str,
    user_data: Dict = Depends(require_admin),
    service: CompanyService = Depends(get_company_service)
):
    return service.get_company(company_id)


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: str,
    company_data: CompanyUpdate,
    user_data: Dict = Depends(require_admin),
    service: CompanyService = Depends(get_company_service)
):
    return service.update_company(company_id, company_data)


@router.delete("/{company_id}")
async def delete_company(
    company_id: str,
    user_data: Dict = Depends(require_admin),
    service: CompanyService = Depends(get_company_service)
):
    """Delete company (refused with 400 while users are linked to it)"""
    service.delete_company(company_id)
    return {"message": "Company deleted successfully"}


@router.post("/{company_id}/logo", response_model=CompanyResponse)
async def upload_company_logo(
    company_id: str,
    file: UploadFile = File(...),
    user_data: Dict = Depends(require_admin),
    service: CompanyService = Depends(get_company_service)
):
    """Upload a company logo image to the logos bucket"""
    return await service.upload_logo(company_id, file)
