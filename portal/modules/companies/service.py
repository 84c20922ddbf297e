from supabase import Client
from portal.modules.companies.schemas import CompanyCreate, CompanyUpdate, CompanyResponse
from portal.core.errors import raise_for_postgrest
from portal.database.storage import LogoStorage, COMPANY_LOGO_PREFIX, read_logo_upload
from typing import List, Dict, Any
from datetime import datetime, timezone
from fastapi import HTTPException, UploadFile
import os
import uuid
import logging

logger = logging.getLogger(__name__)


class CompanyService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _count_active_users(self, company_id: str) -> int:
        try:
            result = self.supabase.table("profiles")\
                .select("id", count="exact")\
                .eq("company_id", company_id)\
                .eq("is_active", True)\
                .execute()
            return result.count or 0
        except Exception as e:
            logger.error(f"Error counting users for company {company_id}: {e}")
            return 0

    def _to_response(self, row: Dict[str, Any]) -> CompanyResponse:
        return CompanyResponse(**row, user_count=self._count_active_users(row["id"]))

    def list_companies(self) -> List[CompanyResponse]:
        """All companies ordered by name, each with its active user count"""
        try:
            result = self.supabase.table("companies")\
                .select("*")\
                .order("name")\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "list companies")
        return [self._to_response(company) for company in result.data or []]

    def get_company(self, company_id: str) -> CompanyResponse:
        try:
            result = self.supabase.table("companies")\
                .select("*")\
                .eq("id", company_id)\
                .single()\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "fetch company", not_found="Company not found")
        if not result.data:
            raise HTTPException(status_code=404, detail="Company not found")
        return self._to_response(result.data)

    def create_company(self, company_data: CompanyCreate) -> CompanyResponse:
        try:
            result = self.supabase.table("companies").insert({
                "name": company_data.name,
                "description": company_data.description,
                "logo_url": company_data.logo
            }).execute()
        except Exception as e:
            raise_for_postgrest(e, "create company", conflict="A company with this name already exists")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create company")
        logger.info(f"Company {result.data[0]['id']} created")
        return CompanyResponse(**result.data[0])

    def update_company(self, company_id: str, company_data: CompanyUpdate) -> CompanyResponse:
        update_data = {
            "name": company_data.name,
            "description": company_data.description,
            "updated_at": datetime.now(timezone.utc).isoformat()
        }
        if company_data.logo is not None:
            update_data["logo_url"] = company_data.logo
        try:
            result = self.supabase.table("companies")\
                .update(update_data)\
                .eq("id", company_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "update company", conflict="A company with this name already exists")
        if not result.data:
            raise HTTPException(status_code=404, detail="Company not found")
        return self._to_response(result.data[0])

    def delete_company(self, company_id: str) -> bool:
        """Delete a company; refused while profiles still reference it"""
        self.get_company(company_id)

        try:
            linked = self.supabase.table("profiles")\
                .select("id", count="exact")\
                .eq("company_id", company_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "check company users")
        if (linked.count or 0) > 0:
            raise HTTPException(
                status_code=400,
                detail=f"Company has {linked.count} associated user(s) and cannot be deleted"
            )

        try:
            self.supabase.table("workspace_companies")\
                .delete()\
                .eq("company_id", company_id)\
                .execute()
        except Exception as e:
            logger.warning(f"Error removing workspace links of company {company_id}: {e}")

        try:
            result = self.supabase.table("companies")\
                .delete()\
                .eq("id", company_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "delete company")
        logger.info(f"Company {company_id} deleted")
        return len(result.data or []) > 0

    async def upload_logo(self, company_id: str, file: UploadFile) -> CompanyResponse:
        """Store an uploaded logo in the logos bucket and save its public URL"""
        self.get_company(company_id)
        storage = LogoStorage(self.supabase)
        content = await read_logo_upload(file)
        extension = os.path.splitext(file.filename or "")[1] or ".png"
        path = f"{COMPANY_LOGO_PREFIX}{company_id}/{uuid.uuid4().hex}{extension}"
        try:
            storage.ensure_bucket()
            storage.upload_file(content, path, file.content_type)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to upload logo: {str(e)}")

        try:
            result = self.supabase.table("companies")\
                .update({"logo_url": storage.public_url(path)})\
                .eq("id", company_id)\
                .execute()
        except Exception as e:
            storage.delete_files([path])
            raise_for_postgrest(e, "save company logo")
        return self._to_response(result.data[0])

