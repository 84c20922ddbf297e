from supabase import Client
from portal.modules.service_requests.schemas import (
    ServiceRequestCreate, ServiceRequestResponse, ServiceRequestListResponse,
    ServiceRequestCreateResponse, Attachment
)
from portal.core.errors import raise_for_postgrest
from portal.database.storage import BucketStorage
from portal.config import settings
from typing import List, Optional
from fastapi import HTTPException
import time
import logging

logger = logging.getLogger(__name__)


class ServiceRequestService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.storage = BucketStorage(supabase, settings.service_attachments_bucket)

    def list_requests(self, user_id: str) -> ServiceRequestListResponse:
        try:
            result = self.supabase.table("service_requests")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "list service requests")
        return ServiceRequestListResponse(data=[ServiceRequestResponse(**r) for r in result.data or []])

    def create_request(
        self,
        user_id: str,
        request_data: ServiceRequestCreate,
        attachments: Optional[List[Attachment]] = None
    ) -> ServiceRequestCreateResponse:
        """Record a service request, then upload its attachments (failures are logged only)"""
        if not (request_data.name and request_data.email
                and request_data.service_type and request_data.description):
            raise HTTPException(
                status_code=400,
                detail="Name, email, service type and description are required"
            )

        try:
            result = self.supabase.table("service_requests").insert({
                "user_id": user_id,
                "name": request_data.name,
                "email": request_data.email,
                "phone": request_data.phone or "",
                "service_type": request_data.service_type,
                "description": request_data.description,
                "urgency": request_data.urgency or "normal",
                "status": "pending"
            }).execute()
        except Exception as e:
            raise_for_postgrest(e, "create service request")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create service request")

        service_request = result.data[0]
        if attachments:
            self._store_attachments(service_request["id"], attachments)

        logger.info(f"Service request {service_request['id']} created by user {user_id}")
        return ServiceRequestCreateResponse(
            success=True,
            message="Service request created successfully",
            data=ServiceRequestResponse(**service_request)
        )

    def _store_attachments(self, service_request_id: str, attachments: List[Attachment]):
        records = []
        for attachment in attachments:
            path = f"{service_request_id}/{int(time.time() * 1000)}-{attachment.file_name}"
            try:
                self.storage.upload_file(attachment.content, path, attachment.content_type)
            except Exception as e:
                logger.error(f"Error uploading attachment {attachment.file_name}: {e}")
                continue
            records.append({
                "service_request_id": service_request_id,
                "file_name": attachment.file_name,
                "file_path": path,
                "file_size": len(attachment.content),
                "file_type": attachment.content_type
            })

        if not records:
            return
        try:
            self.supabase.table("service_attachments").insert(records).execute()
        except Exception as e:
            logger.error(f"Error saving attachment records for request {service_request_id}: {e}")
