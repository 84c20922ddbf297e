from fastapi import APIRouter, Depends, Request, HTTPException
from starlette.datastructures import UploadFile
from portal.database.supabase_client import get_service_supabase
from portal.modules.service_requests.schemas import (
    ServiceRequestCreate, ServiceRequestListResponse, ServiceRequestCreateResponse, Attachment
)
from portal.modules.service_requests.service import ServiceRequestService
from portal.core.dependencies import get_current_user
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/service-requests", tags=["service-requests"])


def get_service_request_service(supabase: Client = Depends(get_service_supabase)) -> ServiceRequestService:
    return ServiceRequestService(supabase)


@router.get("", response_model=ServiceRequestListResponse)
async def list_service_requests(
    user_data: Dict = Depends(get_current_user),
    service: ServiceRequestService = Depends(get_service_request_service)
):
    return service.list_requests(user_data["id"])


@router.post("", response_model=ServiceRequestCreateResponse)
async def create_service_request(
    request: Request,
    user_data: Dict = Depends(get_current_user),
    service: ServiceRequestService = Depends(get_service_request_service)
):
    """Create a service request from a JSON body or a multipart form with attachments"""
    attachments = []
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" in content_type:
        form = await request.form()
        fields = {key: value for key, value in form.items() if isinstance(value, str)}
        for upload in form.getlist("attachments"):
            if isinstance(upload, UploadFile) and upload.filename:
                attachments.append(Attachment(
                    file_name=upload.filename,
                    content=await upload.read(),
                    content_type=upload.content_type or "application/octet-stream"
                ))
    else:
        try:
            fields = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid request body")
        if not isinstance(fields, dict):
            raise HTTPException(status_code=400, detail="Invalid request body")

    request_data = ServiceRequestCreate(**{
        key: value for key, value in fields.items()
        if key in ("name", "email", "phone", "serviceType", "service_type", "description", "urgency")
        and (value is None or isinstance(value, str))
    })
    return service.create_request(user_data["id"], request_data, attachments)
