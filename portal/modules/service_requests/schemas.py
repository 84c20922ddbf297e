from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class ServiceRequestCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    service_type: Optional[str] = Field(default=None, alias="serviceType")
    description: Optional[str] = None
    urgency: Optional[str] = None


class Attachment(BaseModel):
    """Uploaded file read into memory"""
    file_name: str
    content: bytes
    content_type: str = "application/octet-stream"


class ServiceRequestResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    name: str
    email: str
    phone: Optional[str] = None
    service_type: str
    description: str
    urgency: str = "normal"
    status: str = "pending"
    created_at: Optional[datetime] = None


class ServiceRequestListResponse(BaseModel):
    data: List[ServiceRequestResponse]


class ServiceRequestCreateResponse(BaseModel):
    success: bool = True
    message: str
    data: ServiceRequestResponse
