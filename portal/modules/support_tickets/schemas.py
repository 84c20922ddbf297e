from pydantic import BaseModel
from typing import Optional, List, Literal
from datetime import datetime

TICKET_STATUSES = ("open", "inProgress", "closed")


class TicketCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Literal["low", "medium", "high", "urgent"] = "medium"


class MessageCreate(BaseModel):
    content: Optional[str] = None


class TicketStatusUpdate(BaseModel):
    status: Optional[str] = None


class TicketMessage(BaseModel):
    id: str
    content: str
    sent_by: str = "user"
    created_at: Optional[datetime] = None


class TicketResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    messages: List[TicketMessage] = []


class TicketListResponse(BaseModel):
    data: List[TicketResponse]


class TicketCreateResponse(BaseModel):
    success: bool = True
    message: str
    data: TicketResponse


class TicketDetailResponse(BaseModel):
    ticket: TicketResponse


class MessageResponse(BaseModel):
    message: TicketMessage


class TicketStatus(BaseModel):
    id: str
    status: str


class TicketStatusResponse(BaseModel):
    message: str
    ticket: TicketStatus
