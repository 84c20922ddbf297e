from fastapi import APIRouter, Depends
from portal.database.supabase_client import get_service_supabase
from portal.modules.support_tickets.schemas import (
    TicketCreate, MessageCreate, TicketStatusUpdate, TicketListResponse, TicketCreateResponse,
    TicketDetailResponse, MessageResponse, TicketStatusResponse
)
from portal.modules.support_tickets.service import SupportTicketService
from portal.core.dependencies import get_current_user
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/support-tickets", tags=["support-tickets"])


def get_ticket_service(supabase: Client = Depends(get_service_supabase)) -> SupportTicketService:
    return SupportTicketService(supabase)


@router.get("", response_model=TicketListResponse)
async def list_tickets(
    user_data: Dict = Depends(get_current_user),
    service: SupportTicketService = Depends(get_ticket_service)
):
    """Current user's tickets with their messages"""
    return service.list_tickets(user_data["id"])


@router.post("", response_model=TicketCreateResponse)
async def create_ticket(
    ticket_data: TicketCreate,
    user_data: Dict = Depends(get_current_user),
    service: SupportTicketService = Depends(get_ticket_service)
):
    return service.create_ticket(user_data["id"], ticket_data)


@router.get("/{ticket_id}", response_model=TicketDetailResponse)
async def get_ticket(
    ticket_id: str,
    user_data: Dict = Depends(get_current_user),
    service: SupportTicketService = Depends(get_ticket_service)
):
    return service.get_ticket(ticket_id, user_data["id"])


@router.post("/{ticket_id}/messages", response_model=MessageResponse)
async def add_ticket_message(
    ticket_id: str,
    message: MessageCreate,
    user_data: Dict = Depends(get_current_user),
    service: SupportTicketService = Depends(get_ticket_service)
):
    return service.add_message(ticket_id, user_data["id"], message.content)


@router.patch("/{ticket_id}", response_model=TicketStatusResponse)
async def update_ticket_status(
    ticket_id: str,
    status_update: TicketStatusUpdate,
    user_data: Dict = Depends(get_current_user),
    service: SupportTicketService = Depends(get_ticket_service)
):
    """Set ticket status (open, inProgress or closed)"""
    return service.update_status(ticket_id, user_data["id"], status_update.status)
