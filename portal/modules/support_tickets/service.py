from supabase import Client
from portal.modules.support_tickets.schemas import (
    TicketCreate, TicketResponse, TicketMessage, TicketListResponse, TicketCreateResponse,
    TicketDetailResponse, MessageResponse, TicketStatus, TicketStatusResponse, TICKET_STATUSES
)
from portal.core.errors import raise_for_postgrest
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import time
import logging

logger = logging.getLogger(__name__)


def generate_ticket_id(now_ms: Optional[int] = None) -> str:
    """'TICKET-' plus the last six digits of the epoch-millisecond clock"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"TICKET-{str(now_ms)[-6:]}"


class SupportTicketService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _messages_by_ticket(self, ticket_ids: List[str]) -> Dict[str, List[TicketMessage]]:
        messages: Dict[str, List[TicketMessage]] = {}
        if not ticket_ids:
            return messages
        result = self.supabase.table("support_ticket_messages")\
            .select("*")\
            .in_("ticket_id", ticket_ids)\
            .order("created_at")\
            .execute()
        for row in result.data or []:
            messages.setdefault(row["ticket_id"], []).append(TicketMessage(**row))
        return messages

    def _get_own_ticket(self, ticket_id: str, user_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("support_tickets")\
                .select("*")\
                .eq("id", ticket_id)\
                .eq("user_id", user_id)\
                .single()\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "fetch ticket", not_found="Ticket not found")
        if not result.data:
            raise HTTPException(status_code=404, detail="Ticket not found")
        return result.data

    def list_tickets(self, user_id: str) -> TicketListResponse:
        """The user's tickets, newest first, each with its messages"""
        try:
            result = self.supabase.table("support_tickets")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            tickets = result.data or []
            messages = self._messages_by_ticket([t["id"] for t in tickets])
        except Exception as e:
            raise_for_postgrest(e, "list tickets")
        return TicketListResponse(data=[
            TicketResponse(**t, messages=messages.get(t["id"], [])) for t in tickets
        ])

    def create_ticket(self, user_id: str, ticket_data: TicketCreate) -> TicketCreateResponse:
        """Open a ticket; the description also becomes its first message (best-effort)"""
        if not ticket_data.title or not ticket_data.description or not ticket_data.category:
            raise HTTPException(status_code=400, detail="Title, description and category are required")

        ticket_id = generate_ticket_id()
        try:
            result = self.supabase.table("support_tickets").insert({
                "id": ticket_id,
                "user_id": user_id,
                "title": ticket_data.title,
                "description": ticket_data.description,
                "category": ticket_data.category,
                "priority": ticket_data.priority,
                "status": "open"
            }).execute()
        except Exception as e:
            raise_for_postgrest(e, "create ticket", conflict="Ticket id collision, please retry")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create ticket")

        try:
            self.supabase.table("support_ticket_messages").insert({
                "ticket_id": ticket_id,
                "user_id": user_id,
                "content": ticket_data.description,
                "sent_by": "user"
            }).execute()
        except Exception as e:
            logger.error(f"Error adding first message to ticket {ticket_id}: {e}")

        logger.info(f"Ticket {ticket_id} created by user {user_id}")
        return TicketCreateResponse(
            success=True,
            message="Ticket created successfully",
            data=TicketResponse(**result.data[0])
        )

    def get_ticket(self, ticket_id: str, user_id: str) -> TicketDetailResponse:
        ticket = self._get_own_ticket(ticket_id, user_id)
        try:
            messages = self._messages_by_ticket([ticket_id]).get(ticket_id, [])
        except Exception as e:
            raise_for_postgrest(e, "fetch ticket messages")
        return TicketDetailResponse(ticket=TicketResponse(**ticket, messages=messages))

    def add_message(self, ticket_id: str, user_id: str, content: Optional[str]) -> MessageResponse:
        """Append a user message; a closed ticket is reopened (best-effort)"""
        if not content or not content.strip():
            raise HTTPException(status_code=400, detail="Message content is required")
        ticket = self._get_own_ticket(ticket_id, user_id)

        try:
            result = self.supabase.table("support_ticket_messages").insert({
                "ticket_id": ticket_id,
                "user_id": user_id,
                "content": content,
                "sent_by": "user"
            }).execute()
        except Exception as e:
            raise_for_postgrest(e, "add message")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to add message")

        if ticket.get("status") == "closed":
            try:
                self.supabase.table("support_tickets")\
                    .update({"status": "open", "updated_at": datetime.now(timezone.utc).isoformat()})\
                    .eq("id", ticket_id)\
                    .execute()
            except Exception as e:
                logger.warning(f"Error reopening ticket {ticket_id}: {e}")

        return MessageResponse(message=TicketMessage(**result.data[0]))

    def update_status(self, ticket_id: str, user_id: str, status: Optional[str]) -> TicketStatusResponse:
        if status not in TICKET_STATUSES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid status. Allowed values: {', '.join(TICKET_STATUSES)}"
            )
        self._get_own_ticket(ticket_id, user_id)
        try:
            result = self.supabase.table("support_tickets")\
                .update({"status": status, "updated_at": datetime.now(timezone.utc).isoformat()})\
                .eq("id", ticket_id)\
                .execute()
        except Exception as e:
            raise_for_postgrest(e, "update ticket status")
        if not result.data:
            raise HTTPException(status_code=404, detail="Ticket not found")
        return TicketStatusResponse(
            message="Status updated successfully",
            ticket=TicketStatus(id=result.data[0]["id"], status=result.data[0]["status"])
        )
