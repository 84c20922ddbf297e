from fastapi import APIRouter, Depends, Header
from portal.database.supabase_client import get_service_supabase
from portal.modules.chatbot.schemas import ChatRequest, ChatResponse
from portal.modules.chatbot.service import ChatbotService
from portal.core.dependencies import get_optional_user
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/chatbot", tags=["chatbot"])


def get_chatbot_service(supabase: Client = Depends(get_service_supabase)) -> ChatbotService:
    return ChatbotService(supabase)


@router.post("", response_model=ChatResponse)
async def chat(
    chat_request: ChatRequest,
    x_session_id: Optional[str] = Header(default=None),
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: ChatbotService = Depends(get_chatbot_service)
):
    """Keyword-based assistant; works without a session"""
    user_id = user_data["id"] if user_data else None
    return service.reply(chat_request.message, user_id=user_id, session_id=x_session_id)
