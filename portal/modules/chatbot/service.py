from supabase import Client
from portal.modules.chatbot.schemas import ChatResponse
from typing import Any, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous"

# Checked in order; the first rule with a keyword contained in the lowercased message wins
RESPONSE_RULES = [
    (
        ("olá", "oi", "bom dia", "boa tarde", "boa noite"),
        "Olá! Como posso ajudar você hoje?",
    ),
    (
        ("ajuda", "suporte"),
        "Estou aqui para ajudar! Você pode abrir um chamado na aba \"Suporte\" "
        "ou me perguntar sobre os serviços disponíveis.",
    ),
    (
        ("serviço", "produto"),
        "Oferecemos diversos serviços como manutenção, suporte técnico, consultoria e mais. "
        "Você pode verificar todos os detalhes na seção \"Serviços\".",
    ),
    (
        ("preço", "valor", "custo"),
        "Os preços variam de acordo com o serviço. Para obter um orçamento personalizado, "
        "recomendo abrir uma solicitação na aba \"Serviços\".",
    ),
    (
        ("prazo", "tempo"),
        "Os prazos de entrega dependem do tipo de serviço solicitado. Normalmente, respondemos "
        "solicitações em até 24 horas úteis e o prazo de execução é informado após a análise inicial.",
    ),
    (
        ("problema", "erro", "não funciona"),
        "Sinto muito pelo inconveniente. Recomendo abrir um chamado de suporte para que nossa "
        "equipe técnica possa analisar e resolver seu problema o mais rápido possível.",
    ),
    (
        ("obrigado", "obrigada", "valeu"),
        "De nada! Estou sempre à disposição para ajudar. Precisa de mais alguma coisa?",
    ),
    (
        ("contato", "telefone", "email"),
        "Você pode entrar em contato conosco pelo telefone (11) 1234-5678 ou pelo e-mail "
        "contato@empresa.com.br. Também atendemos pelo WhatsApp.",
    ),
    (
        ("chamado", "ticket"),
        "Para acompanhar seus chamados, acesse a aba \"Suporte\". Lá você encontrará o histórico "
        "de todas as suas solicitações e o status atual de cada uma.",
    ),
]

DEFAULT_RESPONSE = (
    "Entendi. Para melhor atendimento, recomendo que você abra um chamado detalhando sua "
    "necessidade. Nossa equipe especializada irá analisar seu caso e responder o mais breve possível."
)


def get_auto_response(message: str) -> str:
    lower_message = message.lower()
    for keywords, response in RESPONSE_RULES:
        if any(keyword in lower_message for keyword in keywords):
            return response
    return DEFAULT_RESPONSE


class ChatbotService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _log_message(self, user_id: str, message: str, is_from_user: bool, session_id: str):
        try:
            self.supabase.table("chatbot_messages").insert({
                "user_id": user_id,
                "message": message,
                "is_from_user": is_from_user,
                "session_id": session_id
            }).execute()
        except Exception as e:
            logger.error(f"Error saving chatbot message for {user_id}: {e}")

    def reply(self, message: Any, user_id: Optional[str] = None, session_id: Optional[str] = None) -> ChatResponse:
        """Answer a message and record both sides of the exchange"""
        if not isinstance(message, str) or not message:
            raise HTTPException(status_code=400, detail="Invalid message")

        user_id = user_id or ANONYMOUS_USER
        session_id = session_id or datetime.now(timezone.utc).isoformat()

        self._log_message(user_id, message, True, session_id)
        response = get_auto_response(message)
        self._log_message(user_id, response, False, session_id)
        return ChatResponse(response=response)
