from supabase import create_client, Client
from portal.config import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class SupabaseClient:
    """Process-wide clients: the anon client for Supabase Auth sign-in flows and
    the service-role client for tables, storage and the auth admin API."""
    _client: Optional[Client] = None
    _service_client: Optional[Client] = None
    _warned_fallback = False

    @staticmethod
    def _create(key: str) -> Client:
        if not settings.supabase_url or not key:
            raise RuntimeError("SUPABASE_URL and a Supabase key must be configured")
        return create_client(settings.supabase_url, key)

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = cls._create(settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Falls back to the anon client when no key is set."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = cls._create(settings.supabase_service_role_key)
        if cls._service_client is None:
            if not cls._warned_fallback:
                logger.warning("Service-role key missing; admin and storage calls run with the anon key")
                cls._warned_fallback = True
            return cls.get_client()
        return cls._service_client

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None
        cls._warned_fallback = False


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()
