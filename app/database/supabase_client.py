from typing import Optional

from supabase import create_client, Client
from app.config import settings
from app.core.errors import StoreUnavailable


class SupabaseClient:
    """Builds the anon and service-role clients. Services never call this
    directly; they receive a client handle from the route or job that owns them."""

    _client: Optional[Client] = None
    _service_client: Optional[Client] = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            if not settings.supabase_url or not settings.supabase_key:
                raise StoreUnavailable("Supabase is not configured (SUPABASE_URL / SUPABASE_KEY)")
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Use in background jobs."""
        if cls._service_client is None and settings.supabase_service_role_key and settings.supabase_url:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()
