from supabase import create_client, Client
from circular_democracy.config import get_settings

_client: Client | None = None


def get_supabase() -> Client:
    """Get or create a Supabase client using the service role key (backend only)."""
    global _client
    if _client is None:
        settings = get_settings()
        _client = create_client(settings.supabase_url, settings.supabase_service_key)
    return _client
