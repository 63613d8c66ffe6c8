# mlshelf/core/backend.py
from supabase import Client, ClientOptions, create_client

from .config import Settings


class BackendNotConfigured(RuntimeError):
    pass


def create_backend_client(settings: Settings) -> Client:
    """Build a backend client for one request.

    Sessions live in memory only and are never refreshed in the background;
    the session context restores them explicitly from the caller's tokens.
    """
    if not settings.is_configured:
        raise BackendNotConfigured(
            "Missing Supabase environment variables. Please connect to Supabase."
        )
    return create_client(
        settings.SUPABASE_URL,
        settings.SUPABASE_ANON_KEY,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
