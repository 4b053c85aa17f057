from supabase import Client, ClientOptions, create_client

from config import Settings, settings


def create_supabase_client(config: Settings = settings) -> Client:
    """Build a service-role client; sessions are never persisted server-side."""
    return create_client(
        config.supabase_url,
        config.supabase_service_role_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )


def get_supabase() -> Client:
    return create_supabase_client()
