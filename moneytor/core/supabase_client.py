# moneytor/core/supabase_client.py
from supabase import create_client, Client
from moneytor.config import settings
import logging

logger = logging.getLogger(__name__)


def get_supabase_client() -> Client:
    """
    Returns a Supabase client for table queries.
    Uses the service key when configured, otherwise the anon key.
    """
    key = settings.SUPABASE_SERVICE_KEY or settings.SUPABASE_ANON_KEY
    if not key:
        raise RuntimeError("SUPABASE_SERVICE_KEY or SUPABASE_ANON_KEY must be set")

    try:
        return create_client(settings.SUPABASE_URL, key)
    except Exception as e:
        logger.error(f"❌ Failed to create Supabase client: {e}")
        raise
