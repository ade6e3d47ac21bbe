import logging
import threading

from supabase import create_client, Client
from shelfbook.config import settings
from shelfbook.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class SupabaseClient:
    _client: Client = None
    _lock = threading.Lock()

    @classmethod
    def get_client(cls) -> Client:
        """Shared client, built on first use. Raises ConfigurationError if URL or key is missing."""
        if cls._client is not None:
            return cls._client
        with cls._lock:
            if cls._client is None:
                if not settings.supabase_url or not settings.supabase_key:
                    raise ConfigurationError(
                        "Missing Supabase configuration: SUPABASE_URL and SUPABASE_KEY must be set"
                    )
                cls._client = create_client(settings.supabase_url, settings.supabase_key)
                logger.info("Supabase client initialized")
        return cls._client

    @classmethod
    def reset_client(cls):
        with cls._lock:
            cls._client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()
