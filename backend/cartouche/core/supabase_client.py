"""
Supabase client initialization and configuration.

This module provides a singleton Supabase client instance
shared by every photo run that uploads to storage.
"""

import threading
from typing import Optional
from supabase import create_client, Client
from cartouche.core.config import settings
from cartouche.core.logger import logger


class SupabaseClient:
    """Singleton wrapper for Supabase client."""

    _instance: Optional[Client] = None
    _lock = threading.Lock()

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the Supabase client instance.

        Returns:
            Supabase client instance

        Raises:
            ValueError: If required environment variables are missing
        """
        if cls._instance is not None:
            return cls._instance

        # Runs saving concurrently must share a single client
        with cls._lock:
            if cls._instance is None:
                supabase_url = settings.SUPABASE_URL
                supabase_key = settings.SUPABASE_ANON_KEY

                if not supabase_url or not supabase_key:
                    raise ValueError(
                        "Missing Supabase credentials. Please set SUPABASE_URL and "
                        "SUPABASE_ANON_KEY environment variables."
                    )

                cls._instance = create_client(supabase_url, supabase_key)
                logger.info("Supabase client initialized successfully")

        return cls._instance

    @classmethod
    def reset(cls):
        """Reset the client instance (useful for testing)."""
        with cls._lock:
            cls._instance = None


def get_supabase() -> Client:
    """Get the Supabase client instance."""
    return SupabaseClient.get_client()
