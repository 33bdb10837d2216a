"""Supabase client singleton.

Provides ``get_supabase()`` which returns a lazily-initialized, process-wide
Supabase client, ``create_session_client()`` for admin sign-in, and
``get_bucket()`` for the profile image storage bucket.
"""

from typing import Any

from supabase import Client, create_client

from app.core.config import settings

_client: Client | None = None


def get_supabase() -> Client:
    """Return the singleton Supabase client, creating it on first call."""
    global _client
    if _client is None:
        _client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    return _client


def create_session_client() -> Client:
    """Return a new, unshared client for a single admin sign-in.

    Signing in stores the session on the client, so it must not be the
    process-wide singleton.
    """
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


def get_bucket() -> Any:
    """Return the storage bucket API for candidate profile images."""
    return get_supabase().storage.from_(settings.SUPABASE_STORAGE_BUCKET)
