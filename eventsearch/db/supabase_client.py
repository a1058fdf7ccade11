from __future__ import annotations

from supabase import create_client, Client

from eventsearch import config


def get_supabase_client() -> Client:
    url = config.SUPABASE_URL
    key = config.SUPABASE_SERVICE_ROLE_KEY
    if not url or not key:
        raise RuntimeError(
            "Missing SUPABASE env vars. Need SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY. "
            "Copy .env.example to .env and fill in your Supabase credentials."
        )
    return create_client(url, key)
