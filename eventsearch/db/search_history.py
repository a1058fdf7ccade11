# eventsearch/db/search_history.py
"""
Per-user search history in public.search_history.

One row per (user_id, search_term); search_term is stored trimmed and
lowercased. Selecting a suggestion increments the row (or creates it with
search_count = 1). Rows are only removed by an explicit delete/clear.

The ranking engine never writes here: it only reads snapshots returned by
get_user_search_history().

All functions swallow PostgREST / transport errors after logging them and
return an empty result, so a history outage only costs the history bonus.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, List

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from eventsearch.models import HistoryRecord, SearchType, Suggestion, coerce_records

logger = logging.getLogger(__name__)

TABLE = "search_history"

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)

_DB_ERRORS = (APIError, httpx.HTTPError)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_user_id(user_id: str | None) -> bool:
    return bool(user_id) and _UUID_RE.match(user_id) is not None


def normalize_term(term: str) -> str:
    return (term or "").strip().lower()


def save_search_to_history(
    supabase: Client,
    user_id: str,
    search_term: str,
    search_type: SearchType,
) -> bool:
    """
    Increment-or-insert for (user_id, normalized term).

    Returns True when a row was written.
    """
    term = normalize_term(search_term)
    if not term or not is_valid_user_id(user_id):
        return False

    try:
        existing = (
            supabase.table(TABLE)
            .select("id, search_count")
            .eq("user_id", user_id)
            .eq("search_term", term)
            .maybe_single()
            .execute()
        )
        row = existing.data if existing is not None else None

        if row:
            supabase.table(TABLE).update({
                "search_count": int(row.get("search_count") or 0) + 1,
                "last_searched_at": _utc_now().isoformat(),
            }).eq("id", row["id"]).execute()
        else:
            supabase.table(TABLE).insert({
                "user_id": user_id,
                "search_term": term,
                "search_type": search_type,
                "search_count": 1,
            }).execute()
    except _DB_ERRORS as e:
        logger.warning("[history] save failed term=%r: %s: %s", term, type(e).__name__, e)
        return False

    return True


def record_selection(supabase: Client, user_id: str, suggestion: Suggestion) -> bool:
    """Write the history entry for a suggestion the user picked."""
    search_type: SearchType = "event" if suggestion.type == "history" else suggestion.type
    return save_search_to_history(supabase, user_id, suggestion.text, search_type)


def _fetch(supabase: Client, user_id: str, *, order_by: str, limit: int) -> List[HistoryRecord]:
    if not is_valid_user_id(user_id):
        return []
    try:
        res = (
            supabase.table(TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order(order_by, desc=True)
            .limit(limit)
            .execute()
        )
    except _DB_ERRORS as e:
        logger.warning("[history] fetch failed order_by=%s: %s: %s", order_by, type(e).__name__, e)
        return []

    rows: Any = res.data or []
    return coerce_records(HistoryRecord, rows)


def get_user_search_history(supabase: Client, user_id: str, limit: int = 20) -> List[HistoryRecord]:
    """Most recently searched first."""
    return _fetch(supabase, user_id, order_by="last_searched_at", limit=limit)


def get_top_searches(supabase: Client, user_id: str, limit: int = 10) -> List[HistoryRecord]:
    return _fetch(supabase, user_id, order_by="search_count", limit=limit)


def get_recent_searches(supabase: Client, user_id: str, limit: int = 5) -> List[HistoryRecord]:
    return _fetch(supabase, user_id, order_by="last_searched_at", limit=limit)


def clear_search_history(supabase: Client, user_id: str) -> bool:
    if not is_valid_user_id(user_id):
        return False
    try:
        supabase.table(TABLE).delete().eq("user_id", user_id).execute()
    except _DB_ERRORS as e:
        logger.warning("[history] clear failed: %s: %s", type(e).__name__, e)
        return False
    return True


def delete_search_item(supabase: Client, user_id: str, search_id: str) -> bool:
    if not search_id or not is_valid_user_id(user_id):
        return False
    try:
        (
            supabase.table(TABLE)
            .delete()
            .eq("id", search_id)
            .eq("user_id", user_id)
            .execute()
        )
    except _DB_ERRORS as e:
        logger.warning("[history] delete failed id=%s: %s: %s", search_id, type(e).__name__, e)
        return False
    return True
