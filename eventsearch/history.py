# eventsearch/history.py
"""
Personal search history as a ranking signal.

bonus = frequency + recency (independent, additive, max 45)

  frequency   search_count > 5       +30
              2 < search_count <= 5  +20
              1 <= search_count <= 2 +10

  recency     <= 7 days   +15
              <= 30 days  +5
              (whole days since last_searched_at)
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .models import HistoryRecord, Suggestion
from .normalize import normalize_for_search

_SECONDS_PER_DAY = 60 * 60 * 24

TOP_SEARCH_BASE_SCORE = 200
RECENT_SEARCH_SCORE = 150


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def days_since(dt: datetime, *, now: Optional[datetime] = None) -> int:
    delta = _as_utc(now or _utc_now()) - _as_utc(dt)
    return int(delta.total_seconds() // _SECONDS_PER_DAY)


def find_history_record(
    records: Sequence[HistoryRecord], term: str
) -> Optional[HistoryRecord]:
    """First record whose normalized term equals the normalized *term*."""
    key = normalize_for_search(term)
    for rec in records:
        if normalize_for_search(rec.search_term) == key:
            return rec
    return None


def frequency_bonus(search_count: int) -> int:
    if search_count > 5:
        return 30
    if search_count > 2:
        return 20
    if search_count >= 1:
        return 10
    return 0


def recency_bonus(days: int) -> int:
    if days <= 7:
        return 15
    if days <= 30:
        return 5
    return 0


def history_bonus(
    records: Sequence[HistoryRecord],
    term: str,
    *,
    now: Optional[datetime] = None,
) -> int:
    match = find_history_record(records, term)
    if match is None:
        return 0
    return (
        frequency_bonus(match.search_count)
        + recency_bonus(days_since(match.last_searched_at, now=now))
    )


# ---------------------------------------------------------------------------
# Empty search box
# ---------------------------------------------------------------------------

def empty_state_suggestions(
    records: Sequence[HistoryRecord], limit: int = 3
) -> List[Suggestion]:
    """
    What to show when the search box is focused but still empty:
    the most frequent searches first, then the most recent ones that are
    not already listed. Never mutates *records*.
    """
    top = sorted(records, key=lambda r: r.search_count, reverse=True)[:limit]
    recent = sorted(
        records, key=lambda r: _as_utc(r.last_searched_at), reverse=True
    )[:limit]

    top_ids = {id(r) for r in top}
    out = [
        Suggestion(
            text=r.search_term,
            type="history",
            score=TOP_SEARCH_BASE_SCORE + r.search_count,
            search_count=r.search_count,
        )
        for r in top
    ]
    out.extend(
        Suggestion(text=r.search_term, type="history", score=RECENT_SEARCH_SCORE)
        for r in recent
        if id(r) not in top_ids
    )
    return out
