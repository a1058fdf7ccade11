# eventsearch/suggestions.py
"""
Search-box suggestion aggregation.

One call evaluates one query from scratch against read-only snapshots:

  history  (len >= 1)  raw substring over past terms, first 3,
                       score 150 + 5 * search_count
  category (len >= 2)  category_score + history bonus
  season   (len >= 2)  season_score + history bonus
  city     (len >= 2)  city_score over the curated directory + history bonus
  event    (len >= 3)  event_score >= 50 only, first 10, + history bonus
  place    (len >= 3)  network geocoder hits (only if any), non-top place
                       score + history bonus - 10, first 5

Then: dedupe by normalized text (max score, first seen wins ties), sort
(score desc, type priority, text) and cut to 12.

Never raises. A failing source is logged and contributes nothing.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .history import history_bonus
from .intent import detect_intent
from .models import (
    HistoryRecord,
    LocalEvent,
    PlaceResult,
    Suggestion,
    SuggestionType,
    coerce_records,
)
from .normalize import normalize_for_search
from .reference_data import DEFAULT_REFERENCE, ReferenceData
from .scoring import (
    EVENT_MIN_SCORE,
    EXTERNAL_PLACE_PENALTY,
    category_score,
    city_score,
    event_score,
    place_score,
    season_score,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------

MIN_LENGTH_STATIC = 2  # categories, seasons, cities
MIN_LENGTH_FULL = 3  # events, network places

HISTORY_LIMIT = 3
EVENT_LIMIT = 10
EXTERNAL_PLACE_LIMIT = 5
MAX_SUGGESTIONS = 12

HISTORY_BASE_SCORE = 150
HISTORY_COUNT_WEIGHT = 5

TYPE_PRIORITY: Dict[str, int] = {
    "history": 0,
    "category": 1,
    "season": 1,
    "event": 2,
    "place": 3,
}


# ---------------------------------------------------------------------------
# Dedupe + ordering
# ---------------------------------------------------------------------------

def dedupe_suggestions(suggestions: Iterable[Suggestion]) -> List[Suggestion]:
    """
    Keep one suggestion per normalized text: the highest score.

    Ties keep the first one seen. Output order is first-seen order of keys.
    """
    best: Dict[str, Suggestion] = {}
    for s in suggestions:
        key = normalize_for_search(s.text)
        current = best.get(key)
        if current is None or s.score > current.score:
            best[key] = s
    return list(best.values())


def _sort_key(s: Suggestion) -> tuple:
    return (
        -s.score,
        TYPE_PRIORITY.get(s.type, len(TYPE_PRIORITY)),
        normalize_for_search(s.text),
        s.text,
    )


def sort_suggestions(suggestions: Iterable[Suggestion]) -> List[Suggestion]:
    """Score desc, then history < category = season < event < place, then text."""
    return sorted(suggestions, key=_sort_key)


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

def _scored(
    text: str,
    type_: SuggestionType,
    raw_score: float,
    history: Sequence[HistoryRecord],
    now: Optional[datetime],
    *,
    penalty: float = 0,
) -> Optional[Suggestion]:
    if raw_score <= 0:
        return None
    score = raw_score + history_bonus(history, text, now=now) - penalty
    if score <= 0:
        return None
    return Suggestion(text=text, type=type_, score=score)


def _names(values: Iterable[Any]) -> List[str]:
    return [v for v in values if isinstance(v, str) and v.strip()]


def history_candidates(query: str, history: Sequence[HistoryRecord]) -> List[Suggestion]:
    q = query.lower()
    hits = [r for r in history if q in r.search_term.lower()][:HISTORY_LIMIT]
    return [
        Suggestion(
            text=r.search_term,
            type="history",
            score=HISTORY_BASE_SCORE + HISTORY_COUNT_WEIGHT * r.search_count,
            search_count=r.search_count,
        )
        for r in hits
    ]


def category_candidates(
    query: str,
    categories: Iterable[Any],
    history: Sequence[HistoryRecord],
    now: Optional[datetime] = None,
) -> List[Suggestion]:
    out: List[Suggestion] = []
    for name in _names(categories):
        s = _scored(name, "category", category_score(name, query), history, now)
        if s is not None:
            out.append(s)
    return out


def season_candidates(
    query: str,
    seasons: Iterable[Any],
    history: Sequence[HistoryRecord],
    now: Optional[datetime] = None,
) -> List[Suggestion]:
    out: List[Suggestion] = []
    for name in _names(seasons):
        s = _scored(name, "season", season_score(name, query), history, now)
        if s is not None:
            out.append(s)
    return out


def city_candidates(
    query: str,
    reference: ReferenceData,
    history: Sequence[HistoryRecord],
    now: Optional[datetime] = None,
) -> List[Suggestion]:
    out: List[Suggestion] = []
    for city in reference.cities:
        s = _scored(city.name, "place", city_score(city, query), history, now)
        if s is not None:
            out.append(s)
    return out


def event_candidates(
    query: str,
    events: Sequence[LocalEvent],
    history: Sequence[HistoryRecord],
    now: Optional[datetime] = None,
) -> List[Suggestion]:
    out: List[Suggestion] = []
    for ev in events:
        raw = event_score(ev.title, query, ev.attendee_count)
        if raw < EVENT_MIN_SCORE:
            continue
        s = _scored(ev.title, "event", raw, history, now)
        if s is not None:
            out.append(s)
        if len(out) >= EVENT_LIMIT:
            break
    return out


def external_place_candidates(
    query: str,
    places: Sequence[PlaceResult],
    history: Sequence[HistoryRecord],
    now: Optional[datetime] = None,
) -> List[Suggestion]:
    out: List[Suggestion] = []
    for p in places:
        s = _scored(
            p.display_name,
            "place",
            place_score(p.display_name, query, False),
            history,
            now,
            penalty=EXTERNAL_PLACE_PENALTY,
        )
        if s is not None:
            out.append(s)
        if len(out) >= EXTERNAL_PLACE_LIMIT:
            break
    return out


def _guarded(source: str, fn: Callable[[], List[Suggestion]]) -> List[Suggestion]:
    try:
        return fn()
    except Exception as e:
        logger.warning(
            "[suggest] source=%s degraded to empty: %s: %s",
            source, type(e).__name__, e,
            exc_info=True,
        )
        return []


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate_suggestions(
    query: Optional[str],
    events: Iterable[Any] = (),
    history: Iterable[Any] = (),
    place_results: Iterable[Any] = (),
    *,
    reference: Optional[ReferenceData] = None,
    now: Optional[datetime] = None,
) -> List[Suggestion]:
    """
    Ranked, deduplicated suggestions for *query* (at most 12).

    *events*, *history* and *place_results* accept model instances or plain
    mappings; malformed entries are skipped. Inputs are never mutated.
    """
    if not isinstance(query, str) or not query.strip():
        return []

    ref = reference or DEFAULT_REFERENCE
    length = len(query)

    history_rows = coerce_records(HistoryRecord, history)

    collected: List[Suggestion] = []
    counts: Dict[str, int] = {}

    def add(source: str, fn: Callable[[], List[Suggestion]]) -> None:
        found = _guarded(source, fn)
        counts[source] = len(found)
        collected.extend(found)

    add("history", lambda: history_candidates(query, history_rows))

    if length >= MIN_LENGTH_STATIC:
        add("category", lambda: category_candidates(query, ref.categories, history_rows, now))
        add("season", lambda: season_candidates(query, ref.seasons, history_rows, now))
        add("city", lambda: city_candidates(query, ref, history_rows, now))

    if length >= MIN_LENGTH_FULL:
        add(
            "event",
            lambda: event_candidates(query, coerce_records(LocalEvent, events), history_rows, now),
        )
        places = coerce_records(PlaceResult, place_results)
        if places:
            add("place", lambda: external_place_candidates(query, places, history_rows, now))

    try:
        intent = detect_intent(
            query, ref.top_city_names(), categories=ref.categories, seasons=ref.seasons
        )
    except Exception as e:
        intent = "mixed"
        logger.warning("[suggest] intent detection failed: %s: %s", type(e).__name__, e)

    ranked = sort_suggestions(dedupe_suggestions(collected))[:MAX_SUGGESTIONS]

    logger.debug(
        "[suggest][summary] query=%r len=%d intent=%s sources=%s candidates=%d returned=%d",
        query, length, intent, counts, len(collected), len(ranked),
    )
    return ranked
