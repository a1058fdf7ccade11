from __future__ import annotations

from typing import Iterable, Literal, Optional

from .normalize import normalize_for_search
from .reference_data import EVENT_CATEGORIES, SEASON_SPECIALS

Intent = Literal["event", "place", "mixed"]


def _any_prefix(query: str, names: Iterable[str]) -> bool:
    return any(normalize_for_search(n).startswith(query) for n in names)


def detect_intent(
    query: str,
    top_city_names: Iterable[str],
    *,
    categories: Optional[Iterable[str]] = None,
    seasons: Optional[Iterable[str]] = None,
) -> Intent:
    """
    Classify a query as leaning towards a place, an event family, or both.

    The normalized query is tested as a prefix of the top cities and,
    independently, of the category and season names. No signal at all is
    "mixed" as well, so nothing downstream gets suppressed.

    Diagnostic only: the aggregator logs it but does not gate sources on it.
    """
    q = normalize_for_search(query)

    if categories is None:
        categories = EVENT_CATEGORIES
    if seasons is None:
        seasons = SEASON_SPECIALS

    place_hit = _any_prefix(q, top_city_names)
    event_hit = _any_prefix(q, categories) or _any_prefix(q, seasons)

    if place_hit and not event_hit:
        return "place"
    if event_hit and not place_hit:
        return "event"
    return "mixed"
