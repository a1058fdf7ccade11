# eventsearch/scoring.py
"""
Per-source suggestion scores.

Pure utility, no I/O. Every scorer returns 0 for a non-match and a positive
score otherwise:

                 exact   boundary               substring
  category        100       90                     -
  season           95       85                     -
  event            90    70 + popularity           30
  place (top)     100       95                     40
  place (other)    90       80                     40

popularity = min(attendees / 10, 20)

Categories and seasons have no substring tier: the names are short and a
substring hit is mostly noise. The history bonus (eventsearch.history) is
added on top by the aggregator; the two never multiply.
"""
from __future__ import annotations

from .matching import contains_match, is_exact_match, is_word_boundary_match
from .reference_data import City


# Event candidates below this total are dropped by the aggregator.
EVENT_MIN_SCORE = 50

# Free-text geocoder hits rank below an equivalent curated-city hit.
EXTERNAL_PLACE_PENALTY = 10

POPULARITY_BONUS_CAP = 20


def category_score(category: str, query: str) -> int:
    if is_exact_match(category, query):
        return 100
    if is_word_boundary_match(category, query):
        return 90
    return 0


def season_score(season: str, query: str) -> int:
    if is_exact_match(season, query):
        return 95
    if is_word_boundary_match(season, query):
        return 85
    return 0


def popularity_bonus(attendees: int) -> float:
    return min(max(attendees, 0) / 10, POPULARITY_BONUS_CAP)


def event_score(title: str, query: str, attendees: int = 0) -> float:
    if is_exact_match(title, query):
        return 90
    if is_word_boundary_match(title, query):
        return 70 + popularity_bonus(attendees)
    if contains_match(title, query):
        return 30
    return 0


def place_score(name: str, query: str, is_top_city: bool = False) -> int:
    if is_exact_match(name, query):
        return 100 if is_top_city else 90
    if is_word_boundary_match(name, query):
        return 95 if is_top_city else 80
    if contains_match(name, query):
        return 40
    return 0


def city_score(city: City, query: str) -> int:
    """Best place score over the city's name and its aliases."""
    return max(
        place_score(label, query, city.is_top_tier)
        for label in (city.name, *city.aliases)
    )
