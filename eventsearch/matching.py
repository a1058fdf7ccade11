# eventsearch/matching.py
"""
Match predicates over normalized text.

Ordered by strictness. Callers test them in this order, each later predicate
accepting a superset of what the earlier ones accept:
  exact ⊂ word-boundary ⊂ contains
"""
from __future__ import annotations

import re

from .normalize import escape_for_pattern, normalize_for_search


def is_exact_match(candidate: str, query: str) -> bool:
    return normalize_for_search(candidate) == normalize_for_search(query)


def is_word_boundary_match(candidate: str, query: str) -> bool:
    """True if the query starts at a word boundary inside the candidate.

    "konz" matches "Open-Air Konzert" but not "Rekonzeption".
    """
    if not candidate or not query:
        return False

    norm_candidate = normalize_for_search(candidate)
    norm_query = normalize_for_search(query)
    if not norm_query:
        return False

    pattern = re.compile(r"\b" + escape_for_pattern(norm_query))
    return pattern.search(norm_candidate) is not None


def contains_match(candidate: str, query: str) -> bool:
    return normalize_for_search(query) in normalize_for_search(candidate)
