from __future__ import annotations

from typing import Iterable

from .models import GroupedSuggestions, Suggestion

# Display caps per bucket. Category and season share "categories".
GROUP_CAPS = {
    "history": 3,
    "categories": 4,
    "events": 4,
    "places": 3,
}

_BUCKET_BY_TYPE = {
    "history": "history",
    "category": "categories",
    "season": "categories",
    "event": "events",
    "place": "places",
}


def group_suggestions(suggestions: Iterable[Suggestion]) -> GroupedSuggestions:
    """
    Partition an already ranked list into capped display buckets.

    Single pass; input order is kept inside each bucket and nothing is re-ranked.
    """
    grouped = GroupedSuggestions()
    for s in suggestions:
        bucket_name = _BUCKET_BY_TYPE.get(s.type)
        if bucket_name is None:
            continue
        bucket = getattr(grouped, bucket_name)
        if len(bucket) < GROUP_CAPS[bucket_name]:
            bucket.append(s)
    return grouped
