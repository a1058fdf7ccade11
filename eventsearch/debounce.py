# eventsearch/debounce.py
"""
Keystroke-facing entry point for search suggestions.

States: idle <-> pending.

  set_query(q)   cancel the pending timer (if any) without firing it;
                 empty q -> publish an empty state right away, stay idle;
                 otherwise arm a new timer -> pending
  timer fires    -> idle; run the aggregator synchronously and publish;
                 if len(q.strip()) >= 2 start the place lookup, tagged with q
  lookup done    tag != current query -> discard (stale response);
                 else keep the places and, when they can contribute
                 (len >= 3, non-empty), re-run the aggregator with them

A new keystroke can only cancel the timer. An in-flight lookup is never
aborted; the tag check is what keeps it from overwriting newer results.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Set

from .config import SUGGEST_DEBOUNCE_MS
from .geocoding import MIN_PLACE_QUERY_LENGTH
from .grouping import group_suggestions
from .models import GroupedSuggestions, PlaceResult, Suggestion
from .reference_data import ReferenceData
from .suggestions import MIN_LENGTH_FULL, generate_suggestions

logger = logging.getLogger(__name__)

PlaceLookup = Callable[[str], Awaitable[List[PlaceResult]]]


@dataclass
class SuggestionState:
    query: str = ""
    suggestions: List[Suggestion] = field(default_factory=list)
    grouped: GroupedSuggestions = field(default_factory=GroupedSuggestions)
    places: List[PlaceResult] = field(default_factory=list)


class DebounceCoordinator:
    def __init__(
        self,
        place_lookup: PlaceLookup,
        *,
        on_update: Optional[Callable[[SuggestionState], None]] = None,
        delay_s: Optional[float] = None,
        reference: Optional[ReferenceData] = None,
        aggregate: Callable[..., List[Suggestion]] = generate_suggestions,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._place_lookup = place_lookup
        self._on_update = on_update
        self.delay_s = SUGGEST_DEBOUNCE_MS / 1000 if delay_s is None else delay_s
        self._reference = reference
        self._aggregate = aggregate
        self._now = now

        self._events: tuple = ()
        self._history: tuple = ()

        self._query = ""
        self._timer: Optional[asyncio.TimerHandle] = None
        self._lookups: Set[asyncio.Task] = set()
        # Places are only reused for the query they were fetched for.
        self._places_query: Optional[str] = None

        self.state = SuggestionState()

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    @property
    def query(self) -> str:
        return self._query

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def update_snapshots(
        self,
        *,
        events: Optional[Iterable[Any]] = None,
        history: Optional[Iterable[Any]] = None,
    ) -> None:
        """Replace the event/history snapshots used by the next evaluation."""
        if events is not None:
            self._events = tuple(events)
        if history is not None:
            self._history = tuple(history)

    def set_query(self, query: Optional[str]) -> None:
        self._cancel_timer()
        self._query = query or ""

        if not self._query:
            self._places_query = None
            self._publish(SuggestionState())
            return

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay_s, self._fire, self._query)

    def clear(self) -> None:
        self.set_query("")

    async def aclose(self) -> None:
        self._cancel_timer()
        tasks = list(self._lookups)
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._lookups.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _places_for(self, query: str) -> List[PlaceResult]:
        if self._places_query == query:
            return list(self.state.places)
        return []

    def _evaluate(self, query: str, places: List[PlaceResult]) -> None:
        try:
            suggestions = self._aggregate(
                query,
                self._events,
                self._history,
                places,
                reference=self._reference,
                now=self._now() if self._now else None,
            )
        except Exception as e:
            logger.warning("[debounce] aggregation failed: %s: %s", type(e).__name__, e)
            suggestions = []

        self._publish(
            SuggestionState(
                query=query,
                suggestions=suggestions,
                grouped=group_suggestions(suggestions),
                places=places,
            )
        )

    def _fire(self, query: str) -> None:
        self._timer = None
        logger.debug("[debounce] fire query=%r", query)

        self._evaluate(query, self._places_for(query))

        if len(query.strip()) < MIN_PLACE_QUERY_LENGTH:
            return

        task = asyncio.get_running_loop().create_task(self._lookup_places(query))
        self._lookups.add(task)
        task.add_done_callback(self._lookups.discard)

    async def _lookup_places(self, tag: str) -> None:
        try:
            places = list(await self._place_lookup(tag))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("[debounce] place lookup failed query=%r: %s: %s", tag, type(e).__name__, e)
            places = []

        if tag != self._query:
            logger.debug("[debounce] discarding stale places tag=%r current=%r", tag, self._query)
            return

        self._places_query = tag
        if places and len(tag) >= MIN_LENGTH_FULL:
            self._evaluate(tag, places)
        else:
            self.state.places = places
            self._publish(self.state)

    def _publish(self, state: SuggestionState) -> None:
        self.state = state
        if self._on_update is None:
            return
        try:
            self._on_update(state)
        except Exception as e:
            logger.warning("[debounce] on_update callback failed: %s: %s", type(e).__name__, e)
