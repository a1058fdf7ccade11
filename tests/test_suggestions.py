# tests/test_suggestions.py
"""
Suggestion aggregation (eventsearch/suggestions.py).

  Part 1: length gating per source
  Part 2: end-to-end scenarios
  Part 3: history bonus wiring
  Part 4: dedupe (max score, first seen on ties)
  Part 5: ordering + truncation invariants
  Part 6: degraded sources never raise
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

import eventsearch.suggestions as suggestions_mod
from eventsearch.models import Suggestion
from eventsearch.normalize import normalize_for_search
from eventsearch.reference_data import City, ReferenceData
from eventsearch.suggestions import (
    MAX_SUGGESTIONS,
    dedupe_suggestions,
    generate_suggestions,
    sort_suggestions,
)

NOW = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)


def _history(term: str, count: int = 1, days_ago: int = 0) -> dict:
    return {
        "id": f"h-{term}",
        "search_term": term,
        "search_type": "event",
        "search_count": count,
        "last_searched_at": (NOW - timedelta(days=days_ago)).isoformat(),
    }


def _event(title: str, attendees: int = 0, idx: int = 1) -> dict:
    return {"id": f"ev-{idx}", "title": title, "location": "Berlin", "attendees": attendees}


EVENTS = [
    _event("Jazz im Park", 150, 1),
    _event("Latejazz Session", 0, 2),
    _event("Festival der Lichter", 40, 3),
    _event("Festival", 900, 4),
    _event("Bar Abend", 10, 5),
]


# ---------------------------------------------------------------------------
# Part 1: length gating
# ---------------------------------------------------------------------------

class TestLengthGating:
    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_empty_query_yields_nothing(self, query):
        assert generate_suggestions(query, EVENTS, [_history("berlin")], [{"display_name": "Berlin"}]) == []

    def test_single_character_only_history(self):
        history = [_history("Berlin", 2), _history("bonn", 1), _history("jazz", 1)]
        out = generate_suggestions("b", EVENTS, history, [{"display_name": "Bamberg"}], now=NOW)

        assert {s.type for s in out} == {"history"}
        assert [s.text for s in out] == ["Berlin", "bonn"]

    def test_single_character_without_history_is_empty(self):
        assert generate_suggestions("b", EVENTS, [], [], now=NOW) == []

    def test_two_characters_no_events_no_network_places(self):
        out = generate_suggestions(
            "fe", EVENTS, [], [{"display_name": "Fehmarn"}], now=NOW,
        )
        types = {s.type for s in out}
        assert "event" not in types
        assert "Fehmarn" not in [s.text for s in out]
        assert ("Festival", "category") in [(s.text, s.type) for s in out]

    def test_history_scan_is_capped_at_three(self):
        history = [_history(f"rock {i}") for i in range(6)]
        out = generate_suggestions("rock", [], history, [], now=NOW)
        assert len([s for s in out if s.type == "history"]) == 3

    def test_events_capped_at_ten(self):
        events = [_event(f"Party Nacht {i}", 0, i) for i in range(15)]
        ref = ReferenceData(categories=(), seasons=(), cities=())
        out = generate_suggestions("party", events, [], [], reference=ref, now=NOW)
        assert len([s for s in out if s.type == "event"]) == 10

    def test_network_places_capped_at_five(self):
        places = [{"display_name": f"Berlin Bezirk {i}"} for i in range(8)]
        ref = ReferenceData(categories=(), seasons=(), cities=())
        out = generate_suggestions("berlin", [], [], places, reference=ref, now=NOW)
        assert len(out) == 5
        assert all(s.type == "place" for s in out)


# ---------------------------------------------------------------------------
# Part 2: end-to-end scenarios
# ---------------------------------------------------------------------------

class TestScenarios:
    def test_konz_single_category_boundary_match(self):
        out = generate_suggestions("Konz", [], [], [], now=NOW)
        assert out == [Suggestion(text="Konzert", type="category", score=90)]

    def test_muni_top_tier_city(self):
        ref = ReferenceData(
            categories=(),
            seasons=(),
            cities=(City("München", 48.1351, 11.5820, 40, 1, aliases=("Munich",)),),
        )
        out = generate_suggestions("muni", [], [], [], reference=ref, now=NOW)
        assert out == [Suggestion(text="München", type="place", score=95)]

    def test_muni_with_default_directory(self):
        out = generate_suggestions("muni", [], [], [], now=NOW)
        assert out[0].text == "München"
        assert out[0].score == 95

    def test_category_beats_events(self):
        out = generate_suggestions("jazz", EVENTS, [], [], now=NOW)
        assert [(s.text, s.type, s.score) for s in out] == [
            ("Jazz", "category", 100),
            ("Jazz im Park", "event", 85),
        ]

    def test_weak_event_substring_is_dropped(self):
        out = generate_suggestions("jazz", EVENTS, [], [], now=NOW)
        assert "Latejazz Session" not in [s.text for s in out]

    def test_network_place_penalty(self):
        out = generate_suggestions(
            "Berl", [], [], [{"display_name": "Berlin, Deutschland"}], now=NOW,
        )
        assert [(s.text, s.score) for s in out] == [
            ("Berlin", 95),
            ("Berlin, Deutschland", 70),
        ]

    def test_network_place_substring_hit_survives_penalty(self):
        out = generate_suggestions(
            "erlin", [], [], [{"display_name": "Oberlinhaus Potsdam"}],
            reference=ReferenceData(categories=(), seasons=(), cities=()),
            now=NOW,
        )
        assert [(s.text, s.score) for s in out] == [("Oberlinhaus Potsdam", 30)]


# ---------------------------------------------------------------------------
# Part 3: history
# ---------------------------------------------------------------------------

class TestHistory:
    def test_history_suggestion_score_and_count(self):
        out = generate_suggestions("tech", [], [_history("Techno Bunker", 4)], [], now=NOW)
        hist = [s for s in out if s.type == "history"]
        assert hist == [
            Suggestion(text="Techno Bunker", type="history", score=170, search_count=4)
        ]

    def test_history_entry_outranks_boosted_season(self):
        history = [_history("Oktoberfest", 6, days_ago=0)]
        out = generate_suggestions("okto", [], history, [], now=NOW)
        oktober = [s for s in out if s.text == "Oktoberfest"]
        assert len(oktober) == 1
        # "okto" is inside "oktoberfest", so the history entry (150 + 30)
        # outranks the boosted season (85 + 45) and wins the dedupe
        assert oktober[0].type == "history"
        assert oktober[0].score == 180

    def test_history_bonus_on_city(self):
        history = [_history("Leipzig", 3, days_ago=20)]
        ref = ReferenceData(categories=(), seasons=(), cities=(City("Leipzig", 51.3, 12.3, 30, 2),))
        out = generate_suggestions("eipz", [], history, [], reference=ref, now=NOW)
        # history term contains "eipz" -> history suggestion 165; city substring 40 + 25
        assert [(s.type, s.score) for s in out] == [("history", 165)]

    def test_bonus_without_history_hit(self):
        # term stored folded, query typed with umlaut: the raw substring scan
        # misses, the normalized bonus lookup still finds it
        history = [_history("koln", 2, days_ago=3)]
        out = generate_suggestions("Köl", [], history, [], now=NOW)
        assert [(s.text, s.type, s.score) for s in out] == [("Köln", "place", 95 + 25)]


# ---------------------------------------------------------------------------
# Part 4: dedupe
# ---------------------------------------------------------------------------

class TestDedupe:
    def test_keeps_max_score_regardless_of_order(self):
        low = Suggestion(text="festival", type="event", score=90)
        high = Suggestion(text="Festival", type="category", score=100)
        assert dedupe_suggestions([high, low]) == [high]
        assert dedupe_suggestions([low, high]) == [high]

    def test_ties_keep_first_seen(self):
        a = Suggestion(text="Köln", type="place", score=95)
        b = Suggestion(text="koln", type="history", score=95)
        assert dedupe_suggestions([a, b]) == [a]
        assert dedupe_suggestions([b, a]) == [b]

    def test_category_and_event_with_same_title(self):
        out = generate_suggestions("festival", EVENTS, [], [], now=NOW)
        festival = [s for s in out if normalize_for_search(s.text) == "festival"]
        assert festival == [Suggestion(text="Festival", type="category", score=100)]


# ---------------------------------------------------------------------------
# Part 5: ordering
# ---------------------------------------------------------------------------

class TestOrdering:
    def test_type_priority_breaks_score_ties(self):
        items = [
            Suggestion(text="A", type="place", score=90),
            Suggestion(text="B", type="event", score=90),
            Suggestion(text="C", type="season", score=90),
            Suggestion(text="D", type="category", score=90),
            Suggestion(text="E", type="history", score=90),
        ]
        assert [s.text for s in sort_suggestions(items)] == ["E", "C", "D", "B", "A"]

    def test_alphabetical_last(self):
        items = [
            Suggestion(text="Zumba", type="category", score=90),
            Suggestion(text="Ärger", type="category", score=90),
            Suggestion(text="Bass", type="category", score=90),
        ]
        assert [s.text for s in sort_suggestions(items)] == ["Ärger", "Bass", "Zumba"]

    def test_truncates_to_max(self):
        ref = ReferenceData(categories=tuple(f"Ab{i}" for i in range(20)), seasons=(), cities=())
        out = generate_suggestions("ab", [], [], [], reference=ref, now=NOW)
        assert len(out) == MAX_SUGGESTIONS

    @pytest.mark.parametrize("query", ["b", "ko", "konz", "be", "mün", "fest", "ess", "ost", "jazz", "party"])
    def test_sorted_and_distinct(self, query):
        history = [_history("Berlin", 7), _history("konzert", 2, days_ago=15), _history("Fest am See", 1)]
        places = [{"display_name": "Essen, Nordrhein-Westfalen"}, {"display_name": "Festplatz Mainz"}]
        out = generate_suggestions(query, EVENTS, history, places, now=NOW)

        scores = [s.score for s in out]
        assert scores == sorted(scores, reverse=True)

        keys = [normalize_for_search(s.text) for s in out]
        assert len(keys) == len(set(keys))
        assert len(out) <= MAX_SUGGESTIONS
        assert all(s.score >= 0 for s in out)

    def test_inputs_are_not_mutated(self):
        history = [_history("Berlin", 7)]
        events = list(EVENTS)
        snapshot = (list(history), [dict(e) for e in events])
        generate_suggestions("ber", events, history, [], now=NOW)
        assert (history, events) == snapshot


# ---------------------------------------------------------------------------
# Part 6: degraded sources
# ---------------------------------------------------------------------------

class TestDegradation:
    def test_failing_scorer_only_drops_its_source(self, monkeypatch):
        def boom(*_args, **_kw):
            raise RuntimeError("scorer exploded")

        monkeypatch.setattr(suggestions_mod, "category_score", boom)
        out = generate_suggestions("okto", [], [], [], now=NOW)
        assert [(s.text, s.type) for s in out] == [("Oktoberfest", "season")]

    def test_malformed_inputs_are_skipped(self):
        history = [{"search_term": None}, "junk", _history("jazz club", 1)]
        events = [{"title": "no id"}, None, _event("Jazz im Park", 150)]
        places = [{"lat": "1"}, 7]
        out = generate_suggestions("jazz", events, history, places, now=NOW)
        assert [s.text for s in out] == ["jazz club", "Jazz", "Jazz im Park"]

    @pytest.mark.parametrize("events, history, places", [
        (42, None, None),
        ("events", {"a": 1}, object()),
        (None, None, "Berlin"),
    ])
    def test_wrong_container_types_never_raise(self, events, history, places):
        out = generate_suggestions("konzert", events, history, places, now=NOW)
        assert [s.text for s in out] == ["Konzert"]

    def test_non_string_reference_names_are_ignored(self):
        ref = ReferenceData(categories=("Konzert", None, 3, ""), seasons=(), cities=())
        out = generate_suggestions("konz", [], [], [], reference=ref, now=NOW)
        assert [s.text for s in out] == ["Konzert"]
