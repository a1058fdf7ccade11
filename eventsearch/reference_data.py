# eventsearch/reference_data.py
"""
Static reference lists used as suggestion sources.

  - EVENT_CATEGORIES  category names shown in the category filter
  - SEASON_SPECIALS   seasonal tags (holidays, seasonal event families)
  - GERMAN_CITIES     curated city directory; priority_tier 1 = largest cities

Aliases on a city are alternative spellings (mostly exonyms) that should
match while typing; the canonical `name` is what gets displayed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .normalize import normalize_for_search


@dataclass(frozen=True)
class City:
    name: str
    latitude: float
    longitude: float
    radius_km: int
    priority_tier: int
    aliases: Tuple[str, ...] = ()

    @property
    def is_top_tier(self) -> bool:
        return self.priority_tier <= TOP_TIER_MAX


# Cities at or above this tier get the higher place scores.
TOP_TIER_MAX = 2

# Number of cities treated as "top cities" for intent detection.
TOP_CITY_COUNT = 20


EVENT_CATEGORIES: Tuple[str, ...] = (
    "Konzert",
    "Festival",
    "Party & Clubbing",
    "Rock",
    "Pop",
    "Techno",
    "Hip-Hop",
    "Jazz",
    "Klassik",
    "Comedy",
    "Theater",
    "Musical",
    "Kino",
    "Lesung",
    "Ausstellung",
    "Kunst & Kultur",
    "Sport",
    "Essen & Trinken",
    "Markt",
    "Flohmarkt",
    "Kinder & Familie",
    "Workshop",
    "Tanz",
    "Networking",
)

SEASON_SPECIALS: Tuple[str, ...] = (
    "Neujahr",
    "Silvester",
    "Winterevents",
    "Valentinstag",
    "Karneval/Fasching",
    "Ostern",
    "Frühlingsevents",
    "Maifeiertag",
    "Muttertag",
    "Vatertag",
    "Pfingsten",
    "Sommerevents",
    "Oktoberfest",
    "Herbstevents",
    "Halloween",
    "Martinstag",
    "Advent",
    "Nikolaus",
    "Weihnachten",
    "Weihnachtsmarkt",
)

GERMAN_CITIES: Tuple[City, ...] = (
    City("Berlin", 52.5200, 13.4050, 50, 1),
    City("Hamburg", 53.5511, 9.9937, 40, 1),
    City("München", 48.1351, 11.5820, 40, 1, aliases=("Munich",)),
    City("Köln", 50.9375, 6.9603, 35, 1, aliases=("Cologne",)),
    City("Frankfurt am Main", 50.1109, 8.6821, 35, 1),
    City("Stuttgart", 48.7758, 9.1829, 30, 2),
    City("Düsseldorf", 51.2277, 6.7735, 30, 2),
    City("Dortmund", 51.5136, 7.4653, 30, 2),
    City("Essen", 51.4556, 7.0116, 30, 2),
    City("Leipzig", 51.3397, 12.3731, 30, 2),
    City("Bremen", 53.0793, 8.8017, 25, 2),
    City("Dresden", 51.0504, 13.7373, 25, 2),
    City("Hannover", 52.3759, 9.7320, 25, 2, aliases=("Hanover",)),
    City("Nürnberg", 49.4521, 11.0767, 25, 2, aliases=("Nuremberg",)),
    City("Duisburg", 51.4344, 6.7623, 20, 3),
    City("Bochum", 51.4818, 7.2162, 20, 3),
    City("Wuppertal", 51.2562, 7.1508, 20, 3),
    City("Bielefeld", 52.0302, 8.5325, 20, 3),
    City("Bonn", 50.7374, 7.0982, 20, 3),
    City("Münster", 51.9607, 7.6261, 20, 3),
    City("Karlsruhe", 49.0069, 8.4037, 20, 3),
    City("Mannheim", 49.4875, 8.4660, 20, 3),
    City("Augsburg", 48.3705, 10.8978, 20, 3),
    City("Wiesbaden", 50.0826, 8.2400, 20, 3),
    City("Gelsenkirchen", 51.5177, 7.0857, 15, 4),
    City("Mönchengladbach", 51.1805, 6.4428, 15, 4),
    City("Braunschweig", 52.2689, 10.5268, 15, 4, aliases=("Brunswick",)),
    City("Chemnitz", 50.8278, 12.9214, 15, 4),
    City("Kiel", 54.3233, 10.1228, 15, 4),
    City("Aachen", 50.7753, 6.0839, 15, 4),
    City("Halle (Saale)", 51.4969, 11.9688, 15, 4),
    City("Magdeburg", 52.1205, 11.6276, 15, 4),
    City("Freiburg im Breisgau", 47.9990, 7.8421, 15, 4),
    City("Krefeld", 51.3388, 6.5853, 15, 4),
    City("Lübeck", 53.8655, 10.6866, 15, 4),
    City("Oberhausen", 51.4963, 6.8516, 15, 4),
    City("Erfurt", 50.9848, 11.0299, 15, 4),
    City("Mainz", 49.9929, 8.2473, 15, 4),
    City("Rostock", 54.0887, 12.1403, 15, 4),
    City("Kassel", 51.3127, 9.4797, 15, 4),
)


# Month (1-12) -> seasonal tags worth surfacing in that month.
SEASONAL_BY_MONTH: Dict[int, Tuple[str, ...]] = {
    1: ("Neujahr", "Silvester", "Winterevents"),
    2: ("Valentinstag", "Karneval/Fasching"),
    3: ("Ostern", "Frühlingsevents"),
    4: ("Ostern", "Frühlingsevents"),
    5: ("Maifeiertag", "Muttertag", "Vatertag"),
    6: ("Pfingsten", "Sommerevents"),
    7: ("Sommerevents", "Festival"),
    8: ("Sommerevents", "Festival"),
    9: ("Oktoberfest", "Herbstevents"),
    10: ("Oktoberfest", "Halloween", "Herbstevents"),
    11: ("Halloween", "Martinstag", "Advent"),
    12: ("Advent", "Nikolaus", "Weihnachten", "Silvester"),
}

POPULAR_CATEGORIES: Tuple[str, ...] = (
    "Rock",
    "Pop",
    "Comedy",
    "Festival",
    "Techno",
    "Theater",
    "Party & Clubbing",
    "Essen & Trinken",
)


@dataclass(frozen=True)
class ReferenceData:
    """The static sources one suggestion run scores against."""
    categories: Tuple[str, ...] = EVENT_CATEGORIES
    seasons: Tuple[str, ...] = SEASON_SPECIALS
    cities: Tuple[City, ...] = GERMAN_CITIES
    top_city_count: int = TOP_CITY_COUNT

    def top_city_names(self) -> List[str]:
        return [c.name for c in self.cities[: self.top_city_count]]


DEFAULT_REFERENCE = ReferenceData()


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def get_top_cities(count: int) -> List[City]:
    """First *count* cities of the directory (ordered by size)."""
    return list(GERMAN_CITIES[:count])


def get_cities_by_priority(tier: Optional[int] = None) -> List[City]:
    if tier is None:
        return list(GERMAN_CITIES)
    return [c for c in GERMAN_CITIES if c.priority_tier == tier]


def find_city(name: str, cities: Tuple[City, ...] = GERMAN_CITIES) -> Optional[City]:
    """Look a city up by name or alias, ignoring case and diacritics."""
    key = normalize_for_search((name or "").strip())
    if not key:
        return None
    for city in cities:
        if normalize_for_search(city.name) == key:
            return city
        if any(normalize_for_search(a) == key for a in city.aliases):
            return city
    return None


def get_city_coordinates(name: str) -> Optional[Tuple[float, float]]:
    """(latitude, longitude) of a known city, else None."""
    city = find_city(name)
    if city is None:
        return None
    return city.latitude, city.longitude


def seasonal_suggestions(month: int) -> List[str]:
    """Seasonal tags for a calendar month (1-12); unknown months give []."""
    return list(SEASONAL_BY_MONTH.get(month, ()))


def popular_categories() -> List[str]:
    return list(POPULAR_CATEGORIES)
