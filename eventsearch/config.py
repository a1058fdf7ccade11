import os
from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# Supabase is only needed for the search-history store; the ranking engine
# runs without it, so missing values are reported by get_supabase_client().
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

NOMINATIM_BASE_URL = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org")
NOMINATIM_USER_AGENT = os.getenv("NOMINATIM_USER_AGENT", "JetzzApp/1.0")
NOMINATIM_COUNTRY_CODES = os.getenv("NOMINATIM_COUNTRY_CODES", "de")

# Nominatim usage policy: at most one request per second, process-wide.
PLACE_LOOKUP_MIN_INTERVAL_MS = _int_env("PLACE_LOOKUP_MIN_INTERVAL_MS", 1000)
PLACE_LOOKUP_LIMIT = _int_env("PLACE_LOOKUP_LIMIT", 5)
PLACE_LOOKUP_TIMEOUT_S = _int_env("PLACE_LOOKUP_TIMEOUT_S", 10)

SUGGEST_DEBOUNCE_MS = _int_env("SUGGEST_DEBOUNCE_MS", 300)
