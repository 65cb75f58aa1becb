import os

def _canon_prefix(val):
    """
    Normalize API prefix to always be exactly like '/api':
      - defaults to '/api' when unset/empty
      - ensures a single leading slash
      - removes any trailing slash (except for root)
    """
    val = (val or "/api").strip()
    if not val.startswith("/"):
        val = "/" + val
    if len(val) > 1 and val.endswith("/"):
        val = val[:-1]
    return val


def _positive_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


API_PREFIX = _canon_prefix(os.getenv("API_PREFIX"))

# slowapi limit string applied to every analytics endpoint
ANALYTICS_RATE_LIMIT = os.getenv("ANALYTICS_RATE_LIMIT") or "120/minute"

# Largest snapshot array the HTTP layer will hand to the engine
MAX_SNAPSHOTS = _positive_int("MAX_SNAPSHOTS", 5000)

FINISHED_STATUS = "finished"
PLAYER_SLOTS = 4

# Ceiling for any single winners/errors counter in a submitted snapshot
MAX_POINT_COUNTER = _positive_int("MAX_POINT_COUNTER", 1000)

# Point events a whole history may describe (sum of counter increments)
MAX_POINT_EVENTS = _positive_int("MAX_POINT_EVENTS", 5000)
