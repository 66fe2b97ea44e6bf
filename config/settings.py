# config/settings.py
import os

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    try:
        value = float(raw) if raw not in (None, "") else default
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


# Path prefix for every endpoint. Empty means same origin as the http client.
API_BASE_URL = (os.getenv("STOCKS_API_BASE_URL") or "").rstrip("/")

# Origin used when the service builds its own httpx client (dev backend).
API_ORIGIN = os.getenv("STOCKS_API_ORIGIN", "http://localhost:8580")

API_TIMEOUT_SEC = _env_float("STOCKS_API_TIMEOUT_SEC", 10.0)

# Metadata default until the first successful /recommendations call.
DEFAULT_WINDOW_DAYS = 30
