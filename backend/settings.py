"""Environment-driven settings shared by the store, auth and feed layers."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load backend/.env early so DATABASE_URL and friends are honored consistently.
env_path = Path(__file__).resolve().parent / ".env"
load_dotenv(dotenv_path=env_path, override=False)


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value not in (None, "") else default


def _env_int(name: str, default: int, min_value: int, max_value: int) -> int:
    raw = os.getenv(name)
    try:
        value = int(raw) if raw not in (None, "") else default
    except Exception:
        value = default
    return max(min_value, min(max_value, value))


def _env_float(name: str, default: float, min_value: float, max_value: float) -> float:
    raw = os.getenv(name)
    try:
        value = float(raw) if raw not in (None, "") else default
    except Exception:
        value = default
    return max(min_value, min(max_value, value))


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    return str(raw).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> list[str]:
    raw = _env_str(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


# In-memory SQLite: the store resets on every restart.
DATABASE_URL = _env_str("DATABASE_URL", "sqlite://")

# JWT settings
SECRET_KEY = _env_str("SECRET_KEY", "dev-secret-key-change-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = _env_int("ACCESS_TOKEN_EXPIRE_MINUTES", 24 * 60, 5, 30 * 24 * 60)

ADMIN_USERNAME = _env_str("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = _env_str("ADMIN_PASSWORD", "admin")
ADMIN_FULL_NAME = _env_str("ADMIN_FULL_NAME", "Admin User")

EXTERNAL_POSTS_API_BASE = _env_str("EXTERNAL_POSTS_API_BASE", "https://dummyjson.com").rstrip("/")
EXTERNAL_TIMEOUT_SEC = _env_float("EXTERNAL_TIMEOUT_SEC", 10.0, 1.0, 60.0)
EXTERNAL_CACHE_TTL_SEC = _env_int("EXTERNAL_CACHE_TTL_SEC", 300, 0, 3600)
EXTERNAL_FEED_ENABLED = _env_bool("EXTERNAL_FEED_ENABLED", True)

LOG_LEVEL = _env_str("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = _env_list("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")
