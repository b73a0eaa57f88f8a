"""
Configuration - environment-driven settings.

All values are read once at import. The CLI loads a `.env` file
before importing the package, so the same variables can live there.
"""

import os
from pathlib import Path
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


# Stock / catalog API
API_BASE_URL = os.environ.get("ROCKETSHOES_API_URL", "http://localhost:3333")
API_TIMEOUT = float(os.environ.get("ROCKETSHOES_API_TIMEOUT", "10"))
API_RETRY_ATTEMPTS = _env_int("ROCKETSHOES_API_RETRY_ATTEMPTS", 3)

# Notification texts
LANGUAGE = os.environ.get("ROCKETSHOES_LANGUAGE", "pt")

# Persistent store
CART_STORAGE_KEY = "@RocketShoes:cart"
CART_STORAGE = os.environ.get("CART_STORAGE", "file").strip().lower()
CART_STORAGE_PATH = Path(
    os.environ.get("CART_STORAGE_PATH", "~/.rocketshoes/storage.json")
).expanduser()
CART_TTL = _env_int("CART_TTL", None)  # seconds, Redis only

# Per-product locking of mutations
CART_SERIALIZE_MUTATIONS = _env_bool("CART_SERIALIZE_MUTATIONS", True)

# Upstash Redis - standard env var names per docs
UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")

STORAGE_BACKENDS = ("file", "redis", "memory")
