"""Environment-driven settings for the Queue Desk backend."""

import os

from dotenv import load_dotenv

# Load environment variables from .env (for local development)
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


DATABASE_URL = os.getenv("QUEUE_DESK_DATABASE_URL", "sqlite:///./queue_desk.db")

# Deployment skin: "barbershop" or "laundry".
VARIANT = os.getenv("QUEUE_DESK_VARIANT", "barbershop")

SESSION_TTL_HOURS = int(os.getenv("QUEUE_DESK_SESSION_TTL_HOURS", "72"))
CACHE_TTL_SECONDS = int(os.getenv("QUEUE_DESK_CACHE_TTL_SECONDS", "30"))

ADMIN_EMAIL = os.getenv("QUEUE_DESK_ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("QUEUE_DESK_ADMIN_PASSWORD")
ADMIN_NAME = os.getenv("QUEUE_DESK_ADMIN_NAME", "Administrator")

ENABLE_SCHEDULER = _env_bool("QUEUE_DESK_ENABLE_SCHEDULER", True)
