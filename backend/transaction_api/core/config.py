# transaction_api/core/config.py
# Simple config loader: values come from the environment (or a local .env)
import os
from typing import List
from dotenv import load_dotenv

load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUE_VALUES


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "") or ""
    return [item.strip() for item in raw.split(",") if item.strip()]


class SimpleSettings:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./transactions.db")
    SQL_ECHO = _env_bool("SQL_ECHO", "false")

    # consumed idempotency keys are remembered for 30 minutes
    IDEMPOTENCY_TTL_SECONDS = int(os.getenv("IDEMPOTENCY_TTL_SECONDS", "1800"))
    IDEMPOTENCY_MAX_KEYS = int(os.getenv("IDEMPOTENCY_MAX_KEYS", "1000"))
    IDEMPOTENCY_RELEASE_ON_FAILURE = _env_bool("IDEMPOTENCY_RELEASE_ON_FAILURE", "true")

    LIST_CACHE_TTL_SECONDS = int(os.getenv("LIST_CACHE_TTL_SECONDS", "600"))
    LIST_CACHE_MAX_ENTRIES = int(os.getenv("LIST_CACHE_MAX_ENTRIES", "500"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = os.getenv("LOG_FORMAT", "standard")

    CORS_ALLOW_ORIGINS = _env_list("CORS_ALLOW_ORIGINS")


settings = SimpleSettings()
