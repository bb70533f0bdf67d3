"""
Environment-driven settings.

Every accessor reads the environment on call, so tests can patch variables
without reloading modules.
"""

from __future__ import annotations

import os

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_SCHEMA = "public"
DEFAULT_DOCS_PATH = "/api-docs"
DEFAULT_API_TITLE = "Auto-generated REST API"
DEFAULT_API_VERSION = "1.0.0"


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def port() -> int:
    return _env_int("PORT", DEFAULT_PORT)


def host() -> str:
    return _env_str("HOST", DEFAULT_HOST)


def schema_name() -> str:
    return _env_str("DB_SCHEMA", DEFAULT_SCHEMA)


def pool_min_size() -> int:
    return max(_env_int("DB_POOL_MIN_SIZE", 1), 0)


def pool_max_size() -> int:
    return max(_env_int("DB_POOL_MAX_SIZE", 5), 1)


def command_timeout() -> int:
    return _env_int("DB_COMMAND_TIMEOUT", 30)


def docs_path() -> str:
    path = _env_str("DOCS_PATH", DEFAULT_DOCS_PATH).rstrip("/")
    if not path.startswith("/"):
        path = "/" + path
    return path if path != "/" else DEFAULT_DOCS_PATH


def api_title() -> str:
    return _env_str("API_TITLE", DEFAULT_API_TITLE)


def api_version() -> str:
    return _env_str("API_VERSION", DEFAULT_API_VERSION)


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()


def log_format() -> str:
    fmt = _env_str("LOG_FORMAT", "text").lower()
    return fmt if fmt in {"text", "json"} else "text"
