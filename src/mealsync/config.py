"""Application configuration helpers."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

ENV_PREFIX = "MEALSYNC_"
ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    database_path: Path = Field(
        default=Path("./data/mealsync.db"),
        description="SQLite database location.",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token required for mutating endpoints and WebSocket subscriptions.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    log_requests: bool = Field(
        default=True,
        description="Emit request access logs and X-Request-ID headers when true.",
    )
    grocery_default_window_days: int = Field(
        default=7,
        ge=1,
        description="Days covered by a grocery list when no end date is supplied.",
    )
    server_host: str = Field(default="127.0.0.1", description="Bind address for `mealsync serve`.")
    server_port: int = Field(default=8000, description="Bind port for `mealsync serve`.")

    model_config = ConfigDict(frozen=True)


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


# Environment variable suffix -> (settings field, converter).
_ENV_FIELDS: dict[str, tuple[str, Callable[[str], object]]] = {
    "DATABASE_PATH": ("database_path", Path),
    "API_TOKEN": ("api_token", str),
    "LOG_LEVEL": ("log_level", str),
    "LOG_FORMAT": ("log_format", str),
    "LOG_REQUESTS": ("log_requests", _coerce_bool),
    "GROCERY_WINDOW_DAYS": ("grocery_default_window_days", int),
    "SERVER_HOST": ("server_host", str),
    "SERVER_PORT": ("server_port", int),
}


def _read_env_file(path: Path) -> dict[str, str]:
    if not path.is_file():
        return {}
    values: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, raw_value = line.split("=", 1)
        values[key.strip()] = raw_value.strip().strip('"').strip("'")
    return values


def _load_from_env() -> dict[str, object]:
    """Collect overrides from MEALSYNC_* variables, falling back to .env files."""

    file_values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        file_values.update(_read_env_file(candidate))

    payload: dict[str, object] = {}
    for suffix, (field, convert) in _ENV_FIELDS.items():
        key = ENV_PREFIX + suffix
        raw = os.environ.get(key) or file_values.get(key)
        if not raw:
            continue
        try:
            payload[field] = convert(raw)
        except ValueError:
            logger.warning("Ignoring invalid %s=%r", key, raw)
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
