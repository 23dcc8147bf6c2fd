"""
Runtime settings.

Values are read from the environment after loading an optional `.env` file at
the project root.

Environment variables:
- COMANDAS_TIMEZONE: IANA timezone temporal promotions are evaluated in
  (default: America/Argentina/Buenos_Aires)
- COMANDAS_LOG_LEVEL: logging level name for entry points (default: INFO)
- SUPABASE_URL / SUPABASE_KEY: only required when the promotion catalog is
  read from Supabase
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

DEFAULT_TIMEZONE = "America/Argentina/Buenos_Aires"
DEFAULT_LOG_LEVEL = "INFO"

env_path = Path(__file__).parent.parent / ".env"


@dataclass(frozen=True, slots=True)
class Settings:
    operating_timezone: ZoneInfo
    log_level: str
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None


def _read_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(
            f"Invalid COMANDAS_TIMEZONE: {name!r}. Use an IANA name such as 'America/Argentina/Buenos_Aires'."
        ) from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""

    load_dotenv(dotenv_path=env_path)

    log_level = os.getenv("COMANDAS_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise RuntimeError(f"Invalid COMANDAS_LOG_LEVEL: {log_level!r}")

    return Settings(
        operating_timezone=_read_timezone(os.getenv("COMANDAS_TIMEZONE", DEFAULT_TIMEZONE)),
        log_level=log_level,
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_key=os.getenv("SUPABASE_KEY") or None,
    )


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging for an entry point (API, CLI)."""

    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
]
