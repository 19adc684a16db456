"""
Zernsdorf Waste Calendar — Centralized configuration.

Loads all settings from .env and the process environment.
Every setting is optional: a missing SBAZV_ICS_URL is a valid state that
makes the service answer with the generated fallback schedule.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (one level up from wastecal/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

DEFAULT_CACHE_TTL_HOURS = 12.0
DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_USER_AGENT = "Zernsdorf-Portal/1.0 (Waste Calendar Sync)"
DEFAULT_CALENDAR_TITLE = "Müllabfuhr Zernsdorf"


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Personal SBAZV calendar export URL (StandortID + AboID of one address)
    SBAZV_ICS_URL: str = ""

    # Cache + network
    CACHE_TTL_HOURS: float = DEFAULT_CACHE_TTL_HOURS
    FETCH_TIMEOUT_SECONDS: float = DEFAULT_TIMEOUT_SECONDS
    USER_AGENT: str = DEFAULT_USER_AGENT

    # Export
    CALENDAR_TITLE: str = DEFAULT_CALENDAR_TITLE

    LOG_LEVEL: str = "INFO"

    @field_validator("SBAZV_ICS_URL", mode="before")
    @classmethod
    def strip_url(cls, v: str | None) -> str:
        return (v or "").strip()

    @field_validator("CACHE_TTL_HOURS", "FETCH_TIMEOUT_SECONDS", mode="before")
    @classmethod
    def parse_positive(cls, v: str | float | int) -> float:
        value = float(v)
        if value <= 0:
            raise ValueError(f"must be positive, got {v!r}")
        return value

    @property
    def has_feed_url(self) -> bool:
        return bool(self.SBAZV_ICS_URL)


def _load_settings() -> Settings:
    """Load settings from environment."""
    return Settings(
        SBAZV_ICS_URL=os.getenv("SBAZV_ICS_URL", ""),
        CACHE_TTL_HOURS=os.getenv("CACHE_TTL_HOURS", str(DEFAULT_CACHE_TTL_HOURS)),
        FETCH_TIMEOUT_SECONDS=os.getenv("FETCH_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)),
        USER_AGENT=os.getenv("USER_AGENT", DEFAULT_USER_AGENT),
        CALENDAR_TITLE=os.getenv("CALENDAR_TITLE", DEFAULT_CALENDAR_TITLE),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton — imported by other modules as:
#   from wastecal.config import settings
settings = _load_settings()
