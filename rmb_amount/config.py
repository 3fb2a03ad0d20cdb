"""Configuration loader and logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


def _get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    if value is not None:
        value = value.strip()
        if value == "":
            return default
        return value
    return default


def _get_int(key: str, default: int) -> int:
    value = _get_env(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Environment variable {key} must be an integer") from exc


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    max_text_length: int = 64  # Longest capitalized text the API accepts


def load_settings() -> Settings:
    """Read settings from the environment (and a .env file, if present)."""
    load_dotenv()
    return Settings(
        log_level=_get_env("RMB_AMOUNT_LOG_LEVEL", "INFO") or "INFO",
        max_text_length=_get_int("RMB_AMOUNT_MAX_TEXT_LENGTH", 64),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )
