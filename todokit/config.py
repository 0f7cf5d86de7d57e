"""Environment based settings for todokit.

Values are read from the process environment (and a `.env` file, if present) each time
`get_settings()` is called. Invalid values fall back to their defaults.
"""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from todokit.models.completion import CompletionConfig, CompletionDateMode, CompletionMode
from todokit.models.constants import DEFAULT_SOON_DAYS

load_dotenv()

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Library defaults that callers may override per call."""

    soon_days: int = Field(DEFAULT_SOON_DAYS, ge=0, description="Days ahead meant by 'soon'")
    completion_mode: CompletionMode = Field(CompletionMode.JUST_MARK, description="Priority disposition on completion")
    completion_date_mode: CompletionDateMode = Field(
        CompletionDateMode.WHEN_CREATION_DATE_IS_PRESENT,
        description="When completion writes a finish date",
    )
    auto_create_date: bool = Field(False, description="Stamp today's date on added tasks without one")

    def completion_config(self) -> CompletionConfig:
        return CompletionConfig(mode=self.completion_mode, date_mode=self.completion_date_mode)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer")
        return default
    if value < 0:
        logger.warning(f"Ignoring {name}={raw!r}: must not be negative")
        return default
    return value


def _env_enum(name: str, enum_cls, default):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: expected one of {[m.value for m in enum_cls]}")
        return default


def get_settings() -> Settings:
    """Build settings from the environment."""
    return Settings(
        soon_days=_env_int("TODOKIT_SOON_DAYS", DEFAULT_SOON_DAYS),
        completion_mode=_env_enum("TODOKIT_COMPLETION_MODE", CompletionMode, CompletionMode.JUST_MARK),
        completion_date_mode=_env_enum(
            "TODOKIT_COMPLETION_DATE_MODE",
            CompletionDateMode,
            CompletionDateMode.WHEN_CREATION_DATE_IS_PRESENT,
        ),
        auto_create_date=os.getenv("TODOKIT_AUTO_CREATE_DATE", "False").lower() == "true",
    )
