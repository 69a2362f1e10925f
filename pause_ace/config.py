"""Runtime configuration for the learning pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "PAUSE_ACE_"
STRUCTURED_OUTPUT_MODES = ("json", "instructor")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(ENV_PREFIX + name)
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(ENV_PREFIX + name)
    return int(raw) if raw else default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(ENV_PREFIX + name)
    if not raw:
        return default
    return raw.lower() in ("true", "1", "yes")


@dataclass
class LearningConfig:
    """Timeouts, retry bounds and backend settings for a learning run.

    Every stage timeout is in seconds and races the stage against a timer;
    hitting it fails the run rather than triggering a retry.
    """

    model: str = "gemini/gemini-2.5-flash"
    api_key: Optional[str] = None
    temperature: float = 0.0
    max_tokens: int = 2048
    reflection_timeout: float = 10.0
    curation_timeout: float = 10.0
    storage_timeout: float = 10.0
    max_commit_attempts: int = 3
    database_url: str = "sqlite+aiosqlite:///skillbook.db"
    opik_project: str = "pause-learning"
    opik_enabled: bool = True
    # "json": LiteLLMClient parses replies; "instructor": Instructor validates them
    structured_output: str = "json"

    def __post_init__(self) -> None:
        if self.max_commit_attempts < 1:
            raise ValueError("max_commit_attempts must be >= 1")
        if self.structured_output not in STRUCTURED_OUTPUT_MODES:
            raise ValueError(
                f"structured_output must be one of {STRUCTURED_OUTPUT_MODES}, "
                f"got {self.structured_output!r}"
            )

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "LearningConfig":
        """Build a config from ``PAUSE_ACE_*`` environment variables.

        Loads the nearest ``.env`` file above the working directory first
        unless *dotenv* is ``False``. Variables already set win.
        """
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))
        defaults = cls()
        return cls(
            model=os.getenv(ENV_PREFIX + "MODEL", defaults.model),
            api_key=os.getenv(ENV_PREFIX + "API_KEY") or None,
            temperature=_env_float("TEMPERATURE", defaults.temperature),
            max_tokens=_env_int("MAX_TOKENS", defaults.max_tokens),
            reflection_timeout=_env_float("REFLECTION_TIMEOUT", defaults.reflection_timeout),
            curation_timeout=_env_float("CURATION_TIMEOUT", defaults.curation_timeout),
            storage_timeout=_env_float("STORAGE_TIMEOUT", defaults.storage_timeout),
            max_commit_attempts=_env_int("MAX_COMMIT_ATTEMPTS", defaults.max_commit_attempts),
            database_url=os.getenv(ENV_PREFIX + "DATABASE_URL", defaults.database_url),
            opik_project=os.getenv(ENV_PREFIX + "OPIK_PROJECT", defaults.opik_project),
            opik_enabled=_env_bool("OPIK_ENABLED", defaults.opik_enabled),
            structured_output=os.getenv(
                ENV_PREFIX + "STRUCTURED_OUTPUT", defaults.structured_output
            ),
        )
