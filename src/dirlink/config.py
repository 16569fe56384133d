from __future__ import annotations

"""Configuration read from the environment or a ``.env`` file."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env either from project root or current working directory.
_ENV_PATH_CANDIDATES: Tuple[Path, ...] = (
    Path(__file__).resolve().parents[2] / ".env",
    Path.cwd() / ".env",
)
for candidate in _ENV_PATH_CANDIDATES:
    if candidate.exists():
        load_dotenv(candidate)
        break
else:
    load_dotenv()

CAPABILITY_CHOICES: Tuple[str, ...] = ("auto", "probe", "symlink", "junction")
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, default: str) -> bool:
    raw = os.getenv(name, default).strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class Config:
    """Container for runtime configuration."""

    capability: str
    overwrite: bool
    log_level: str

    @staticmethod
    def from_env() -> "Config":
        """Build a :class:`Config` from environment variables."""

        capability = os.getenv("DIRLINK_CAPABILITY", "auto").strip().lower()
        if capability not in CAPABILITY_CHOICES:
            raise ValueError(
                f"DIRLINK_CAPABILITY must be one of {', '.join(CAPABILITY_CHOICES)}, got {capability!r}"
            )

        log_level = os.getenv("DIRLINK_LOG_LEVEL", "INFO").strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"DIRLINK_LOG_LEVEL is not a logging level: {log_level!r}")

        return Config(
            capability=capability,
            overwrite=_parse_bool("DIRLINK_OVERWRITE", "true"),
            log_level=log_level,
        )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Return a cached :class:`Config` instance."""
    return Config.from_env()


__all__ = ["CAPABILITY_CHOICES", "Config", "get_config"]
