"""environment-driven settings for the governance tally"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from mvx_governance.ranking import DEFAULT_LEADERBOARD_SIZE

logger = logging.getLogger(__name__)

DEFAULT_ES_URL = "https://index.multiversx.com/events/_search"
GOVERNANCE_SC = "erd1qqqqqqqqqqqqqqqpqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqrlllsrujgla"

DEFAULT_EVENT_LIMIT = 10000
MIN_EVENT_LIMIT = 100
MAX_EVENT_LIMIT = 50000
DEFAULT_CACHE_TTL_MS = 60_000
DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_FETCH_MAX_TRIES = 1

THIS_DIR = Path(__file__).resolve().parent


def detect_project_root() -> Path:
    """detect project root by walking upward for a pyproject marker"""
    for candidate in [THIS_DIR, *THIS_DIR.parents]:
        if (candidate / "pyproject.toml").exists():
            return candidate
    return THIS_DIR.parent


PROJECT_ROOT = detect_project_root()


def load_env_files(root: Optional[Path] = None) -> Optional[Path]:
    """load .env or env from the project root without overriding the environment"""
    base = root or PROJECT_ROOT
    for name in (".env", "env"):
        candidate = base / name
        if candidate.exists():
            load_dotenv(dotenv_path=candidate, override=False)
            logger.debug(f"Loaded environment from {candidate}")
            return candidate
    return None


def validate_limit(limit: int) -> int:
    """check an event batch size against the accepted range"""
    value = int(limit)
    if not MIN_EVENT_LIMIT <= value <= MAX_EVENT_LIMIT:
        raise ValueError(
            f"limit must be between {MIN_EVENT_LIMIT} and {MAX_EVENT_LIMIT}, got {value}")
    return value


@dataclass
class Settings:
    es_url: str = DEFAULT_ES_URL
    governance_address: str = GOVERNANCE_SC
    event_limit: int = DEFAULT_EVENT_LIMIT
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_MS / 1000.0
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    fetch_max_tries: int = DEFAULT_FETCH_MAX_TRIES
    leaderboard_size: int = DEFAULT_LEADERBOARD_SIZE


def _env_number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def load_settings(environ: Optional[Mapping[str, str]] = None, load_env: bool = True) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        environ: Mapping to read instead of os.environ
        load_env: Load .env/env from the project root first

    Raises:
        ValueError: If a numeric variable is malformed or out of range
    """
    if load_env and environ is None:
        load_env_files()
    env = os.environ if environ is None else environ

    cache_ttl_ms = _env_number(env, "CACHE_TTL_MS", DEFAULT_CACHE_TTL_MS, float)
    if cache_ttl_ms < 0:
        raise ValueError("CACHE_TTL_MS must be non-negative")
    max_tries = _env_number(env, "FETCH_MAX_TRIES", DEFAULT_FETCH_MAX_TRIES, int)
    if max_tries < 1:
        raise ValueError("FETCH_MAX_TRIES must be at least 1")
    leaderboard_size = _env_number(env, "LEADERBOARD_SIZE", DEFAULT_LEADERBOARD_SIZE, int)
    if leaderboard_size < 0:
        raise ValueError("LEADERBOARD_SIZE must be non-negative")

    return Settings(
        es_url=env.get("ES_URL") or DEFAULT_ES_URL,
        governance_address=env.get("GOVERNANCE_SC") or GOVERNANCE_SC,
        event_limit=validate_limit(_env_number(env, "EVENT_LIMIT", DEFAULT_EVENT_LIMIT, int)),
        cache_ttl_seconds=cache_ttl_ms / 1000.0,
        fetch_timeout=_env_number(env, "FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT, float),
        fetch_max_tries=max_tries,
        leaderboard_size=leaderboard_size,
    )


__all__ = [
    "DEFAULT_ES_URL",
    "GOVERNANCE_SC",
    "DEFAULT_EVENT_LIMIT",
    "MIN_EVENT_LIMIT",
    "MAX_EVENT_LIMIT",
    "PROJECT_ROOT",
    "Settings",
    "load_env_files",
    "load_settings",
    "validate_limit",
]
