"""Configuration constants for the metrics service.

Values come from the process environment (optionally a ``.env`` file loaded
via python-dotenv). Credentials are only ever read here and handed to the
upstream client as opaque strings.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from pulse_metrics.exceptions import ConfigurationError

load_dotenv()

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    raw_val = os.getenv(name)
    if not raw_val:
        return default
    try:
        parsed = int(raw_val)
    except ValueError:
        logger.warning("Invalid %s value '%s'; using %d.", name, raw_val, default)
        return default
    if parsed <= 0:
        logger.warning("Ignoring %s=%s (must be positive int)", name, raw_val)
        return default
    return parsed


def _env_float(name: str, default: float) -> float:
    raw_val = os.getenv(name)
    if not raw_val:
        return default
    try:
        return float(raw_val)
    except ValueError:
        logger.warning("Invalid %s value '%s'; using %s.", name, raw_val, default)
        return default


def _env_flag(name: str, default: bool) -> bool:
    raw_val = os.getenv(name)
    if raw_val is None or raw_val == "":
        return default
    # Anything other than an explicit falsy word counts as enabled
    return raw_val.strip().lower() not in {"0", "false", "no", "off"}


# Substitute synthetic answers when real survey data is missing.
# Should be switched off in production.
ENABLE_MOCK_DATA: bool = _env_flag("PULSE_ENABLE_MOCK_DATA", True)

# Upper bound on concurrent per-user answer requests
MAX_IN_FLIGHT: int = _env_int("PULSE_MAX_IN_FLIGHT", 8)

# Upstream request timeout in seconds
UPSTREAM_TIMEOUT: float = _env_float("PULSE_UPSTREAM_TIMEOUT", 10.0)

# Attempts per upstream call (1 disables retries)
UPSTREAM_MAX_ATTEMPTS: int = _env_int("PULSE_UPSTREAM_MAX_ATTEMPTS", 3)

LOG_LEVEL: str = os.getenv("PULSE_LOG_LEVEL", "INFO").upper()

HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = _env_int("PORT", 5000)

SLACK_BOT_TOKEN: Optional[str] = os.getenv("SLACK_BOT_TOKEN")


@dataclass(frozen=True)
class UpstreamSettings:
    """Connection settings for the upstream pulse-survey API."""

    base_url: Optional[str]
    token: str = ""
    company_id: str = ""
    timeout: float = UPSTREAM_TIMEOUT
    max_attempts: int = UPSTREAM_MAX_ATTEMPTS

    @classmethod
    def from_env(cls) -> "UpstreamSettings":
        return cls(
            base_url=os.getenv("OSPREY_BASE_URL"),
            token=os.getenv("OSPREY_TOKEN", ""),
            company_id=os.getenv("OSPREY_COMPANY_ID", ""),
            timeout=_env_float("PULSE_UPSTREAM_TIMEOUT", UPSTREAM_TIMEOUT),
            max_attempts=_env_int("PULSE_UPSTREAM_MAX_ATTEMPTS", UPSTREAM_MAX_ATTEMPTS),
        )

    def require_base_url(self) -> str:
        """Return the base URL or raise.

        Raises
        ------
        ConfigurationError
            If ``OSPREY_BASE_URL`` is missing or empty.
        """
        if not self.base_url:
            raise ConfigurationError("OSPREY_BASE_URL environment variable is not set.")
        return self.base_url
