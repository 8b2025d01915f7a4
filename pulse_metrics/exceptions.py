"""Project-wide custom exception types."""
from __future__ import annotations

from typing import Optional


class PulseMetricsError(RuntimeError):
    """Base class for errors raised by the metrics service."""


class ConfigurationError(PulseMetricsError):
    """Raised when required configuration (e.g. upstream base URL) is missing."""


class UpstreamError(PulseMetricsError):
    """Raised when the upstream survey API fails or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnsupportedRoleError(ValueError):
    """Raised when a dashboard is requested for a role we do not serve."""

    def __init__(self, role: str) -> None:  # noqa: D401 – simple constructor
        super().__init__(f"Unsupported role: {role}")
        self.role = role
