"""Data structures shared by the aggregation pipeline."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pulse_metrics.exceptions import UnsupportedRoleError


class Role(str, Enum):
    """Dashboard audiences we know how to serve."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"

    @classmethod
    def parse(cls, raw: str) -> "Role":
        """Return the matching role for *raw* (case-insensitive) or raise."""
        try:
            return cls((raw or "").strip().lower())
        except ValueError as exc:
            raise UnsupportedRoleError(raw) from exc


class OutputMode(str, Enum):
    """How aggregated statistics are returned to the caller."""

    SHAPED = "shaped"  # role-specific dashboard
    FLAT = "flat"  # metrics-only summary


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def coerce_score(value: Any) -> Optional[float]:
    """Return *value* as a finite float, or ``None`` if it is not numeric."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(score) or math.isinf(score):
        return None
    return score


@dataclass(frozen=True)
class User:
    """A survey participant as listed by the upstream API."""

    id: Optional[int]
    company_id: Optional[int] = None
    manager_id: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "User":
        return cls(
            id=_as_int(raw.get("id")),
            company_id=_as_int(raw.get("company_id")),
            manager_id=_as_int(raw.get("manager_id")),
        )


@dataclass(frozen=True)
class Answer:
    """One survey response. Only ``sentiment_score`` matters to the dashboards."""

    sentiment_score: Any = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Answer":
        extra = {k: v for k, v in raw.items() if k != "sentiment_score"}
        return cls(sentiment_score=raw.get("sentiment_score"), extra=extra)

    def score(self) -> Optional[float]:
        return coerce_score(self.sentiment_score)

    def get(self, key: str, default: Any = None) -> Any:
        if key == "sentiment_score":
            return self.sentiment_score
        return self.extra.get(key, default)


@dataclass(frozen=True)
class AnswerFetch:
    """Outcome of fetching one user's answers: either answers or an error."""

    user_id: int
    answers: List[Answer] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class Statistics:
    """Reduced survey statistics handed to the presenter."""

    scores: List[float]
    avg_sentiment: float
    avg_scaled: float
    burnout_scores: List[float]
    burnout_risk_count: int
    participation_rate: int
    user_count: int
    response_count: int
