"""Aggregate upstream survey answers into role-scoped dashboard metrics.

Pipeline for one request::

    users (role filter) -> answers (bounded fan-out, per-user isolation)
        -> fallback to synthetic answers -> score extraction
        -> reduction -> presenter

Every call is independent; nothing is cached between requests.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Protocol, Sequence

from pulse_metrics import config
from pulse_metrics.calculator import calculate_metrics, round_half_up
from pulse_metrics.models import Answer, AnswerFetch, OutputMode, Role, Statistics, User
from pulse_metrics.presenter import flatten, shape
from pulse_metrics.synthesizer import synthesize

logger = logging.getLogger(__name__)

# Burnout score above which an entry counts as "at risk"
BURNOUT_RISK_THRESHOLD = 0.7

NO_USERS_MESSAGE = "No users found for this role"
NO_SCORES_MESSAGE = "No valid sentiment scores"


class SurveyProvider(Protocol):
    """The two upstream reads the aggregator depends on."""

    def list_users(self) -> List[User]: ...

    def list_answers(self, user_id: int) -> List[Answer]: ...


def filter_users(users: Sequence[User], role: Role, company_id: Any, user_id: Any) -> List[User]:
    """Keep only the users *role* is entitled to see."""

    if role is Role.EMPLOYEE:
        return [u for u in users if u.id is not None and u.id == user_id]
    if role is Role.MANAGER:
        return [u for u in users if u.manager_id is not None and u.manager_id == user_id]
    if role is Role.ADMIN:
        return [u for u in users if u.company_id is not None and u.company_id == company_id]
    raise AssertionError(f"unhandled role {role!r}")  # pragma: no cover


def extract_scores(answers: Sequence[Answer]) -> List[float]:
    """Return the numeric sentiment scores, dropping invalid entries."""
    return [s for s in (a.score() for a in answers) if s is not None]


def reduce_scores(scores: Sequence[float], user_count: int, response_count: int) -> Statistics:
    """Reduce *scores* into the statistics every dashboard is built from.

    ``participation_rate`` is measured against all requested users, so
    dropping invalid answers never changes the denominator.
    """

    if not scores:
        raise ValueError("reduce_scores needs at least one score")

    avg_sentiment = sum(scores) / len(scores)
    burnout_scores = [max(0.0, 1 - s) for s in scores]
    return Statistics(
        scores=list(scores),
        avg_sentiment=avg_sentiment,
        avg_scaled=round_half_up(avg_sentiment * 10, 2),
        burnout_scores=burnout_scores,
        burnout_risk_count=sum(1 for b in burnout_scores if b > BURNOUT_RISK_THRESHOLD),
        participation_rate=int(round_half_up(len(scores) / (user_count or 1) * 100)),
        user_count=user_count,
        response_count=response_count,
    )


class MetricsAggregator:
    """Fetch, reduce and shape survey metrics for a single dashboard request."""

    def __init__(
        self,
        provider: SurveyProvider,
        *,
        enable_fallback: bool = config.ENABLE_MOCK_DATA,
        max_workers: int = config.MAX_IN_FLIGHT,
        synthesizer: Callable[[int], List[Answer]] = synthesize,
    ) -> None:
        """Create an aggregator.

        Args:
            provider: Upstream source of users and answers.
            enable_fallback: Substitute synthetic answers when no real
                score is usable.
            max_workers: Cap on concurrent per-user answer requests.
            synthesizer: Factory for fallback answers (``user_count -> answers``).
        """
        self._provider = provider
        self._enable_fallback = enable_fallback
        self._max_workers = max(1, max_workers)
        self._synthesize = synthesizer

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------
    def fetch_users(self, role: Role, company_id: Any, user_id: Any) -> List[User]:
        """List upstream users and apply the role filter.

        Upstream failures propagate: without a user list there is nothing to
        aggregate.
        """
        users = filter_users(self._provider.list_users(), role, company_id, user_id)
        logger.info("Fetched users (%s): %d", role.value, len(users))
        return users

    def _fetch_one(self, user_id: int) -> AnswerFetch:
        try:
            return AnswerFetch(user_id=user_id, answers=list(self._provider.list_answers(user_id)))
        except Exception as exc:  # noqa: BLE001 – isolate per-user failures
            return AnswerFetch(user_id=user_id, error=exc)

    def fetch_answers(self, user_ids: Sequence[int]) -> List[Answer]:
        """Fetch answers for every user, in user order.

        A failed lookup counts as "no answers for this user" and never aborts
        the siblings.
        """
        if not user_ids:
            return []

        workers = min(self._max_workers, len(user_ids))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="answers") as pool:
            results = list(pool.map(self._fetch_one, user_ids))

        answers: List[Answer] = []
        for result in results:
            if not result.ok:
                logger.warning("No answers for user %s: %s", result.user_id, result.error)
                continue
            answers.extend(result.answers)
        return answers

    def _apply_fallback(self, answers: List[Answer], user_count: int) -> List[Answer]:
        if not self._enable_fallback:
            return answers
        if answers and any(a.score() is not None for a in answers):
            return answers
        logger.warning("Using MOCK survey data for %d users", user_count)
        return self._synthesize(user_count)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------
    def compute_metrics(
        self,
        role: Role,
        company_id: Any,
        user_id: Any = None,
        *,
        mode: OutputMode = OutputMode.SHAPED,
    ) -> Dict[str, Any]:
        """Return the dashboard (or flat summary) for *role*.

        "No users" and "no valid scores" are not errors; they produce a
        payload with a ``message`` field instead of metrics.
        """
        users = self.fetch_users(role, company_id, user_id)
        if not users:
            return {"message": NO_USERS_MESSAGE}

        user_ids = [u.id for u in users if u.id is not None]
        answers = self._apply_fallback(self.fetch_answers(user_ids), len(users))

        scores = extract_scores(answers)
        if not scores:
            return {"role": role.value, "company_id": company_id, "message": NO_SCORES_MESSAGE}

        stats = reduce_scores(scores, user_count=len(users), response_count=len(answers))
        logger.debug(
            "Reduced %d scores for %s: avg=%.2f risk=%d participation=%d%%",
            len(scores),
            role.value,
            stats.avg_sentiment,
            stats.burnout_risk_count,
            stats.participation_rate,
        )

        if mode is OutputMode.FLAT:
            return flatten(role, company_id, stats, calculate_metrics(answers))
        return shape(role, stats, company_id=company_id)
