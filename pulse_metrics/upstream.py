"""HTTP client for the upstream pulse-survey API.

Two read operations are consumed by the aggregation pipeline:

* ``GET /user/basic-index`` lists users (``{id, company_id, manager_id}``).
* ``GET /pulse-survey-answers/index/{user_id}`` lists one user's answers.

Both endpoints wrap their payload in a ``{"data": [...]}`` envelope. Transient
failures (transport errors, 429 and 5xx responses) are retried with bounded
exponential backoff; anything else surfaces as :class:`UpstreamError`.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

import httpx
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from pulse_metrics.config import UpstreamSettings
from pulse_metrics.exceptions import UpstreamError
from pulse_metrics.models import Answer, User

logger = logging.getLogger(__name__)

USERS_PATH = "/user/basic-index"
ANSWERS_PATH = "/pulse-survey-answers/index/{user_id}"

_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def _auth_headers(token: str, company_id: Union[str, int]) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Company-Id": str(company_id),
        "Accept": "application/json",
    }


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, UpstreamError) and exc.status_code in _RETRYABLE_STATUS


def _unwrap_list(payload: Any) -> List[Any]:
    """Return ``payload["data"]`` when it is a list, else an empty list."""
    if not isinstance(payload, dict):
        return []
    data = payload.get("data") or []
    return data if isinstance(data, list) else []


class UpstreamClient:
    """Thin, retrying wrapper around :class:`httpx.Client`."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        company_id: Union[str, int] = "",
        *,
        timeout: float = 10.0,
        max_attempts: int = 3,
        retry_wait: Optional[wait_base] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Create a client.

        Args:
            base_url: API root, e.g. ``https://host/api/v1``.
            token: Bearer token sent with every request.
            company_id: Value of the ``Company-Id`` header.
            timeout: Per-request timeout in seconds.
            max_attempts: Attempts per call; ``1`` disables retries.
            retry_wait: tenacity wait strategy (defaults to exponential backoff).
            transport: Optional httpx transport, mainly for tests.
        """
        self._http = httpx.Client(
            base_url=base_url,
            headers=_auth_headers(token, company_id),
            timeout=timeout,
            transport=transport,
        )
        self._max_attempts = max(1, max_attempts)
        self._retry_wait = retry_wait or wait_exponential(multiplier=0.5, min=0.5, max=5)

    @classmethod
    def from_settings(cls, settings: UpstreamSettings, **kwargs: Any) -> "UpstreamClient":
        return cls(
            settings.require_base_url(),
            settings.token,
            settings.company_id,
            timeout=settings.timeout,
            max_attempts=settings.max_attempts,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def list_users(self) -> List[User]:
        """Return every user visible to the configured credentials."""
        rows = _unwrap_list(self._get_json(USERS_PATH))
        return [User.from_dict(r) for r in rows if isinstance(r, dict)]

    def list_answers(self, user_id: int) -> List[Answer]:
        """Return the survey answers recorded for *user_id*."""
        rows = _unwrap_list(self._get_json(ANSWERS_PATH.format(user_id=user_id)))
        return [Answer.from_dict(r) for r in rows if isinstance(r, dict)]

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "UpstreamClient":
        return self

    def __exit__(self, *_exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _get_json(self, path: str) -> Any:
        retrying = Retrying(
            retry=retry_if_exception(_is_transient),
            stop=stop_after_attempt(self._max_attempts),
            wait=self._retry_wait,
            reraise=True,
        )
        try:
            return retrying(self._get_once, path)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"GET {path} failed: {exc}") from exc

    def _get_once(self, path: str) -> Any:
        response = self._http.get(path)
        if response.is_error:
            logger.debug("GET %s -> HTTP %d", path, response.status_code)
            raise UpstreamError(
                f"GET {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(f"GET {path} returned invalid JSON") from exc
