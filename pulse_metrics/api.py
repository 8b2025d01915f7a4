"""FastAPI entry point exposing the dashboard metrics.

GET /analytics/phase2/dashboard/{role}   role-shaped dashboard
GET /analytics/metrics                   flat metrics-only summary
GET /health                              liveness probe

Every response is a JSON envelope ``{success, data | message}``. Internal
error details are logged, never returned.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, ContextManager, Dict, Iterator, Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pulse_metrics import config
from pulse_metrics.aggregator import MetricsAggregator
from pulse_metrics.exceptions import (
    ConfigurationError,
    UnsupportedRoleError,
    UpstreamError,
)
from pulse_metrics.models import OutputMode, Role
from pulse_metrics.upstream import UpstreamClient

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"

MISSING_PARAMS_MESSAGE = "role and company_id are required"
DASHBOARD_FAILED_MESSAGE = "Dashboard metrics failed"
METRICS_FAILED_MESSAGE = "Analytics metrics failed"
UPSTREAM_FAILED_MESSAGE = "Upstream survey service unavailable"

app = FastAPI(
    title="Pulse Metrics API",
    description="Role-scoped employee sentiment dashboards.",
    version=APP_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


AggregatorFactory = Callable[[], ContextManager[MetricsAggregator]]


@contextmanager
def open_aggregator() -> Iterator[MetricsAggregator]:
    """Build an aggregator backed by a fresh upstream client."""
    settings = config.UpstreamSettings.from_env()
    with UpstreamClient.from_settings(settings) as client:
        yield MetricsAggregator(
            client,
            enable_fallback=config.ENABLE_MOCK_DATA,
            max_workers=config.MAX_IN_FLIGHT,
        )


def get_aggregator_factory() -> AggregatorFactory:
    """Return the factory used to open an aggregator once a request is valid."""
    return open_aggregator


def _ok(data: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=200, content={"success": True, "data": data})


def _fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _parse_id(raw: Optional[str]) -> Optional[int]:
    """Parse a numeric query parameter; blanks and junk become ``None``."""
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _run(
    open_agg: AggregatorFactory,
    role_raw: Optional[str],
    company_raw: Optional[str],
    user_raw: Optional[str],
    *,
    mode: OutputMode,
    failure_message: str,
) -> JSONResponse:
    company_id = _parse_id(company_raw)
    if not role_raw or not company_id:
        return _fail(400, MISSING_PARAMS_MESSAGE)

    try:
        role = Role.parse(role_raw)
    except UnsupportedRoleError as exc:
        return _fail(400, str(exc))

    # Upstream client is only built for requests that passed validation
    try:
        with open_agg() as aggregator:
            data = aggregator.compute_metrics(role, company_id, _parse_id(user_raw), mode=mode)
    except ConfigurationError as exc:
        logger.error("Service misconfigured: %s", exc)
        return _fail(500, failure_message)
    except UpstreamError as exc:
        logger.error("Upstream failure for %s dashboard: %s", role.value, exc)
        return _fail(502, UPSTREAM_FAILED_MESSAGE)
    except Exception:
        logger.exception("Dashboard Metrics Error (role=%s company=%s)", role.value, company_id)
        return _fail(500, failure_message)
    return _ok(data)


@app.get("/analytics/phase2/dashboard/{role}")
def get_dashboard_metrics(
    role: str,
    company_id: Optional[str] = None,
    user_id: Optional[str] = None,
    open_agg: AggregatorFactory = Depends(get_aggregator_factory),
) -> JSONResponse:
    return _run(
        open_agg,
        role,
        company_id,
        user_id,
        mode=OutputMode.SHAPED,
        failure_message=DASHBOARD_FAILED_MESSAGE,
    )


@app.get("/analytics/metrics")
def get_flat_metrics(
    company_id: Optional[str] = None,
    role: str = Role.ADMIN.value,
    user_id: Optional[str] = None,
    open_agg: AggregatorFactory = Depends(get_aggregator_factory),
) -> JSONResponse:
    return _run(
        open_agg,
        role,
        company_id,
        user_id,
        mode=OutputMode.FLAT,
        failure_message=METRICS_FAILED_MESSAGE,
    )


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}
