"""Tests for the upstream survey API client.

HTTP traffic is served by ``httpx.MockTransport``; retries use no wait.
"""
from __future__ import annotations

from typing import List

import httpx
import pytest
from tenacity import wait_none

from pulse_metrics.config import UpstreamSettings
from pulse_metrics.exceptions import ConfigurationError, UpstreamError
from pulse_metrics.models import User
from pulse_metrics.upstream import UpstreamClient


def _client(handler, **kwargs) -> UpstreamClient:
    return UpstreamClient(
        "https://survey.test/api/v1",
        "secret-token",
        4,
        transport=httpx.MockTransport(handler),
        retry_wait=wait_none(),
        **kwargs,
    )


def test_list_users_sends_credentials_and_parses_rows():
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"data": [{"id": 1, "company_id": 4, "manager_id": None}, "junk"]},
        )

    with _client(handler) as client:
        users = client.list_users()

    assert users == [User(id=1, company_id=4, manager_id=None)]
    request = seen[0]
    assert request.url.path == "/api/v1/user/basic-index"
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert request.headers["Company-Id"] == "4"
    assert request.headers["Accept"] == "application/json"


def test_list_answers_non_list_data_is_empty():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/pulse-survey-answers/index/9")
        return httpx.Response(200, json={"data": {"unexpected": True}})

    with _client(handler) as client:
        assert client.list_answers(9) == []


def test_list_answers_parses_scores():
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [{"sentiment_score": 0.4}, {"comment": "hi"}]})

    with _client(handler) as client:
        answers = client.list_answers(2)

    assert [a.score() for a in answers] == [0.4, None]


def test_not_found_is_not_retried():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(404, json={"message": "not found"})

    with _client(handler, max_attempts=3) as client:
        with pytest.raises(UpstreamError) as excinfo:
            client.list_answers(5)

    assert excinfo.value.status_code == 404
    assert len(calls) == 1


def test_transient_errors_are_retried():
    responses = iter(
        [
            httpx.Response(503),
            httpx.Response(429),
            httpx.Response(200, json={"data": [{"sentiment_score": 0.9}]}),
        ]
    )

    def handler(_request: httpx.Request) -> httpx.Response:
        return next(responses)

    with _client(handler, max_attempts=3) as client:
        answers = client.list_answers(1)

    assert [a.sentiment_score for a in answers] == [0.9]


def test_retries_are_bounded():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500)

    with _client(handler, max_attempts=2) as client:
        with pytest.raises(UpstreamError) as excinfo:
            client.list_users()

    assert excinfo.value.status_code == 500
    assert len(calls) == 2


def test_transport_errors_become_upstream_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler, max_attempts=2) as client:
        with pytest.raises(UpstreamError):
            client.list_users()


def test_invalid_json_is_an_upstream_error():
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    with _client(handler) as client:
        with pytest.raises(UpstreamError):
            client.list_users()


def test_from_settings_requires_base_url():
    with pytest.raises(ConfigurationError):
        UpstreamClient.from_settings(UpstreamSettings(base_url=None))
