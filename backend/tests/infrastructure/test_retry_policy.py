"""Retry Policy: classification and bounded attempts.

Invariants:
    - 5xx / 408 / network errors are TRANSIENT, transport timeouts are TIMEOUT
    - 2xx / other 4xx / unrelated errors are TERMINAL
    - Total tries never exceed 1 + max_attempts
"""

from unittest.mock import AsyncMock

import httpx
import pytest

from person_api.core.domain_types import OutcomeTag
from person_api.infrastructure.retry_policy import (
    AttemptOutcome, RetryConfig, RetryPolicy, classify_outcome,
)

_REQUEST = httpx.Request("GET", "https://api.genderize.test/?name=peter")


def _status(code):
    return AttemptOutcome(response=httpx.Response(code))


def _error(exc_type):
    return AttemptOutcome(error=exc_type("boom", request=_REQUEST))


@pytest.mark.parametrize("code", [500, 502, 503, 504, 408])
def test_server_errors_are_transient(code):
    assert classify_outcome(_status(code)) is OutcomeTag.TRANSIENT


@pytest.mark.parametrize("code", [200, 201, 204, 301, 400, 401, 404, 429])
def test_other_statuses_are_terminal(code):
    assert classify_outcome(_status(code)) is OutcomeTag.TERMINAL


@pytest.mark.parametrize(
    "exc_type", [httpx.ConnectError, httpx.ReadError, httpx.RemoteProtocolError],
)
def test_network_errors_are_transient(exc_type):
    assert classify_outcome(_error(exc_type)) is OutcomeTag.TRANSIENT


@pytest.mark.parametrize(
    "exc_type", [httpx.ConnectTimeout, httpx.ReadTimeout, httpx.PoolTimeout],
)
def test_transport_timeouts_are_timeout(exc_type):
    assert classify_outcome(_error(exc_type)) is OutcomeTag.TIMEOUT


def test_unrelated_errors_are_terminal():
    assert classify_outcome(_error(httpx.UnsupportedProtocol)) is OutcomeTag.TERMINAL


def test_retry_config_rejects_negative_values():
    with pytest.raises(ValueError):
        RetryConfig(max_attempts=-1, backoff_seconds=1)
    with pytest.raises(ValueError):
        RetryConfig(max_attempts=1, backoff_seconds=-0.5)


def _sequence(*outcomes):
    calls = []

    async def operation():
        calls.append(1)
        return outcomes[min(len(calls), len(outcomes)) - 1]

    return operation, calls


async def test_terminal_outcome_returns_immediately(monkeypatch):
    sleep = AsyncMock()
    monkeypatch.setattr("asyncio.sleep", sleep)
    operation, calls = _sequence(_status(200))

    outcome = await RetryPolicy().execute(operation, RetryConfig(3, 1))

    assert outcome.response.status_code == 200
    assert len(calls) == 1
    sleep.assert_not_awaited()


@pytest.mark.parametrize("max_attempts", [0, 1, 2, 5])
async def test_exhaustion_returns_last_transient_outcome(monkeypatch, max_attempts):
    sleep = AsyncMock()
    monkeypatch.setattr("asyncio.sleep", sleep)
    operation, calls = _sequence(_status(503))

    outcome = await RetryPolicy().execute(operation, RetryConfig(max_attempts, 2))

    assert outcome.response.status_code == 503
    assert len(calls) == max_attempts + 1
    assert sleep.await_count == max_attempts
    assert all(c.args[0] == 2 for c in sleep.await_args_list)


async def test_timeout_outcomes_are_retried(monkeypatch):
    monkeypatch.setattr("asyncio.sleep", AsyncMock())
    operation, calls = _sequence(_error(httpx.ReadTimeout), _status(200))

    outcome = await RetryPolicy().execute(operation, RetryConfig(2, 0))

    assert outcome.response.status_code == 200
    assert len(calls) == 2


async def test_client_error_stops_retrying(monkeypatch):
    monkeypatch.setattr("asyncio.sleep", AsyncMock())
    operation, calls = _sequence(_status(503), _status(404), _status(200))

    outcome = await RetryPolicy().execute(operation, RetryConfig(5, 0))

    assert outcome.response.status_code == 404
    assert len(calls) == 2
