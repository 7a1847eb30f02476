"""
RetryPolicy: backoff schedule, termination and which failures are retried.
"""

import pytest
from unittest.mock import Mock

from ksense_triage.errors import (
    ClientRequestError,
    RateLimitError,
    ResponseParseError,
    RetryExhaustedError,
    ServerError,
    TransientNetworkError,
)
from ksense_triage.retry import RetryPolicy


def test_success_needs_no_retry(policy, sleeps):
    fn = Mock(return_value="ok")
    assert policy.call(fn) == "ok"
    assert fn.call_count == 1
    assert sleeps == []


@pytest.mark.parametrize(
    "exc",
    [RateLimitError("429"), ServerError(503, "503"), TransientNetworkError("reset")],
)
def test_transient_failures_are_retried(policy, sleeps, exc):
    fn = Mock(side_effect=[exc, exc, "ok"])
    assert policy.call(fn) == "ok"
    assert fn.call_count == 3
    assert sleeps == [0.5, 1.0]


def test_always_rate_limited_gives_up_after_max_retries_plus_one(policy, sleeps):
    fn = Mock(side_effect=RateLimitError("429"))
    with pytest.raises(RetryExhaustedError) as info:
        policy.call(fn, "GET /patients")
    assert fn.call_count == 4
    assert info.value.attempts == 4
    assert isinstance(info.value.last_error, RateLimitError)
    assert info.value.__cause__ is info.value.last_error
    # no sleep after the final attempt
    assert sleeps == [0.5, 1.0, 2.0]


@pytest.mark.parametrize("exc", [ClientRequestError(400, "bad"), ResponseParseError("junk"), KeyError("x")])
def test_permanent_failures_surface_immediately(policy, sleeps, exc):
    fn = Mock(side_effect=exc)
    with pytest.raises(type(exc)):
        policy.call(fn)
    assert fn.call_count == 1
    assert sleeps == []


def test_zero_retries_means_single_attempt(sleeps):
    policy = RetryPolicy(max_retries=0, base_delay=1.0, sleep=sleeps.append)
    fn = Mock(side_effect=ServerError(500, "boom"))
    with pytest.raises(RetryExhaustedError):
        policy.call(fn)
    assert fn.call_count == 1
    assert sleeps == []


def test_custom_predicate():
    calls = []
    policy = RetryPolicy(max_retries=2, base_delay=2.0, is_retryable=lambda e: isinstance(e, KeyError), sleep=calls.append)
    fn = Mock(side_effect=[KeyError("a"), "done"])
    assert policy.call(fn) == "done"
    assert calls == [2.0]
