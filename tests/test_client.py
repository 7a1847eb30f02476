"""
AssessmentClient against a mocked requests.Session: status mapping,
pagination and submission.
"""

import pytest
import requests
from unittest.mock import Mock

from conftest import ok, page_payload, patient_dict, status
from ksense_triage.errors import (
    ClientRequestError,
    RateLimitError,
    ResponseParseError,
    RetryExhaustedError,
    ServerError,
    TransientNetworkError,
    TransportError,
)
from ksense_triage.models import AssessmentResults


def _pages(n_pages, per_page):
    pages = []
    for p in range(1, n_pages + 1):
        records = [patient_dict(f"DEMO{p}{i:02d}") for i in range(per_page)]
        pages.append(page_payload(records, p, n_pages, limit=per_page))
    return pages


def test_fetch_all_patients_reads_every_page_in_order(client, http):
    http.request.side_effect = [ok(body) for body in _pages(3, 4)]
    patients = client.fetch_all_patients()

    assert len(patients) == 12
    assert [p.patient_id for p in patients[:5]] == ["DEMO100", "DEMO101", "DEMO102", "DEMO103", "DEMO200"]
    assert patients[-1].patient_id == "DEMO303"
    assert http.request.call_count == 3
    pages_requested = [call.kwargs["params"]["page"] for call in http.request.call_args_list]
    assert pages_requested == [1, 2, 3]


def test_fetch_sends_key_limit_and_timeout(client, http):
    http.request.side_effect = [ok(_pages(1, 2)[0])]
    client.fetch_all_patients()

    method, url = http.request.call_args.args
    kwargs = http.request.call_args.kwargs
    assert method == "GET"
    assert url == "https://api.test/api/patients"
    assert kwargs["headers"]["x-api-key"] == "test-key"
    assert kwargs["params"] == {"page": 1, "limit": 20}
    assert kwargs["timeout"] == 30.0


def test_transient_page_failures_are_retried(client, http, sleeps):
    pages = _pages(2, 3)
    http.request.side_effect = [
        ok(pages[0]),
        status(429),
        status(503),
        requests.ConnectionError("reset"),
        ok(pages[1]),
    ]
    patients = client.fetch_all_patients()
    assert len(patients) == 6
    assert sleeps == [0.5, 1.0, 2.0]


def test_unrecoverable_page_aborts_whole_fetch(client, http):
    pages = _pages(3, 2)
    http.request.side_effect = [ok(pages[0])] + [status(500)] * 4
    with pytest.raises(RetryExhaustedError) as info:
        client.fetch_all_patients()
    assert isinstance(info.value.last_error, ServerError)
    assert http.request.call_count == 5


def test_always_rate_limited_page_stops(client, http):
    http.request.return_value = status(429)
    with pytest.raises(RetryExhaustedError) as info:
        client.fetch_page(1)
    assert isinstance(info.value.last_error, RateLimitError)
    assert http.request.call_count == 4


def test_network_error_is_wrapped(client, http):
    http.request.side_effect = requests.Timeout("slow")
    with pytest.raises(RetryExhaustedError) as info:
        client.fetch_page(1)
    assert isinstance(info.value.last_error, TransientNetworkError)


def test_client_error_is_not_retried(client, http, sleeps):
    http.request.return_value = status(401, "Invalid API key")
    with pytest.raises(ClientRequestError) as info:
        client.fetch_page(1)
    assert info.value.status_code == 401
    assert http.request.call_count == 1
    assert sleeps == []


def test_invalid_json_is_not_retried(client, http):
    http.request.return_value = Mock(status_code=200, json=Mock(side_effect=ValueError("Expecting value")))
    with pytest.raises(ResponseParseError):
        client.fetch_page(1)
    assert http.request.call_count == 1


def test_page_without_data_list_is_parse_error(client, http):
    http.request.return_value = ok({"pagination": {"totalPages": 1}})
    with pytest.raises(ResponseParseError):
        client.fetch_page(1)


def test_submit_assessment_posts_three_lists(client, http):
    body = {
        "success": True,
        "message": "Assessment submitted successfully",
        "results": {
            "score": 91.94,
            "percentage": 92,
            "status": "PASS",
            "breakdown": {
                "high_risk": {"score": 48, "max": 50, "correct": 20, "submitted": 21, "matches": 20},
                "fever": {"score": 19, "max": 25, "correct": 9, "submitted": 7, "matches": 7},
                "data_quality": {"score": 25, "max": 25, "correct": 8, "submitted": 8, "matches": 8},
            },
            "feedback": {"strengths": ["Data quality issues perfectly identified"], "issues": ["Fever: 2 missed"]},
            "attempt_number": 1,
            "remaining_attempts": 2,
            "is_personal_best": True,
            "can_resubmit": True,
        },
    }
    http.request.return_value = ok(body)
    results = AssessmentResults(["DEMO001"], ["DEMO002"], ["DEMO003"])

    submission = client.submit_assessment(results)

    method, url = http.request.call_args.args
    kwargs = http.request.call_args.kwargs
    assert (method, url) == ("POST", "https://api.test/api/submit-assessment")
    assert kwargs["json"] == {
        "high_risk_patients": ["DEMO001"],
        "fever_patients": ["DEMO002"],
        "data_quality_issues": ["DEMO003"],
    }
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert submission.success
    assert submission.status == "PASS"
    assert submission.breakdown["fever"].matches == 7
    assert submission.issues == ["Fever: 2 missed"]
    assert submission.remaining_attempts == 2
    assert submission.is_personal_best


def test_submit_is_retried_on_server_error(client, http, sleeps):
    http.request.side_effect = [status(502), ok({"success": True, "results": {"score": 100}})]
    submission = client.submit_assessment(AssessmentResults())
    assert submission.score == 100
    assert sleeps == [0.5]


def test_body_cut_off_mid_transfer_is_retried(client, http, sleeps):
    http.request.side_effect = [
        requests.exceptions.ChunkedEncodingError("Connection broken: IncompleteRead"),
        requests.exceptions.ContentDecodingError("bad gzip"),
        ok(_pages(1, 2)[0]),
    ]
    page = client.fetch_page(1)
    assert len(page.patients) == 2
    assert sleeps == [0.5, 1.0]


def test_repeated_mid_transfer_failures_exhaust_retries(client, http):
    http.request.side_effect = requests.exceptions.ChunkedEncodingError("broken")
    with pytest.raises(RetryExhaustedError) as info:
        client.fetch_page(1)
    assert isinstance(info.value.last_error, TransientNetworkError)
    assert http.request.call_count == 4


@pytest.mark.parametrize(
    "exc",
    [
        requests.exceptions.MissingSchema("No scheme supplied"),
        requests.exceptions.InvalidURL("bad host"),
        requests.exceptions.TooManyRedirects("30 redirects"),
    ],
)
def test_other_requests_failures_are_permanent(client, http, sleeps, exc):
    http.request.side_effect = exc
    with pytest.raises(TransportError) as info:
        client.fetch_page(1)
    assert info.value.__cause__ is exc
    assert http.request.call_count == 1
    assert sleeps == []
