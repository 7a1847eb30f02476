"""
HTTP client for the KSense assessment API.

Every call goes through the configured RetryPolicy; HTTP outcomes are mapped
onto the errors in `errors.py` so the policy can tell transient failures
(429, 5xx, connection problems) from permanent ones.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .config import AssessmentConfig
from .errors import (
    ClientRequestError,
    RateLimitError,
    ResponseParseError,
    ServerError,
    TransientNetworkError,
    TransportError,
)
from .models import AssessmentResults, Patient, PatientsPage, SubmissionResult
from .retry import RetryPolicy

LOGGER = logging.getLogger(__name__)

PATIENTS_PATH = "/patients"
SUBMIT_PATH = "/submit-assessment"

# connection dropped or stalled, possibly mid-body
TRANSIENT_REQUEST_ERRORS = (
    requests.ConnectionError,
    requests.Timeout,
    requests.exceptions.ChunkedEncodingError,
    requests.exceptions.ContentDecodingError,
)


def check_response(response: requests.Response, url: str) -> Any:
    """Raise the matching AssessmentError for a bad status, else return the decoded body."""
    status = response.status_code
    if status == 429:
        raise RateLimitError(f"rate limited on {url}")
    if 500 <= status < 600:
        raise ServerError(status, f"server error {status} on {url}")
    if not 200 <= status < 300:
        raise ClientRequestError(status, f"HTTP {status} on {url}: {response.text}")
    try:
        return response.json()
    except ValueError as e:
        raise ResponseParseError(f"invalid JSON from {url}: {e}") from e


class AssessmentClient:
    def __init__(
        self,
        config: AssessmentConfig,
        retry_policy: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.retry_policy = retry_policy or config.retry_policy()
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    def _send(self, method: str, path: str, **kwargs) -> Any:
        url = self._url(path)
        headers = dict(self.config.headers)
        headers.update(kwargs.pop("headers", {}))

        def attempt():
            try:
                response = self.session.request(
                    method, url, headers=headers, timeout=self.config.timeout, **kwargs
                )
            except TRANSIENT_REQUEST_ERRORS as e:
                raise TransientNetworkError(f"{method} {url}: {e}") from e
            except requests.RequestException as e:
                raise TransportError(f"{method} {url}: {e}") from e
            return check_response(response, url)

        return self.retry_policy.call(attempt, f"{method} {path}")

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._send("GET", path, params=params)

    def post_json(self, path: str, body: Dict[str, Any]) -> Any:
        return self._send(
            "POST", path, json=body, headers={"Content-Type": "application/json"}
        )

    def fetch_page(self, page: int, limit: Optional[int] = None) -> PatientsPage:
        limit = limit or self.config.page_limit
        data = self.get_json(PATIENTS_PATH, params={"page": page, "limit": limit})
        result = PatientsPage.from_dict(data)
        LOGGER.debug(
            "page %d/%d: %d records (request %s)",
            page,
            result.pagination.total_pages,
            len(result.patients),
            result.metadata.request_id,
        )
        return result

    def fetch_all_patients(self) -> List[Patient]:
        """
        Fetch every page, in order, and concatenate the records.

        Page 1 tells us how many pages there are; the rest are fetched one at a
        time. Any page that fails for good aborts the whole fetch.
        """
        first = self.fetch_page(1)
        patients = list(first.patients)
        total_pages = first.pagination.total_pages
        for page in range(2, total_pages + 1):
            patients.extend(self.fetch_page(page).patients)
        LOGGER.info("fetched %d patients across %d page(s)", len(patients), max(total_pages, 1))
        return patients

    def submit_assessment(self, results: AssessmentResults) -> SubmissionResult:
        LOGGER.info("submitting assessment: %s", results.counts())
        data = self.post_json(SUBMIT_PATH, results.to_payload())
        return SubmissionResult.from_dict(data)
