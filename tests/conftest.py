import pytest
from unittest.mock import Mock

from ksense_triage.client import AssessmentClient
from ksense_triage.config import AssessmentConfig
from ksense_triage.models import Patient
from ksense_triage.retry import RetryPolicy


def patient_dict(patient_id="DEMO001", age=45, blood_pressure="120/80", temperature=98.6, **extra):
    record = {
        "patient_id": patient_id,
        "name": "Test Patient",
        "age": age,
        "gender": "F",
        "blood_pressure": blood_pressure,
        "temperature": temperature,
        "visit_date": "2024-01-15",
        "diagnosis": "Hypertension",
        "medications": "Lisinopril 10mg",
    }
    record.update(extra)
    return record


def page_payload(records, page, total_pages, limit=5, total=None):
    return {
        "data": records,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total if total is not None else len(records) * total_pages,
            "totalPages": total_pages,
            "hasNext": page < total_pages,
            "hasPrevious": page > 1,
        },
        "metadata": {
            "timestamp": "2025-07-15T23:01:05.059Z",
            "version": "v1.0",
            "requestId": f"req-{page}",
        },
    }


def ok(body):
    return Mock(status_code=200, json=lambda: body)


def status(code, text=""):
    return Mock(status_code=code, text=text, json=lambda: {"error": text})


@pytest.fixture
def make_patient():
    """Factory for Patient objects with sane defaults."""

    def _make(**kwargs):
        return Patient.from_dict(patient_dict(**kwargs))

    return _make


@pytest.fixture
def config() -> AssessmentConfig:
    return AssessmentConfig(api_key="test-key", base_url="https://api.test/api/", base_delay=0.5)


@pytest.fixture
def sleeps() -> list:
    """Records every backoff delay instead of sleeping."""
    return []


@pytest.fixture
def policy(sleeps) -> RetryPolicy:
    return RetryPolicy(max_retries=3, base_delay=0.5, sleep=sleeps.append)


@pytest.fixture
def http() -> Mock:
    """Stand-in for requests.Session; tests set `http.request.side_effect`."""
    return Mock()


@pytest.fixture
def client(config, policy, http) -> AssessmentClient:
    return AssessmentClient(config, retry_policy=policy, session=http)
