from __future__ import annotations

from typing import Iterable, List, Sequence

from .client import AssessmentClient
from .errors import (
    AssessmentError,
    ClientRequestError,
    RateLimitError,
    ResponseParseError,
    RetryExhaustedError,
    TransportError,
)
from .models import AssessmentResults, Patient, PatientSummary, SubmissionResult
from .scoring import PatientClassification, classify_patient


def classify_patients(patients: Iterable[Patient]) -> List[PatientClassification]:
    return [classify_patient(p) for p in patients]


def generate_assessment_results(
    classifications: Iterable[PatientClassification],
) -> AssessmentResults:
    """
    Split classifications into the three submission lists.

    Input order is preserved and ids are not deduplicated.
    """
    high_risk: List[str] = []
    fever: List[str] = []
    data_issues: List[str] = []

    for c in classifications:
        if c.is_high_risk:
            high_risk.append(c.patient_id)
        if c.has_fever:
            fever.append(c.patient_id)
        if c.has_data_quality_issues:
            data_issues.append(c.patient_id)

    return AssessmentResults(
        high_risk_patients=high_risk,
        fever_patients=fever,
        data_quality_issues=data_issues,
    )


def summarize(classifications: Sequence[PatientClassification]) -> PatientSummary:
    return PatientSummary(
        total_patients=len(classifications),
        high_risk_count=sum(1 for c in classifications if c.is_high_risk),
        fever_count=sum(1 for c in classifications if c.has_fever),
        data_quality_count=sum(1 for c in classifications if c.has_data_quality_issues),
    )


def load_classifications(client: AssessmentClient) -> List[PatientClassification]:
    """Fetch the full dataset and classify it. Raises AssessmentError on failure."""
    return classify_patients(client.fetch_all_patients())


def submit_classifications(
    client: AssessmentClient, classifications: Iterable[PatientClassification]
) -> SubmissionResult:
    return client.submit_assessment(generate_assessment_results(classifications))


def describe_error(exc: BaseException) -> str:
    """One line, suitable for showing to a person."""
    if isinstance(exc, RetryExhaustedError):
        if isinstance(exc.last_error, RateLimitError):
            return f"Rate limit exceeded: gave up after {exc.attempts} attempts."
        return f"Service unavailable after {exc.attempts} attempts: {exc.last_error}"
    if isinstance(exc, ClientRequestError):
        if exc.status_code in (401, 403):
            return f"Request rejected ({exc.status_code}); check the API key."
        return f"Request failed: {exc}"
    if isinstance(exc, TransportError):
        return f"Could not reach the server: {exc}"
    if isinstance(exc, ResponseParseError):
        return f"Unexpected response from server: {exc}"
    if isinstance(exc, AssessmentError):
        return str(exc)
    return f"Unexpected error: {exc}"
