"""
Data contracts shared across the package.

Wire payloads from the assessment API are camelCase dicts; everything here is
built from them once, at the client boundary, and is immutable afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .errors import ResponseParseError

RawNumber = Union[int, float, str, None]

CATEGORIES = ("high_risk", "fever", "data_quality")


def _require_dict(payload: Any, what: str) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ResponseParseError(
            f"{what}: expected a JSON object, got {type(payload).__name__}"
        )
    return payload


@dataclass(frozen=True)
class Patient:
    patient_id: str
    name: Optional[str] = None
    age: RawNumber = None
    gender: Optional[str] = None
    blood_pressure: Optional[str] = None
    temperature: RawNumber = None
    visit_date: Optional[str] = None
    diagnosis: Optional[str] = None
    medications: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, payload: Any) -> "Patient":
        payload = _require_dict(payload, "patient record")
        pid = payload.get("patient_id")
        if pid is None or pid == "":
            raise ResponseParseError(f"patient record without patient_id: {payload!r}")
        return cls(
            patient_id=str(pid),
            name=payload.get("name"),
            age=payload.get("age"),
            gender=payload.get("gender"),
            # kept raw; the normalizer decides what a usable reading is
            blood_pressure=payload.get("blood_pressure"),
            temperature=payload.get("temperature"),
            visit_date=payload.get("visit_date"),
            diagnosis=payload.get("diagnosis"),
            medications=payload.get("medications"),
            raw=dict(payload),
        )


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool = False
    has_previous: bool = False

    @classmethod
    def from_dict(cls, payload: Any) -> "Pagination":
        payload = _require_dict(payload, "pagination")
        try:
            return cls(
                page=int(payload.get("page", 1)),
                limit=int(payload.get("limit", 0)),
                total=int(payload.get("total", 0)),
                total_pages=int(payload["totalPages"]),
                has_next=bool(payload.get("hasNext", False)),
                has_previous=bool(payload.get("hasPrevious", False)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ResponseParseError(f"unusable pagination block {payload!r}: {e}") from e


@dataclass(frozen=True)
class ResponseMetadata:
    timestamp: Optional[str] = None
    version: Optional[str] = None
    request_id: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> "ResponseMetadata":
        if not isinstance(payload, dict):
            return cls()
        return cls(
            timestamp=payload.get("timestamp"),
            version=payload.get("version"),
            request_id=payload.get("requestId"),
        )


@dataclass(frozen=True)
class PatientsPage:
    patients: List[Patient]
    pagination: Pagination
    metadata: ResponseMetadata

    @classmethod
    def from_dict(cls, payload: Any) -> "PatientsPage":
        payload = _require_dict(payload, "patients page")
        data = payload.get("data")
        if not isinstance(data, list):
            raise ResponseParseError(f"patients page has no 'data' list: {payload!r}")
        return cls(
            patients=[Patient.from_dict(item) for item in data],
            pagination=Pagination.from_dict(payload.get("pagination")),
            metadata=ResponseMetadata.from_dict(payload.get("metadata")),
        )


@dataclass(frozen=True)
class RiskScore:
    blood_pressure: int
    temperature: int
    age: int

    @property
    def total(self) -> int:
        return self.blood_pressure + self.temperature + self.age


@dataclass(frozen=True)
class AssessmentResults:
    high_risk_patients: List[str] = field(default_factory=list)
    fever_patients: List[str] = field(default_factory=list)
    data_quality_issues: List[str] = field(default_factory=list)

    def to_payload(self) -> Dict[str, List[str]]:
        return {
            "high_risk_patients": list(self.high_risk_patients),
            "fever_patients": list(self.fever_patients),
            "data_quality_issues": list(self.data_quality_issues),
        }

    def counts(self) -> Dict[str, int]:
        return {k: len(v) for k, v in self.to_payload().items()}


@dataclass(frozen=True)
class PatientSummary:
    total_patients: int
    high_risk_count: int
    fever_count: int
    data_quality_count: int


@dataclass(frozen=True)
class CategoryBreakdown:
    score: float = 0
    max: float = 0
    correct: int = 0
    submitted: int = 0
    matches: int = 0

    @classmethod
    def from_dict(cls, payload: Any) -> "CategoryBreakdown":
        if not isinstance(payload, dict):
            return cls()
        return cls(
            score=payload.get("score", 0),
            max=payload.get("max", 0),
            correct=payload.get("correct", 0),
            submitted=payload.get("submitted", 0),
            matches=payload.get("matches", 0),
        )


@dataclass(frozen=True)
class SubmissionResult:
    """
    Scored answer from POST /submit-assessment.

    The server nests most fields under "results"; missing optional keys fall
    back to neutral defaults so an older server version still parses.
    """

    success: bool
    message: str = ""
    score: float = 0
    percentage: float = 0
    status: str = ""
    breakdown: Dict[str, CategoryBreakdown] = field(default_factory=dict)
    strengths: List[str] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)
    attempt_number: Optional[int] = None
    remaining_attempts: Optional[int] = None
    is_personal_best: bool = False
    can_resubmit: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, payload: Any) -> "SubmissionResult":
        payload = _require_dict(payload, "submission response")
        results = payload.get("results") or {}
        if not isinstance(results, dict):
            raise ResponseParseError(f"submission 'results' is not an object: {results!r}")
        breakdown = results.get("breakdown") or {}
        feedback = results.get("feedback") or {}
        return cls(
            success=bool(payload.get("success", False)),
            message=payload.get("message", "") or "",
            score=results.get("score", 0),
            percentage=results.get("percentage", 0),
            status=results.get("status", "") or "",
            breakdown={
                name: CategoryBreakdown.from_dict(breakdown.get(name))
                for name in CATEGORIES
                if isinstance(breakdown, dict) and name in breakdown
            },
            strengths=list(feedback.get("strengths") or []) if isinstance(feedback, dict) else [],
            issues=list(feedback.get("issues") or []) if isinstance(feedback, dict) else [],
            attempt_number=results.get("attempt_number"),
            remaining_attempts=results.get("remaining_attempts"),
            is_personal_best=bool(results.get("is_personal_best", False)),
            can_resubmit=bool(results.get("can_resubmit", False)),
            raw=dict(payload),
        )
