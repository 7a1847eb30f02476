from .analysis import (
    classify_patients,
    describe_error,
    generate_assessment_results,
    load_classifications,
    submit_classifications,
    summarize,
)
from .client import AssessmentClient
from .config import AssessmentConfig
from .errors import AssessmentError, RetryExhaustedError
from .models import AssessmentResults, Patient, PatientSummary, SubmissionResult
from .retry import RetryPolicy
from .scoring import PatientClassification, calculate_risk_score, classify_patient
from .session import AssessmentSession, RequestStatus

__version__ = "0.1.0"
