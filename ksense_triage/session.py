"""
Request state for interactive shells.

The classification logic is stateless; whatever drives it (the CLI here, a
dashboard elsewhere) keeps track of where a load or a submission is through
an AssessmentSession. Each request moves IDLE -> LOADING -> SUCCESS | ERROR.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import List, Optional

from .analysis import (
    describe_error,
    generate_assessment_results,
    load_classifications,
    submit_classifications,
    summarize,
)
from .client import AssessmentClient
from .errors import AssessmentError
from .models import AssessmentResults, PatientSummary, SubmissionResult
from .scoring import PatientClassification

LOGGER = logging.getLogger(__name__)


class RequestStatus(Enum):
    IDLE = auto()
    LOADING = auto()
    SUCCESS = auto()
    ERROR = auto()


class AssessmentSession:
    def __init__(self, client: AssessmentClient):
        self.client = client
        self.load_status = RequestStatus.IDLE
        self.submit_status = RequestStatus.IDLE
        self.classifications: List[PatientClassification] = []
        self.submission: Optional[SubmissionResult] = None
        self.error_message: Optional[str] = None

    def load(self) -> bool:
        """Fetch and classify everything, replacing any earlier classifications."""
        self.load_status = RequestStatus.LOADING
        self.error_message = None
        try:
            classifications = load_classifications(self.client)
        except AssessmentError as e:
            LOGGER.error("loading patients failed: %s", e)
            self.classifications = []
            self.error_message = describe_error(e)
            self.load_status = RequestStatus.ERROR
            return False
        self.classifications = classifications
        self.load_status = RequestStatus.SUCCESS
        return True

    def submit(self) -> bool:
        self.error_message = None
        if not self.classifications:
            self.error_message = "No classified patients to submit; load the data first."
            self.submit_status = RequestStatus.ERROR
            return False
        self.submit_status = RequestStatus.LOADING
        try:
            self.submission = submit_classifications(self.client, self.classifications)
        except AssessmentError as e:
            LOGGER.error("submission failed: %s", e)
            self.submission = None
            self.error_message = describe_error(e)
            self.submit_status = RequestStatus.ERROR
            return False
        self.submit_status = RequestStatus.SUCCESS
        return True

    @property
    def summary(self) -> PatientSummary:
        return summarize(self.classifications)

    @property
    def results(self) -> AssessmentResults:
        return generate_assessment_results(self.classifications)
