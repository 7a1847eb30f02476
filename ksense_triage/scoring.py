"""
Risk rubric, quality gate and per-patient classification.

Rubric (fixed, not clinically derived):

    blood pressure  max(systolic tier, diastolic tier)
        systolic   <120: 1   120-129: 2   130-139: 3   >=140: 4
        diastolic   <80: 1     80-89: 3     >=90: 4
    temperature     <=99.5: 0   99.6-100.9: 1   >=101.0: 2
    age             <40: 1   40-65: 1   >65: 2

Bands are closed; a reading that lands between two of them (systolic 129.5,
temperature 100.95) scores 0 on that axis. An unreadable field scores 0 on its axis. That path is kept separate from
the quality gate; a record with any unreadable field is flagged for data
quality and never counted as febrile or high risk.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .models import Patient, RiskScore
from .normalize import (
    BloodPressureReading,
    FieldReading,
    NormalizedVitals,
    normalize_vitals,
)

FEVER_THRESHOLD = 99.6
HIGH_FEVER_THRESHOLD = 101.0
HIGH_RISK_THRESHOLD = 4
SENIOR_AGE = 65


def systolic_tier(systolic: float) -> int:
    # closed bands; readings between them (129.5, 139.5) fall through to 0
    if systolic < 120:
        return 1
    if 120 <= systolic <= 129:
        return 2
    if 130 <= systolic <= 139:
        return 3
    if systolic >= 140:
        return 4
    return 0


def diastolic_tier(diastolic: float) -> int:
    # there is no tier 2 on the diastolic side
    if diastolic < 80:
        return 1
    if 80 <= diastolic <= 89:
        return 3
    if diastolic >= 90:
        return 4
    return 0


def blood_pressure_risk(reading: BloodPressureReading) -> int:
    if not reading.valid:
        return 0
    return max(systolic_tier(reading.systolic), diastolic_tier(reading.diastolic))


def temperature_risk(reading: FieldReading) -> int:
    if not reading.valid:
        return 0
    t = reading.value
    if t <= 99.5:
        return 0
    if FEVER_THRESHOLD <= t <= 100.9:
        return 1
    if t >= HIGH_FEVER_THRESHOLD:
        return 2
    # 99.5 < t < 99.6 and 100.9 < t < 101.0
    return 0


def age_risk(reading: FieldReading) -> int:
    if not reading.valid:
        return 0
    a = reading.value
    # under-40 and 40-65 are both 1
    if a < 40:
        return 1
    if 40 <= a <= SENIOR_AGE:
        return 1
    if a > SENIOR_AGE:
        return 2
    return 0


def _vitals(source: Union[Patient, NormalizedVitals]) -> NormalizedVitals:
    if isinstance(source, NormalizedVitals):
        return source
    return normalize_vitals(source)


def calculate_risk_score(source: Union[Patient, NormalizedVitals]) -> RiskScore:
    vitals = _vitals(source)
    return RiskScore(
        blood_pressure=blood_pressure_risk(vitals.blood_pressure),
        temperature=temperature_risk(vitals.temperature),
        age=age_risk(vitals.age),
    )


def has_data_quality_issues(source: Union[Patient, NormalizedVitals]) -> bool:
    vitals = _vitals(source)
    bp_invalid = not vitals.blood_pressure.valid
    temp_invalid = not vitals.temperature.valid
    age_invalid = not vitals.age.valid
    return bp_invalid or temp_invalid or age_invalid


def has_fever(reading: FieldReading) -> bool:
    return reading.valid and reading.value >= FEVER_THRESHOLD


@dataclass(frozen=True)
class PatientClassification:
    patient: Patient
    vitals: NormalizedVitals
    risk_score: RiskScore
    has_data_quality_issues: bool
    has_fever: bool
    is_high_risk: bool

    @property
    def patient_id(self) -> str:
        return self.patient.patient_id


def classify_patient(patient: Patient) -> PatientClassification:
    """
    Derive the full verdict for one record.

    Pure: the same Patient always yields an equal PatientClassification.
    """
    vitals = normalize_vitals(patient)
    risk_score = calculate_risk_score(vitals)
    data_issues = has_data_quality_issues(vitals)

    # exclusion rule: flagged records are neither febrile nor high risk
    fever = False if data_issues else has_fever(vitals.temperature)
    high_risk = False if data_issues else risk_score.total >= HIGH_RISK_THRESHOLD

    return PatientClassification(
        patient=patient,
        vitals=vitals,
        risk_score=risk_score,
        has_data_quality_issues=data_issues,
        has_fever=fever,
        is_high_risk=high_risk,
    )
