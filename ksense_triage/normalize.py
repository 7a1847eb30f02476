"""
Turn the loosely typed vital-sign fields of a Patient into readings.

The API hands back age/temperature as numbers, numeric strings, junk strings
or null, and blood pressure as "S/D" strings in various states of repair.
Each field is parsed exactly once here into a {valid, value} pair; scoring and
the quality gate only ever look at the readings.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from .models import Patient


@dataclass(frozen=True)
class FieldReading:
    valid: bool
    value: Optional[float] = None


@dataclass(frozen=True)
class BloodPressureReading:
    valid: bool
    systolic: Optional[float] = None
    diastolic: Optional[float] = None


@dataclass(frozen=True)
class NormalizedVitals:
    blood_pressure: BloodPressureReading
    temperature: FieldReading
    age: FieldReading


INVALID = FieldReading(valid=False)
INVALID_BP = BloodPressureReading(valid=False)

_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(raw: Any) -> Optional[float]:
    """
    Read a number the way the feed's producers write them.

    Numbers (booleans included, as 1/0) pass through. Strings are read up to
    the end of their leading numeric part, so "98.6F" and "45 years" are
    98.6 and 45; a string with no leading number is unreadable. NaN never
    counts as a reading.
    """
    if raw is None:
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        match = _LEADING_NUMBER.match(raw)
        if not match:
            return None
        value = float(match.group(0))
    else:
        return None
    if math.isnan(value):
        return None
    return value


def normalize_number(raw: Any) -> FieldReading:
    value = parse_number(raw)
    if value is None:
        return INVALID
    return FieldReading(valid=True, value=value)


def normalize_temperature(raw: Any) -> FieldReading:
    return normalize_number(raw)


def normalize_age(raw: Any) -> FieldReading:
    return normalize_number(raw)


def normalize_blood_pressure(raw: Any) -> BloodPressureReading:
    if not isinstance(raw, str) or not raw.strip():
        return INVALID_BP
    parts = raw.split("/")
    if len(parts) != 2:
        return INVALID_BP
    s, d = (p.strip() for p in parts)
    if not s or not d:
        return INVALID_BP
    systolic, diastolic = parse_number(s), parse_number(d)
    if systolic is None or diastolic is None:
        return INVALID_BP
    return BloodPressureReading(valid=True, systolic=systolic, diastolic=diastolic)


def normalize_vitals(patient: Patient) -> NormalizedVitals:
    return NormalizedVitals(
        blood_pressure=normalize_blood_pressure(patient.blood_pressure),
        temperature=normalize_temperature(patient.temperature),
        age=normalize_age(patient.age),
    )
