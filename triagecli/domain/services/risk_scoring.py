"""Deterministic risk scoring for patient vitals.

Pure functions only: no I/O and no shared state. Each patient gets three
independent sub-scores (blood pressure 0-3, temperature 0-2, age 0-2) whose
sum is the composite risk score used for the high-risk flag.

Blood pressure bands are evaluated in priority order and the first match
wins, so e.g. 125/85 scores 2 and 125/75 scores 1, while a reading that
matches no band scores 0.
"""

import math
import re
from typing import Any, Iterable, Optional, Tuple

from triagecli.domain.models.patient import (
    AlertLists,
    ParsedVitals,
    PatientRecord,
    RiskAssessment,
)

BLOOD_PRESSURE_PATTERN = re.compile(r"([0-9]+)\s*/\s*([0-9]+)")
DECIMAL_PATTERN = re.compile(r"\s*[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?\s*")

HIGH_RISK_THRESHOLD = 4
FEVER_THRESHOLD = 99.6
HIGH_FEVER_THRESHOLD = 101.0


def parse_blood_pressure(value: Any) -> Tuple[Optional[int], Optional[int]]:
    """Parses a "systolic/diastolic" reading.

    Returns:
        (systolic, diastolic), or (None, None) for anything that is not a
        string made of two integers separated by a slash.
    """
    if not isinstance(value, str):
        return None, None
    match = BLOOD_PRESSURE_PATTERN.fullmatch(value)
    if not match:
        return None, None
    return int(match.group(1)), int(match.group(2))


def coerce_number(value: Any) -> Optional[float]:
    """Coerces a vital to a finite float, or None when that is not possible.

    Strings must be plain ASCII decimal literals, so "98_6" and "nan" are
    rejected. Integers too large for a float are treated like infinities.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        if not DECIMAL_PATTERN.fullmatch(value):
            return None
    elif not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def parse_vitals(record: PatientRecord) -> ParsedVitals:
    systolic, diastolic = parse_blood_pressure(record.blood_pressure)
    return ParsedVitals(
        systolic=systolic,
        diastolic=diastolic,
        temperature=coerce_number(record.temperature),
        age=coerce_number(record.age),
    )


def blood_pressure_score(systolic: Optional[int], diastolic: Optional[int]) -> int:
    if systolic is None or diastolic is None:
        return 0
    if systolic >= 140 or diastolic >= 90:
        return 3
    if systolic >= 130 or diastolic >= 80:
        return 2
    if systolic >= 120 and diastolic < 80:
        return 1
    return 0


def temperature_score(temperature: Optional[float]) -> int:
    if temperature is None:
        return 0
    if temperature >= HIGH_FEVER_THRESHOLD:
        return 2
    if temperature >= FEVER_THRESHOLD:
        return 1
    return 0


def age_score(age: Optional[float]) -> int:
    if age is None:
        return 0
    if age > 65:
        return 2
    if age >= 40:
        return 1
    return 0


def assess_patient(record: PatientRecord) -> RiskAssessment:
    """Scores one patient. Never raises on bad vitals."""
    vitals = parse_vitals(record)
    return RiskAssessment(
        patient_id=record.patient_id,
        vitals=vitals,
        blood_pressure_score=blood_pressure_score(vitals.systolic, vitals.diastolic),
        temperature_score=temperature_score(vitals.temperature),
        age_score=age_score(vitals.age),
    )


def build_alert_lists(records: Iterable[PatientRecord]) -> AlertLists:
    """Classifies every record into the high-risk, fever and data-quality lists.

    Lists keep input order and are not de-duplicated.
    """
    alerts = AlertLists()
    for record in records:
        assessment = assess_patient(record)
        if assessment.is_high_risk:
            alerts.high_risk.append(record.patient_id)
        if assessment.has_fever:
            alerts.fever.append(record.patient_id)
        if assessment.has_data_quality_issue:
            alerts.data_quality.append(record.patient_id)
    return alerts
