"""Domain models for fetched patients and their risk classification."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .common import AssessmentPayload, PatientId


@dataclass(frozen=True)
class PatientRecord:
    """A patient as listed by the upstream API.

    Vitals are kept exactly as received; absent or malformed values are a
    normal state and are only interpreted by the scoring engine.
    """
    patient_id: PatientId
    blood_pressure: Any = None
    temperature: Any = None
    age: Any = None

    @classmethod
    def from_payload(cls, item: Mapping[str, Any]) -> "PatientRecord":
        """Builds a record from one element of a listing batch.

        Raises:
            KeyError: If the item carries no patient_id.
        """
        patient_id = item["patient_id"]
        if patient_id is None:
            raise KeyError("patient_id")
        return cls(
            patient_id=PatientId(str(patient_id)),
            blood_pressure=item.get("blood_pressure"),
            temperature=item.get("temperature"),
            age=item.get("age"),
        )


@dataclass(frozen=True)
class ParsedVitals:
    """Vitals after parsing. None means absent or invalid."""
    systolic: Optional[int]
    diastolic: Optional[int]
    temperature: Optional[float]
    age: Optional[float]


@dataclass(frozen=True)
class RiskAssessment:
    """Scores and classification flags for a single patient."""
    patient_id: PatientId
    vitals: ParsedVitals
    blood_pressure_score: int
    temperature_score: int
    age_score: int

    @property
    def total_score(self) -> int:
        return self.blood_pressure_score + self.temperature_score + self.age_score

    @property
    def is_high_risk(self) -> bool:
        return self.total_score >= 4

    @property
    def has_fever(self) -> bool:
        return self.vitals.temperature is not None and self.vitals.temperature >= 99.6

    @property
    def has_data_quality_issue(self) -> bool:
        v = self.vitals
        return v.systolic is None or v.diastolic is None or v.temperature is None or v.age is None


@dataclass
class AlertLists:
    """The three identifier lists submitted at the end of a run.

    Order follows input order; an identifier may appear in several lists.
    """
    high_risk: List[PatientId] = field(default_factory=list)
    fever: List[PatientId] = field(default_factory=list)
    data_quality: List[PatientId] = field(default_factory=list)

    def to_payload(self) -> AssessmentPayload:
        return AssessmentPayload(
            high_risk_patients=list(self.high_risk),
            fever_patients=list(self.fever),
            data_quality_issues=list(self.data_quality),
        )

    def counts(self) -> Dict[str, int]:
        return {
            "high-risk": len(self.high_risk),
            "fever": len(self.fever),
            "bad data": len(self.data_quality),
        }
