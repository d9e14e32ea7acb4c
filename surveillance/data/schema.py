"""
Canonical case-report schema for the surveillance pipeline.

This module defines the standardized representation of a single case report
after ingestion and normalization, plus the per-day symptom table produced
by trend aggregation. All case sources are converted to CaseRecord before
aggregation or outbreak detection.

Design rationale:
- Records are immutable once fetched
- Only location, symptoms and occurred_at feed the statistics
- The remaining report attributes are carried for listing and CSV export
- Timestamps are timezone-aware after normalization
"""

import datetime as dt
from datetime import datetime
from typing import Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CaseRecord(BaseModel):
    """
    Canonical representation of a single case report.
    
    Attributes:
        location: Administrative sub-division (mandal) the case is attributed to
        symptoms: Set of symptom keys reported for the case
        occurred_at: When the case was reported
        case_id: Identifier assigned by storage (optional)
        village: Village name (optional)
        district: District name (optional)
        age_group: Reporter-selected age bracket (optional)
        gender: Reporter-selected gender (optional)
        notes: Free text notes (optional)
        reporter_name: Field worker name (optional)
        phone_number: Field worker phone number (optional)
    
    Notes:
        - location and occurred_at may be missing; such records are ignored
          by aggregation and detection rather than rejected here
        - symptoms are plain strings; vocabulary membership is checked by
          consumers, not by the model
    """
    
    model_config = ConfigDict(frozen=True)
    
    location: Optional[str] = Field(
        default=None,
        max_length=128,
        description="Administrative sub-division name"
    )
    
    symptoms: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Reported symptom keys"
    )
    
    occurred_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp of the report"
    )
    
    case_id: Optional[str] = None
    village: Optional[str] = None
    district: Optional[str] = None
    age_group: Optional[str] = None
    gender: Optional[str] = None
    notes: Optional[str] = None
    reporter_name: Optional[str] = None
    phone_number: Optional[str] = None
    
    @field_validator("location")
    @classmethod
    def _strip_location(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None
    
    def has_symptom(self, symptom: str) -> bool:
        """True if the record reports the given symptom key."""
        return symptom in self.symptoms


class DailySymptomCounts(BaseModel):
    """
    Symptom counts for one calendar day across all locations.
    
    Produced by trend aggregation; one row per day in the window, with an
    entry for every symptom in the vocabulary (zero when nothing was reported).
    
    Attributes:
        date: Calendar day
        counts: Mapping of symptom key -> number of cases reporting it
    """
    
    date: dt.date
    counts: Dict[str, int] = Field(default_factory=dict)
    
    @property
    def total(self) -> int:
        """Sum of symptom mentions on this day."""
        return sum(self.counts.values())
    
    def count(self, symptom: str) -> int:
        return self.counts.get(symptom, 0)
