"""
Data module: Case ingestion, normalization, storage access and trend aggregation.

Responsible for converting exported or fetched case reports into clean,
immutable records and for the per-day symptom table used by trend charts.
Pipeline:

    Case export (JSON/CSV) or storage query
        ↓
    Ingestion (surveillance/data/ingestion.py)
        ↓
    Normalization (surveillance/data/normalizers.py) → CaseRecord
        ↓
    Repository (surveillance/data/repository.py) → window snapshot
        ↓
    Aggregation (surveillance/data/aggregation.py) → DailySymptomCounts
"""

from surveillance.data.aggregation import (
    aggregate_symptom_trends,
    calendar_day,
    filter_cases,
    trends_to_series,
    window_days,
    window_start,
)
from surveillance.data.ingestion import (
    CaseIngestionError,
    CSVCaseSource,
    JSONCaseSource,
    ingest_cases,
)
from surveillance.data.normalizers import (
    NormalizationError,
    normalize_case,
    normalize_cases,
)
from surveillance.data.repository import (
    CaseRepository,
    FileCaseRepository,
    InMemoryCaseRepository,
)
from surveillance.data.schema import CaseRecord, DailySymptomCounts

__all__ = [
    # Schema
    "CaseRecord",
    "DailySymptomCounts",
    
    # Ingestion
    "ingest_cases",
    "JSONCaseSource",
    "CSVCaseSource",
    "CaseIngestionError",
    
    # Normalization
    "normalize_case",
    "normalize_cases",
    "NormalizationError",
    
    # Storage
    "CaseRepository",
    "InMemoryCaseRepository",
    "FileCaseRepository",
    
    # Aggregation
    "aggregate_symptom_trends",
    "calendar_day",
    "filter_cases",
    "trends_to_series",
    "window_days",
    "window_start",
]
