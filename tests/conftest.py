"""
Pytest configuration and shared fixtures.

Provides a fixed evaluation instant, a case factory and sample case data for
unit and integration tests.
"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List
import pandas as pd

from surveillance.data.schema import CaseRecord

# Friday 2025-02-07, mid-afternoon UTC; the trailing window is 02-01 .. 02-07
AS_OF = datetime(2025, 2, 7, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def as_of() -> datetime:
    """The instant all tests evaluate "today" against."""
    return AS_OF


@pytest.fixture
def make_case() -> Callable[..., CaseRecord]:
    """
    Factory for CaseRecord objects.
    
    days_ago counts back from AS_OF's calendar day; the time of day is 10:00 UTC.
    
    Returns:
        Callable(location, symptoms, days_ago=0, **extra) -> CaseRecord
    """
    def _make(location, symptoms, days_ago: int = 0, **extra) -> CaseRecord:
        occurred_at = AS_OF.replace(hour=10) - timedelta(days=days_ago)
        return CaseRecord(
            location=location,
            symptoms=frozenset(symptoms),
            occurred_at=occurred_at,
            **extra,
        )
    return _make


@pytest.fixture
def sample_case_rows() -> List[Dict[str, Any]]:
    """
    Raw case rows in the storage column layout.
    
    Generates a week of reports across three mandals with a fever cluster
    in Kavali on the last day.
    
    Returns:
        List[Dict]: rows with keys mandal, village, district, symptoms, created_at, ...
    """
    rows = []
    mandals = ["Kavali", "Nellore", "Atmakur"]
    for day in range(7):
        created = AS_OF.replace(hour=9) - timedelta(days=6 - day)
        for idx, mandal in enumerate(mandals):
            rows.append({
                "id": f"case-{day}-{idx}",
                "mandal": mandal,
                "village": f"{mandal} Rural",
                "district": "SPSR Nellore",
                "age_group": "19-45",
                "gender": "female" if idx % 2 else "male",
                "symptoms": ["fever"] if idx != 1 else ["cough", "fever"],
                "notes": "",
                "reporter_name": f"ASHA {idx}",
                "phone_number": f"98480{idx:05d}",
                "created_at": created.isoformat(),
            })
    # Spike: nine more fever cases in Kavali today
    for extra in range(9):
        rows.append({
            "id": f"spike-{extra}",
            "mandal": "Kavali",
            "village": "Kavali Town",
            "district": "SPSR Nellore",
            "symptoms": ["fever", "vomiting"],
            "created_at": AS_OF.replace(hour=11, minute=extra).isoformat(),
        })
    return rows


@pytest.fixture
def sample_case_dataframe(sample_case_rows) -> pd.DataFrame:
    """
    Sample case rows exploded to one row per (case, symptom).
    
    Convenience fixture for cross-checking aggregation against pandas.
    
    Returns:
        pd.DataFrame: columns mandal, symptom, day
    """
    df = pd.DataFrame(sample_case_rows)
    df = df.explode("symptoms").rename(columns={"symptoms": "symptom"})
    df["day"] = pd.to_datetime(df["created_at"], utc=True).dt.date
    return df[["mandal", "symptom", "day"]]


def pytest_configure(config):
    """
    Pytest hook for custom configuration.
    
    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
