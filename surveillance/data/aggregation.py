"""
Calendar-day aggregation for case reports.

Buckets case records into the trailing window of calendar days and counts
symptom mentions per day across all locations. Produces a gap-free table
suitable for trend charts.

Design:
- Fixed trailing window (default 7 days, inclusive of today)
- Days are calendar dates in the deployment timezone; time of day is discarded
- Every day in the window is seeded with zero counts for every symptom
- Unknown symptom tags and out-of-window records are ignored
"""

import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from surveillance.core.config import config
from surveillance.core.exceptions import ConfigurationError
from surveillance.data.schema import CaseRecord, DailySymptomCounts

logger = logging.getLogger(__name__)


def calendar_day(ts: datetime, tz: Optional[tzinfo] = None) -> date:
    """
    Calendar day of a timestamp in the deployment timezone.

    Naive timestamps are interpreted in the deployment timezone.

    Example with tz=Asia/Kolkata (UTC+05:30):
    - 2025-02-07T20:00:00Z -> 2025-02-08
    - 2025-02-07T10:00:00Z -> 2025-02-07
    """
    tz = tz or config.tzinfo
    if ts.tzinfo is None:
        return ts.date()
    return ts.astimezone(tz).date()


def _now(tz: tzinfo) -> datetime:
    return datetime.now(timezone.utc).astimezone(tz)


def window_days(
    as_of: Optional[datetime] = None,
    days: Optional[int] = None,
    tz: Optional[tzinfo] = None,
) -> List[date]:
    """
    Ordered calendar days of the trailing window, oldest first.

    Args:
        as_of: Instant the window is anchored to (default: now)
        days: Window length in days (default from config)
        tz: Timezone defining a calendar day (default from config)

    Returns:
        List of `days` dates ending with today's date
    """
    tz = tz or config.tzinfo
    days = days or config.detection.window_days
    today = calendar_day(as_of or _now(tz), tz)
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def window_start(
    as_of: Optional[datetime] = None,
    days: Optional[int] = None,
    tz: Optional[tzinfo] = None,
) -> datetime:
    """
    Start of the first window day, as an aware datetime.

    This is the lower bound passed to the storage collaborator.
    """
    tz = tz or config.tzinfo
    first_day = window_days(as_of, days, tz)[0]
    return datetime.combine(first_day, time.min, tzinfo=tz)


def aggregate_symptom_trends(
    records: Iterable[CaseRecord],
    as_of: Optional[datetime] = None,
    vocabulary: Optional[Sequence[str]] = None,
    days: Optional[int] = None,
    tz: Optional[tzinfo] = None,
) -> List[DailySymptomCounts]:
    """
    Count symptom mentions per calendar day over the trailing window.

    Args:
        records: Case records (ideally pre-filtered to the window)
        as_of: Instant the window is anchored to (default: now)
        vocabulary: Symptom keys to count (default from config)
        days: Window length (default from config)
        tz: Timezone defining a calendar day (default from config)

    Returns:
        One DailySymptomCounts per window day, oldest first, each holding
        a count for every vocabulary symptom

    Raises:
        ConfigurationError: If an explicit vocabulary is empty

    Notes:
        - Records without a timestamp or outside the window are ignored
        - Symptom tags outside the vocabulary are ignored
    """
    tz = tz or config.tzinfo
    if vocabulary is None:
        vocabulary = config.symptom_vocabulary
    if not vocabulary:
        raise ConfigurationError("Symptom vocabulary must not be empty")

    table: Dict[date, Dict[str, int]] = {
        day: {symptom: 0 for symptom in vocabulary}
        for day in window_days(as_of, days, tz)
    }

    ignored = 0
    for record in records:
        if record.occurred_at is None:
            ignored += 1
            continue

        counts = table.get(calendar_day(record.occurred_at, tz))
        if counts is None:
            ignored += 1
            continue

        for symptom in record.symptoms:
            if symptom in counts:
                counts[symptom] += 1

    if ignored:
        logger.debug(f"Ignored {ignored} records outside the trend window")

    return [DailySymptomCounts(date=day, counts=counts) for day, counts in table.items()]


def trends_to_series(trends: Sequence[DailySymptomCounts]) -> Dict[str, List[int]]:
    """
    Pivot a trend table into one count series per symptom, in day order.

    Example:
        {"fever": [0, 2, 1, 0, 0, 3, 1], "cough": [...], ...}
    """
    series: Dict[str, List[int]] = {}
    for row in trends:
        for symptom, count in row.counts.items():
            series.setdefault(symptom, []).append(count)
    return series


def filter_cases(
    records: Iterable[CaseRecord],
    location: Optional[str] = None,
    symptom: Optional[str] = None,
) -> List[CaseRecord]:
    """
    Filter case records for the admin listing.

    Args:
        records: Case records
        location: Case-insensitive substring of the location (optional)
        symptom: Exact symptom key the case must report (optional)

    Returns:
        Matching records, in input order

    Notes:
        - Location matching here is a substring search for browsing;
          alert filtering uses exact matching instead
    """
    needle = location.lower() if location else None
    matched = []
    for record in records:
        if needle and (record.location is None or needle not in record.location.lower()):
            continue
        if symptom and not record.has_symptom(symptom):
            continue
        matched.append(record)
    return matched
