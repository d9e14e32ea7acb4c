"""
Alert consumers for the admin view: outbreak flagging and CSV export.
"""

from __future__ import annotations

import csv
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, TextIO

from surveillance.anomaly import OutbreakAlert
from surveillance.core.config import config
from surveillance.data.aggregation import calendar_day
from surveillance.data.schema import CaseRecord

logger = logging.getLogger("backend.export")

CSV_HEADERS = [
    "Date",
    "Village",
    "Mandal",
    "District",
    "Age Group",
    "Gender",
    "Symptoms",
    "Notes",
    "Reporter Name",
    "Phone Number",
    "Status",
]

OUTBREAK_STATUS = "OUTBREAK"
NORMAL_STATUS = "Normal"


def is_outbreak_case(record: CaseRecord, alerts: Iterable[OutbreakAlert]) -> bool:
    """
    True if an alert covers the record's location (ignoring case) and one of its symptoms.
    """
    if not record.location:
        return False
    location = record.location.lower()
    return any(
        alert.location.lower() == location and record.has_symptom(alert.symptom)
        for alert in alerts
    )


def _row(record: CaseRecord, flagged: bool) -> List[str]:
    day = calendar_day(record.occurred_at).isoformat() if record.occurred_at else ""
    return [
        day,
        record.village or "",
        record.location or "",
        record.district or "",
        record.age_group or "",
        record.gender or "",
        "; ".join(sorted(record.symptoms)),
        record.notes or "",
        record.reporter_name or "",
        record.phone_number or "",
        OUTBREAK_STATUS if flagged else NORMAL_STATUS,
    ]


def export_cases_csv(
    records: Iterable[CaseRecord],
    alerts: Iterable[OutbreakAlert],
    output: TextIO,
) -> int:
    """
    Write case records as CSV with an outbreak status column.

    Args:
        records: Cases to export, in the order they should appear
        alerts: Current alerts used to flag rows
        output: Text stream opened with newline=""

    Returns:
        Number of data rows written
    """
    alerts = list(alerts)
    writer = csv.writer(output, quoting=csv.QUOTE_ALL)
    writer.writerow(CSV_HEADERS)

    rows = 0
    flagged = 0
    for record in records:
        is_flagged = is_outbreak_case(record, alerts)
        writer.writerow(_row(record, is_flagged))
        rows += 1
        flagged += int(is_flagged)

    logger.info(f"Exported {rows} cases ({flagged} flagged as outbreak)")
    return rows


def export_filename(as_of: Optional[datetime] = None) -> str:
    """File name used for downloads, e.g. outbreak_reports_2025-02-07.csv."""
    as_of = as_of or datetime.now(timezone.utc)
    return f"outbreak_reports_{calendar_day(as_of, config.tzinfo).isoformat()}.csv"
