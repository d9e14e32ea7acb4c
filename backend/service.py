"""
Backend service layer for outbreak monitoring.

Fetches the trailing window of case records from a repository and runs the
trend aggregator and outbreak engine over that snapshot. A failed fetch is
logged and degrades to an empty result instead of propagating.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from pydantic import BaseModel, Field

from surveillance.anomaly import OutbreakAlert, OutbreakEngine
from surveillance.core.config import config
from surveillance.data.aggregation import aggregate_symptom_trends, calendar_day, window_start
from surveillance.data.repository import CaseRepository
from surveillance.data.schema import CaseRecord, DailySymptomCounts

logger = logging.getLogger("backend.service")


class DashboardSummary(BaseModel):
    """
    Headline numbers for the dashboard.

    Fields:
    - today_cases: cases reported on the evaluated day
    - window_cases: cases reported in the trailing window
    - alerts: current outbreak alerts
    """

    today_cases: int = Field(0, ge=0)
    window_cases: int = Field(0, ge=0)
    alerts: List[OutbreakAlert] = Field(default_factory=list)

    @property
    def alert_count(self) -> int:
        return len(self.alerts)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class OutbreakMonitor:
    """
    On-demand outbreak and trend queries over a case repository.

    - One fetch per call; no caching between calls.
    - Fetch failures are logged and yield empty results.
    - last_error holds the most recent fetch failure, cleared on success.
    """

    repository: CaseRepository
    engine: OutbreakEngine = field(default_factory=OutbreakEngine)
    clock: Callable[[], datetime] = _utcnow
    last_error: Optional[str] = field(default=None, init=False)

    async def _fetch(self, as_of: datetime) -> Optional[List[CaseRecord]]:
        since = window_start(as_of, self.engine.window_days, self.engine.tz)
        try:
            records = await self.repository.fetch_recent_cases(since)
        except Exception as exc:
            logger.exception("Case fetch failed for window starting %s: %s", since.isoformat(), exc)
            self.last_error = str(exc) or exc.__class__.__name__
            return None

        self.last_error = None
        logger.debug("Fetched %d cases since %s", len(records), since.isoformat())
        return records

    async def check_outbreaks(
        self, location: Optional[str] = None, as_of: Optional[datetime] = None
    ) -> List[OutbreakAlert]:
        """Current outbreak alerts, optionally for one location."""
        as_of = as_of or self.clock()
        records = await self._fetch(as_of)
        if records is None:
            return []
        return self.engine.detect(records, as_of=as_of, location=location)

    async def symptom_trends(self, as_of: Optional[datetime] = None) -> List[DailySymptomCounts]:
        """Per-day symptom counts for the trailing window (all zeros on failure)."""
        as_of = as_of or self.clock()
        records = await self._fetch(as_of)
        return aggregate_symptom_trends(
            records or [],
            as_of=as_of,
            vocabulary=config.symptom_vocabulary,
            days=self.engine.window_days,
            tz=self.engine.tz,
        )

    async def dashboard_summary(self, as_of: Optional[datetime] = None) -> DashboardSummary:
        """Case counts and alerts from a single fetch."""
        as_of = as_of or self.clock()
        records = await self._fetch(as_of)
        if records is None:
            return DashboardSummary()

        today = calendar_day(as_of, self.engine.tz)
        today_cases = sum(
            1 for r in records
            if r.occurred_at is not None and calendar_day(r.occurred_at, self.engine.tz) == today
        )
        return DashboardSummary(
            today_cases=today_cases,
            window_cases=len(records),
            alerts=self.engine.detect(records, as_of=as_of),
        )
