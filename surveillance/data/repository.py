"""
Storage collaborator boundary.

The surveillance core never queries storage itself: the monitoring service
asks a CaseRepository for every record reported at or after the start of the
trend window, then hands the snapshot to the aggregator and detector.

Implementations:
- InMemoryCaseRepository: holds an already-loaded list (tests, embedding)
- FileCaseRepository: reads a JSON or CSV case export on each fetch
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Union

from surveillance.core.config import config
from surveillance.core.exceptions import CaseFetchError
from surveillance.data.ingestion import CaseIngestionError, ingest_cases
from surveillance.data.normalizers import normalize_cases
from surveillance.data.schema import CaseRecord

logger = logging.getLogger(__name__)


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=config.tzinfo)


def _recent(records: Iterable[CaseRecord], since: datetime) -> List[CaseRecord]:
    since = _aware(since)
    recent = [
        r for r in records
        if r.occurred_at is not None and _aware(r.occurred_at) >= since
    ]
    recent.sort(key=lambda r: _aware(r.occurred_at))
    return recent


class CaseRepository(ABC):
    """
    Source of case records for a trailing window.
    """

    @abstractmethod
    async def fetch_recent_cases(self, window_start: datetime) -> List[CaseRecord]:
        """
        Return all records with occurred_at >= window_start.

        Records are returned in ascending occurred_at order. Implementations
        raise CaseFetchError when storage cannot be read.
        """


class InMemoryCaseRepository(CaseRepository):
    """Repository over a list of records held in memory."""

    def __init__(self, records: Iterable[CaseRecord] = ()):
        self._records = list(records)

    def add(self, record: CaseRecord) -> None:
        self._records.append(record)

    async def fetch_recent_cases(self, window_start: datetime) -> List[CaseRecord]:
        return _recent(self._records, window_start)


class FileCaseRepository(CaseRepository):
    """
    Repository backed by a case export file.

    The file is re-read on every fetch so that a refreshed export is picked
    up without restarting. Reading happens in a worker thread.
    """

    def __init__(self, path: Union[str, Path], format: str = "auto"):
        self.path = Path(path)
        self.format = format

    def _load(self) -> List[CaseRecord]:
        try:
            rows = list(ingest_cases(self.path, format=self.format))
        except CaseIngestionError as e:
            raise CaseFetchError(str(e)) from e

        records, skipped = normalize_cases(rows)
        if skipped:
            logger.warning(f"Skipped {skipped} of {len(rows)} rows from {self.path}")
        return records

    async def fetch_recent_cases(self, window_start: datetime) -> List[CaseRecord]:
        records = await asyncio.to_thread(self._load)
        return _recent(records, window_start)
