"""
Case normalization: standardize timestamps, symptom tags and locations.

Converts raw case rows (from a JSON or CSV export, or a storage query) into
CaseRecord objects that are consistent across the pipeline.

Design:
- Timestamp normalization to timezone-aware datetime
- Symptom normalization (lowercase, trim, deduplicate)
- Location normalization (trim only; case is preserved for display)
- A missing timestamp is tolerated; an unparseable one is not
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional

from surveillance.core.config import config
from surveillance.core.exceptions import DataValidationError
from surveillance.data.schema import CaseRecord

logger = logging.getLogger(__name__)

# Column names used by the storage table and by the CSV export
FIELD_ALIASES = {
    "location": ("location", "mandal", "Mandal"),
    "occurred_at": ("occurred_at", "created_at", "timestamp", "Date"),
    "symptoms": ("symptoms", "symptom_set", "Symptoms"),
    "case_id": ("case_id", "id"),
    "village": ("village", "Village"),
    "district": ("district", "District"),
    "age_group": ("age_group", "Age Group"),
    "gender": ("gender", "Gender"),
    "notes": ("notes", "Notes"),
    "reporter_name": ("reporter_name", "Reporter Name"),
    "phone_number": ("phone_number", "Phone Number"),
}


class NormalizationError(DataValidationError):
    """Raised when case normalization fails."""
    pass


def normalize_timestamp(ts_any: Any) -> Optional[datetime]:
    """
    Normalize a timestamp value to an aware datetime.

    Supports:
    - datetime objects (naive values are taken in the deployment timezone)
    - ISO 8601 strings, with or without offset / fractional seconds
    - Date-time: 2025-02-07 10:30:45
    - Epoch seconds: 1707315045
    - Epoch millis: 1707315045000

    Args:
        ts_any: Timestamp value

    Returns:
        Timezone-aware datetime, or None if the value is missing

    Raises:
        NormalizationError: If a value is present but not recognized
    """
    if ts_any is None:
        return None

    if isinstance(ts_any, datetime):
        if ts_any.tzinfo is None:
            return ts_any.replace(tzinfo=config.tzinfo)
        return ts_any

    ts_str = str(ts_any).strip()
    if not ts_str:
        return None

    try:
        ts_float = float(ts_str)
    except ValueError:
        ts_float = None

    if ts_float is not None:
        # Timestamps before year 3000 are seconds
        if ts_float < 32503680000:
            epoch = ts_float
        else:
            epoch = ts_float / 1000
        try:
            return datetime.fromtimestamp(epoch, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise NormalizationError(f"Epoch timestamp out of range: {ts_str}") from e

    # fromisoformat handles offsets but not a trailing Z on older interpreters
    candidate = ts_str[:-1] + "+00:00" if ts_str.endswith("Z") else ts_str
    try:
        dt = datetime.fromisoformat(candidate)
    except ValueError:
        dt = None

    if dt is None:
        for fmt in ("%Y-%m-%d %H:%M:%S", "%m/%d/%Y"):
            try:
                dt = datetime.strptime(ts_str, fmt)
                break
            except ValueError:
                continue

    if dt is None:
        raise NormalizationError(f"Could not parse timestamp: {ts_str}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=config.tzinfo)
    return dt


def normalize_symptoms(symptoms_any: Any) -> FrozenSet[str]:
    """
    Normalize symptom tags to a set of lowercase keys.

    Accepts a list/tuple/set of strings, or a single string separated by
    ";" or "," (the CSV export joins symptoms with "; ").

    Unknown tags are kept; vocabulary filtering happens downstream.
    """
    if symptoms_any is None:
        return frozenset()

    if isinstance(symptoms_any, str):
        parts: Iterable[Any] = symptoms_any.replace(",", ";").split(";")
    elif isinstance(symptoms_any, (list, tuple, set, frozenset)):
        parts = symptoms_any
    else:
        logger.warning(f"Unsupported symptom value type: {type(symptoms_any)}")
        return frozenset()

    return frozenset(
        str(part).strip().lower()
        for part in parts
        if part is not None and str(part).strip()
    )


def _first_present(raw: Mapping[str, Any], names: Iterable[str]) -> Any:
    for name in names:
        if name in raw and raw[name] not in (None, ""):
            return raw[name]
    return None


def _optional_text(value: Any, max_length: int = 512) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text[:max_length] or None


def normalize_case(raw: Mapping[str, Any]) -> CaseRecord:
    """
    Convert a raw case row into a CaseRecord.

    Args:
        raw: Row from ingestion or a storage query

    Returns:
        CaseRecord (immutable)

    Raises:
        NormalizationError: If the row is not a mapping or its timestamp is invalid
    """
    if not isinstance(raw, Mapping):
        raise NormalizationError(f"Expected mapping, got {type(raw)}")

    try:
        occurred_at = normalize_timestamp(
            _first_present(raw, FIELD_ALIASES["occurred_at"])
        )
    except NormalizationError as e:
        raise NormalizationError(f"Invalid timestamp: {e}") from e

    fields: Dict[str, Any] = {
        name: _optional_text(_first_present(raw, aliases))
        for name, aliases in FIELD_ALIASES.items()
        if name not in ("occurred_at", "symptoms")
    }
    location = fields.pop("location")
    if location is not None:
        location = location[:128]

    return CaseRecord(
        location=location,
        symptoms=normalize_symptoms(_first_present(raw, FIELD_ALIASES["symptoms"])),
        occurred_at=occurred_at,
        **fields,
    )


def normalize_cases(
    rows: Iterable[Mapping[str, Any]]
) -> tuple[list[CaseRecord], int]:
    """
    Normalize multiple raw case rows.

    Returns:
        Tuple of (records, skipped_count)

    Notes:
        - Rows that fail normalization are skipped (logged as warnings)
    """
    records = []
    skipped = 0

    for row in rows:
        try:
            records.append(normalize_case(row))
        except NormalizationError as e:
            logger.warning(f"Skipped case row due to normalization error: {e}")
            skipped += 1
        except ValueError as e:
            # pydantic ValidationError subclasses ValueError
            logger.warning(f"Skipped invalid case row: {e}")
            skipped += 1

    return records, skipped
