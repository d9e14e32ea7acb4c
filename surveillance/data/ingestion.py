"""
Case ingestion from exported files.

Supports JSON (array or NDJSON) and CSV case exports. Gracefully handles
malformed entries by skipping them and logging warnings. All ingested cases
are returned as raw dictionaries for subsequent normalization.

Design:
- Format detection from the file extension or explicit format
- Iterator-based for memory efficiency with large exports
- Bad rows logged but don't crash the pipeline
- Returns raw dicts, not CaseRecord objects
"""

import csv
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterator, Union

from surveillance.core.exceptions import DataValidationError

logger = logging.getLogger(__name__)


class CaseIngestionError(DataValidationError):
    """Base exception for case ingestion failures."""
    pass


class BaseCaseSource(ABC):
    """
    Abstract base class for case sources.

    Each export format implements this interface.
    """

    def __init__(self, filepath: Union[str, Path], encoding: str = "utf-8"):
        """
        Initialize case source.

        Args:
            filepath: Path to the export file
            encoding: File encoding (default utf-8)

        Raises:
            CaseIngestionError: If file doesn't exist
        """
        self.filepath = Path(filepath)
        self.encoding = encoding

        if not self.filepath.exists():
            raise CaseIngestionError(f"Case file not found: {self.filepath}")

    @abstractmethod
    def ingest(self) -> Iterator[Dict[str, Any]]:
        """
        Ingest cases from source.

        Yields:
            Dict representing a single case row (format-dependent keys)
        """
        pass


class JSONCaseSource(BaseCaseSource):
    """
    Ingests JSON case exports (array of objects or one object per line).

    Example NDJSON:
        {"mandal": "Kavali", "symptoms": ["fever"], "created_at": "2025-02-07T10:30:45Z"}
        {"mandal": "Nellore", "symptoms": ["cough", "rash"], "created_at": "2025-02-07T11:02:10Z"}
    """

    def ingest(self) -> Iterator[Dict[str, Any]]:
        """
        Read JSON cases from file.

        Yields:
            Dict representing a single case

        Notes:
            - Malformed JSON on an NDJSON line is skipped with warning
            - An invalid JSON array is fatal (raises CaseIngestionError)
        """
        try:
            with open(self.filepath, "r", encoding=self.encoding) as f:
                content = f.read().lstrip("\ufeff").strip()

            if content.startswith("["):
                try:
                    rows = json.loads(content)
                except json.JSONDecodeError as e:
                    raise CaseIngestionError(f"Invalid JSON array: {e}") from e

                for idx, row in enumerate(rows):
                    if isinstance(row, dict):
                        yield row
                    else:
                        logger.warning(f"Non-dict entry at index {idx}: {type(row)}")

            else:
                for line_num, line in enumerate(content.split("\n"), start=1):
                    line = line.strip()
                    if not line:
                        continue

                    try:
                        row = json.loads(line)
                    except json.JSONDecodeError:
                        logger.warning(f"Malformed JSON at line {line_num}: {line[:100]}")
                        continue

                    if isinstance(row, dict):
                        yield row
                    else:
                        logger.warning(f"NDJSON line {line_num} not a dict: {type(row)}")

        except CaseIngestionError:
            raise
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading JSON case file {self.filepath}: {e}")
            raise CaseIngestionError(f"Failed to read JSON cases: {e}") from e


class CSVCaseSource(BaseCaseSource):
    """
    Ingests CSV case exports.

    Assumes first row contains headers. Both storage column names
    (mandal, symptoms, created_at) and the admin export headers
    (Mandal, Symptoms, Date) are understood by the normalizer.
    """

    def __init__(
        self,
        filepath: Union[str, Path],
        encoding: str = "utf-8",
        delimiter: str = ","
    ):
        super().__init__(filepath, encoding)
        self.delimiter = delimiter

    def ingest(self) -> Iterator[Dict[str, Any]]:
        """
        Read CSV case file.

        Yields:
            Dict mapping column names to values
        """
        try:
            with open(self.filepath, "r", encoding=self.encoding, newline="") as f:
                reader = csv.DictReader(f, delimiter=self.delimiter)

                if reader.fieldnames is None:
                    raise CaseIngestionError("CSV file is empty")

                reader.fieldnames = [
                    name.lstrip("\ufeff") if isinstance(name, str) else name
                    for name in reader.fieldnames
                ]

                for line_num, row in enumerate(reader, start=2):  # Row 1 is the header
                    if all(v in (None, "") for v in row.values()):
                        logger.warning(f"Empty row at line {line_num}")
                        continue
                    yield row

        except CaseIngestionError:
            raise
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.error(f"Error reading CSV case file {self.filepath}: {e}")
            raise CaseIngestionError(f"Failed to read CSV cases: {e}") from e


def ingest_cases(
    filepath: Union[str, Path],
    format: str = "auto"
) -> Iterator[Dict[str, Any]]:
    """
    Convenience function to ingest cases from a file.

    Args:
        filepath: Path to case export
        format: "json", "csv", or "auto" for detection by extension

    Yields:
        Raw case dict

    Raises:
        CaseIngestionError: If file not found or format unsupported
    """
    filepath = Path(filepath)

    if format == "auto":
        suffix = filepath.suffix.lower()
        if suffix in (".json", ".ndjson", ".jsonl"):
            format = "json"
        elif suffix == ".csv":
            format = "csv"
        else:
            raise CaseIngestionError(f"Cannot detect format for: {filepath.name}")

    if format == "json":
        source: BaseCaseSource = JSONCaseSource(filepath)
    elif format == "csv":
        source = CSVCaseSource(filepath)
    else:
        raise CaseIngestionError(f"Unknown format: {format}")

    yield from source.ingest()
