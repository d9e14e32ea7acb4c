"""
Command-line entry point for symptom surveillance.

Runs the outbreak monitor over a case export file, prints the trend table
and current alerts as JSON, and optionally writes the admin CSV export.

Example:
    python -m backend.main --cases cases.json --location Kavali --export-csv out.csv
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

from backend.export import export_cases_csv, export_filename
from backend.service import OutbreakMonitor
from surveillance.core.config import config
from surveillance.core.logging_config import setup_logging
from surveillance.data.aggregation import filter_cases, trends_to_series
from surveillance.data.normalizers import NormalizationError, normalize_timestamp
from surveillance.data.repository import FileCaseRepository

logger = logging.getLogger("backend")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _parse_as_of(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return normalize_timestamp(value)
    except NormalizationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Symptom trends and outbreak alerts")
    parser.add_argument("--cases", required=True, type=Path, help="JSON or CSV case export")
    parser.add_argument("--format", default="auto", choices=["auto", "json", "csv"])
    parser.add_argument("--location", default=None, help="Only report alerts for this location")
    parser.add_argument("--as-of", default=None, type=_parse_as_of, help="Evaluate as of this instant")
    parser.add_argument("--export-csv", default=None, type=Path, help="Write the admin CSV export here")
    parser.add_argument("--symptom", default=None, help="Only export cases reporting this symptom")
    return parser


async def run(args: argparse.Namespace) -> Dict[str, object]:
    repository = FileCaseRepository(args.cases, format=args.format)
    monitor = OutbreakMonitor(repository)
    as_of = args.as_of or monitor.clock()

    trends = await monitor.symptom_trends(as_of=as_of)
    alerts = await monitor.check_outbreaks(location=args.location, as_of=as_of)

    report: Dict[str, object] = {
        "as_of": as_of.isoformat(),
        "days": [row.date.isoformat() for row in trends],
        "trends": trends_to_series(trends),
        "alerts": [alert.model_dump(mode="json") for alert in alerts],
        "error": monitor.last_error,
    }

    if args.export_csv is not None:
        report["export"] = await _export(monitor, args, as_of)

    return report


async def _export(monitor: OutbreakMonitor, args: argparse.Namespace, as_of: datetime) -> Optional[str]:
    # The export lists every case, flagged against the full alert set
    try:
        records = await monitor.repository.fetch_recent_cases(EPOCH)
    except Exception as exc:
        logger.exception("Could not load cases for export: %s", exc)
        return None

    records = filter_cases(records, location=args.location, symptom=args.symptom)
    records.sort(key=lambda r: r.occurred_at or EPOCH, reverse=True)
    alerts = await monitor.check_outbreaks(as_of=as_of)

    target: Path = args.export_csv
    if target.is_dir():
        target = target / export_filename(as_of)
    with open(target, "w", encoding="utf-8", newline="") as f:
        export_cases_csv(records, alerts, f)
    return str(target)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    setup_logging()
    logging.basicConfig(level=config.log_level)

    args = build_parser().parse_args(argv)
    report = asyncio.run(run(args))
    json.dump(report, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
