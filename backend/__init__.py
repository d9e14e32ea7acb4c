"""
Backend: outbreak monitoring service, alert consumers and command line.
"""

from .export import export_cases_csv, export_filename, is_outbreak_case
from .service import DashboardSummary, OutbreakMonitor

__all__ = [
    "OutbreakMonitor",
    "DashboardSummary",
    "is_outbreak_case",
    "export_cases_csv",
    "export_filename",
]
