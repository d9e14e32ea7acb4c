"""
Symptom surveillance: trend aggregation and outbreak detection for case reports.
"""

__version__ = "0.1.0"
