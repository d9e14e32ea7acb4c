"""
Core module: Configuration, logging, and exception handling.
"""

from .config import Config, config
from .exceptions import (
    CaseFetchError,
    ConfigurationError,
    DataValidationError,
    SurveillanceError,
)

__all__ = [
    "Config",
    "config",
    "SurveillanceError",
    "CaseFetchError",
    "DataValidationError",
    "ConfigurationError",
]
