"""
Custom exceptions for symptom surveillance.

These exceptions provide clear error semantics across the system.
Use them to distinguish between storage failures, bad input data, and configuration errors.
"""


class SurveillanceError(Exception):
    """Base exception for surveillance failures."""
    pass


class CaseFetchError(SurveillanceError):
    """Raised when the storage collaborator cannot return case records."""
    pass


class DataValidationError(SurveillanceError):
    """Raised when input data fails validation or ingestion."""
    pass


class ConfigurationError(SurveillanceError):
    """Raised when configuration is invalid or missing."""
    pass
