"""
Unit tests for case normalization.

Tests conversion of raw case rows into canonical CaseRecord format.
"""

import pytest
from datetime import datetime, timezone

from surveillance.data.normalizers import (
    NormalizationError,
    normalize_case,
    normalize_cases,
    normalize_symptoms,
    normalize_timestamp,
)


class TestNormalizeTimestamp:
    """Test timestamp normalization."""
    
    def test_normalize_iso8601_with_z(self):
        result = normalize_timestamp("2025-02-07T10:30:45Z")
        
        assert result == datetime(2025, 2, 7, 10, 30, 45, tzinfo=timezone.utc)
    
    def test_normalize_iso8601_with_offset(self):
        result = normalize_timestamp("2025-02-07T10:30:45.123+05:30")
        
        assert result.utcoffset().total_seconds() == 5.5 * 3600
        assert result.microsecond == 123000
    
    def test_naive_string_gets_timezone(self):
        result = normalize_timestamp("2025-02-07 10:30:45")
        
        assert result.tzinfo is not None
        assert result.hour == 10
    
    def test_normalize_epoch_seconds(self):
        # 1707315045 falls in February 2024
        result = normalize_timestamp("1707315045")
        
        assert result.year == 2024
        assert result.tzinfo == timezone.utc
    
    def test_normalize_epoch_milliseconds(self):
        result = normalize_timestamp(1707315045000)
        
        assert result.year == 2024
        assert result.tzinfo == timezone.utc
    
    def test_datetime_passthrough(self):
        ts = datetime(2025, 2, 7, 10, tzinfo=timezone.utc)
        
        assert normalize_timestamp(ts) is ts
    
    def test_missing_timestamp_is_none(self):
        assert normalize_timestamp(None) is None
        assert normalize_timestamp("   ") is None
    
    def test_invalid_timestamp(self):
        with pytest.raises(NormalizationError):
            normalize_timestamp("not-a-timestamp")
    
    def test_out_of_range_epoch_raises_normalization_error(self):
        for value in ("inf", "-inf", "1e20", "nan"):
            with pytest.raises(NormalizationError):
                normalize_timestamp(value)


class TestNormalizeSymptoms:
    """Test symptom tag normalization."""
    
    def test_list_lowercased_and_deduplicated(self):
        assert normalize_symptoms(["Fever", "fever ", "COUGH"]) == frozenset({"fever", "cough"})
    
    def test_export_string(self):
        """Test the "; " joined form produced by the CSV export."""
        assert normalize_symptoms("fever; rash") == frozenset({"fever", "rash"})
    
    def test_comma_string(self):
        assert normalize_symptoms("fever,rash,") == frozenset({"fever", "rash"})
    
    def test_unknown_tags_kept(self):
        assert "headache" in normalize_symptoms(["headache"])
    
    def test_missing_or_unsupported(self):
        assert normalize_symptoms(None) == frozenset()
        assert normalize_symptoms(42) == frozenset()


class TestNormalizeCase:
    """Test full case normalization."""
    
    def test_storage_columns(self):
        record = normalize_case({
            "id": "abc",
            "mandal": "  Kavali ",
            "village": "Kavali Town",
            "symptoms": ["fever"],
            "created_at": "2025-02-07T10:30:45Z",
            "phone_number": "9848012345",
        })
        
        assert record.case_id == "abc"
        assert record.location == "Kavali"
        assert record.village == "Kavali Town"
        assert record.symptoms == frozenset({"fever"})
        assert record.occurred_at.day == 7
        assert record.phone_number == "9848012345"
    
    def test_export_headers(self):
        record = normalize_case({
            "Date": "2025-02-07",
            "Mandal": "Nellore",
            "Symptoms": "cough; fever",
            "Status": "Normal",
        })
        
        assert record.location == "Nellore"
        assert record.symptoms == frozenset({"cough", "fever"})
        assert record.occurred_at.date().isoformat() == "2025-02-07"
    
    def test_missing_fields_tolerated(self):
        record = normalize_case({"symptoms": []})
        
        assert record.location is None
        assert record.occurred_at is None
        assert record.symptoms == frozenset()
    
    def test_blank_location_becomes_none(self):
        assert normalize_case({"mandal": "   "}).location is None
    
    def test_invalid_timestamp_raises(self):
        with pytest.raises(NormalizationError):
            normalize_case({"mandal": "Kavali", "created_at": "yesterday"})
    
    def test_non_mapping_raises(self):
        with pytest.raises(NormalizationError):
            normalize_case(["Kavali", "fever"])


class TestNormalizeCases:
    """Test batch normalization."""
    
    def test_bad_rows_skipped(self):
        rows = [
            {"mandal": "Kavali", "symptoms": ["fever"], "created_at": "2025-02-07T10:00:00Z"},
            {"mandal": "Kavali", "created_at": "garbage"},
            "not a row",
        ]
        
        records, skipped = normalize_cases(rows)
        
        assert len(records) == 1
        assert skipped == 2
    
    def test_out_of_range_epochs_skipped(self):
        rows = [
            {"mandal": "Kavali", "symptoms": ["fever"], "created_at": "inf"},
            {"mandal": "Kavali", "symptoms": ["fever"], "created_at": "1e20"},
            {"mandal": "Kavali", "symptoms": ["fever"], "created_at": "2025-02-07T10:00:00Z"},
        ]
        
        records, skipped = normalize_cases(rows)
        
        assert [r.location for r in records] == ["Kavali"]
        assert skipped == 2
