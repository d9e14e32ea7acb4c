"""
Unit tests for case ingestion.
"""

import json
import pytest

from surveillance.data.ingestion import (
    CaseIngestionError,
    CSVCaseSource,
    JSONCaseSource,
    ingest_cases,
)


class TestJSONCaseSource:
    """Test JSON array and NDJSON ingestion."""
    
    def test_json_array(self, tmp_path):
        path = tmp_path / "cases.json"
        path.write_text(json.dumps([
            {"mandal": "Kavali", "symptoms": ["fever"]},
            "skip me",
            {"mandal": "Nellore", "symptoms": ["cough"]},
        ]), encoding="utf-8")
        
        rows = list(JSONCaseSource(path).ingest())
        
        assert [r["mandal"] for r in rows] == ["Kavali", "Nellore"]
    
    def test_ndjson_skips_malformed_lines(self, tmp_path):
        path = tmp_path / "cases.ndjson"
        path.write_text(
            '{"mandal": "Kavali"}\n'
            '{broken\n'
            '\n'
            '{"mandal": "Atmakur"}\n',
            encoding="utf-8",
        )
        
        rows = list(JSONCaseSource(path).ingest())
        
        assert [r["mandal"] for r in rows] == ["Kavali", "Atmakur"]
    
    def test_invalid_array_is_fatal(self, tmp_path):
        path = tmp_path / "cases.json"
        path.write_text('[{"mandal": ', encoding="utf-8")
        
        with pytest.raises(CaseIngestionError):
            list(JSONCaseSource(path).ingest())
    
    def test_missing_file(self, tmp_path):
        with pytest.raises(CaseIngestionError):
            JSONCaseSource(tmp_path / "absent.json")


class TestCSVCaseSource:
    """Test CSV ingestion."""
    
    def test_reads_rows_and_strips_bom(self, tmp_path):
        path = tmp_path / "cases.csv"
        path.write_text(
            "\ufeffmandal,symptoms,created_at\n"
            "Kavali,fever; cough,2025-02-07T10:00:00Z\n"
            ",,\n"
            "Nellore,rash,2025-02-06T10:00:00Z\n",
            encoding="utf-8",
        )
        
        rows = list(CSVCaseSource(path).ingest())
        
        assert len(rows) == 2
        assert rows[0]["mandal"] == "Kavali"
        assert rows[0]["symptoms"] == "fever; cough"
    
    def test_empty_file(self, tmp_path):
        path = tmp_path / "cases.csv"
        path.write_text("", encoding="utf-8")
        
        with pytest.raises(CaseIngestionError):
            list(CSVCaseSource(path).ingest())


class TestIngestCases:
    """Test format detection."""
    
    def test_detects_csv(self, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text("Mandal,Symptoms\nKavali,fever\n", encoding="utf-8")
        
        rows = list(ingest_cases(path))
        
        assert rows == [{"Mandal": "Kavali", "Symptoms": "fever"}]
    
    def test_unknown_extension(self, tmp_path):
        path = tmp_path / "cases.txt"
        path.write_text("whatever", encoding="utf-8")
        
        with pytest.raises(CaseIngestionError):
            list(ingest_cases(path))
    
    def test_unknown_format(self, tmp_path):
        path = tmp_path / "cases.json"
        path.write_text("[]", encoding="utf-8")
        
        with pytest.raises(CaseIngestionError):
            list(ingest_cases(path, format="xml"))
