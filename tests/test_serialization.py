"""Test di serializzazione: JSON, CSV e report testuali."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from csv_formatter import index_to_csv, tables_to_csv
from exceptions import WriteError
from json_formatter import load_page, save_json, save_page, to_json
from models import ErrorEntry, IndexEntry, PageRecord, Reference, RunIndex
from report_formatter import format_page_report, format_run_report


class TestJson:
    def test_page_round_trip(self, sample_page: PageRecord) -> None:
        restored = PageRecord.from_dict(json.loads(to_json(sample_page.to_dict())))
        assert restored == sample_page

    def test_round_trip_through_file(self, sample_page: PageRecord, tmp_path: Path) -> None:
        path = save_page(sample_page, str(tmp_path / "nested" / "page.json"))
        assert load_page(path) == sample_page

    def test_compact_output(self) -> None:
        assert to_json({"a": [1, 2]}, pretty=False) == '{"a":[1,2]}'

    def test_non_ascii_is_kept(self) -> None:
        assert "Zürich" in to_json({"city": "Zürich"})

    def test_reference_serializes_extraction_methods(self, sample_page: PageRecord) -> None:
        data = sample_page.references[0].to_dict()
        assert data["extraction_methods"] == "direct_link"
        assert Reference.from_dict(data) == sample_page.references[0]

    def test_write_failure_raises_write_error(self, tmp_path: Path) -> None:
        with patch.object(Path, "write_text", side_effect=PermissionError("denied")):
            with pytest.raises(WriteError) as excinfo:
                save_json({"a": 1}, str(tmp_path / "out.json"))
        assert isinstance(excinfo.value.cause, PermissionError)


class TestCsv:
    def test_tables_csv_layout(self, sample_page: PageRecord) -> None:
        rows = list(csv.reader(io.StringIO(tables_to_csv(sample_page))))

        assert rows[0] == ["=== TABLE 1: Great Flood of 1910 ==="]
        assert rows[1] == [
            "Date", "Event",
            "Wikipedia_Links", "External_Sources_Count", "External_URLs", "Extraction_Methods",
        ]
        assert rows[2] == [
            "1 May",
            "Thames rises[1]",
            "Thames: https://en.wikipedia.org/wiki/Thames",
            "1",
            "[1] http://example.org/a",
            "[1] direct_link",
        ]

    def test_tables_csv_without_tables(self, sample_page: PageRecord) -> None:
        sample_page.tables = []
        assert tables_to_csv(sample_page) == ""

    def test_index_csv(self) -> None:
        entries = [IndexEntry(
            title='Flood "1910"',
            url="https://en.wikipedia.org/wiki/Flood",
            filename="Flood_1910",
            summary="line one\nline two",
            scraped_at="2024-05-01T10:00:00+00:00",
        )]
        rows = list(csv.reader(io.StringIO(index_to_csv(entries))))
        assert rows[0] == ["Title", "URL", "Filename", "Summary", "Scraped_At"]
        assert rows[1][0] == 'Flood "1910"'
        assert rows[1][3] == "line one line two"


class TestReports:
    def test_page_report_counts(self, sample_page: PageRecord) -> None:
        report = format_page_report(sample_page)

        assert report.startswith("WIKIPEDIA SCRAPING REPORT\n")
        assert "Page: Great Flood of 1910" in report
        assert "- Tables found: 1" in report
        assert "- Total references: 1" in report
        assert "Table 1: 1 rows" in report
        assert "Headers: Date, Event" in report
        assert "- Total Wikipedia links: 1" in report
        assert "- Total external references: 1" in report
        assert report.rstrip().endswith("[1] http://example.org/a")

    def test_page_report_is_deterministic(self, sample_page: PageRecord) -> None:
        assert format_page_report(sample_page) == format_page_report(sample_page)

    def test_run_report(self) -> None:
        run_index = RunIndex(
            pages=[IndexEntry("Flood", "https://en.wikipedia.org/wiki/Flood", "Flood", "", "t")],
            errors=[ErrorEntry("https://en.wikipedia.org/wiki/Gone", "404")],
            started_at="2024-05-01T10:00:00+00:00",
        )
        report = format_run_report(run_index)
        assert "Addresses processed: 2" in report
        assert "Successful pages: 1" in report
        assert "Errors: 1" in report
        assert "- https://en.wikipedia.org/wiki/Gone: 404" in report

    def test_run_index_dict(self) -> None:
        data = RunIndex(errors=[ErrorEntry("u", "boom")]).to_dict()
        assert data["total_pages"] == 1
        assert data["successful_pages"] == 0
        assert data["error_count"] == 1
        assert data["error_log"] == [{"url": "u", "error": "boom"}]
