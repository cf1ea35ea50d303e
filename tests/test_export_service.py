"""
tests/test_export_service.py

JSON, CSV and Excel encodings of job result records.
"""

from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone

import pytest
from openpyxl import load_workbook

from app.domain.race_results import JobResultRecord, ResultStatus
from app.errors import ExportFormatUnsupportedError
from app.extraction.types import ExtractionResult
from app.services.export_service import EXCEL_MEDIA_TYPE, EXPORT_COLUMNS, export_results

AT = datetime(2026, 10, 17, 9, 0, tzinfo=timezone.utc)

RECORDS = [
    JobResultRecord(
        job_id="job-1",
        owner_id="owner-a",
        url="https://sportstimingsolutions.in/results?q=abc",
        status=ResultStatus.COMPLETED,
        result=ExtractionResult(
            name="Rahul Sharma",
            category="40 yrs & Above Male",
            finish_time="03:45:12",
            bib_number="40213",
            rank_overall=512,
            rank_category=37,
            pace="00:05:20",
            platform="Sports Timing Solutions",
        ),
        platform="Sports Timing Solutions",
        extracted_at=AT,
    ),
    JobResultRecord(
        job_id="job-1",
        owner_id="owner-a",
        url="not-a-url",
        status=ResultStatus.ERROR,
        error_message="Invalid URL: not-a-url",
        extracted_at=AT,
    ),
]

HEADINGS = [
    "Name",
    "Category",
    "Finish Time",
    "BIB Number",
    "Rank (Overall)",
    "Rank (Category)",
    "Pace",
    "Platform",
    "Status",
    "URL",
]


class TestExportResults:
    def test_csv_has_fixed_headings_and_one_row_per_record(self) -> None:
        payload = export_results(RECORDS, "csv", basename="race-results-job-1")

        rows = list(csv.reader(io.StringIO(payload.data.decode("utf-8"))))
        assert rows[0] == HEADINGS
        assert rows[1] == [
            "Rahul Sharma",
            "40 yrs & Above Male",
            "03:45:12",
            "40213",
            "512",
            "37",
            "00:05:20",
            "Sports Timing Solutions",
            "completed",
            "https://sportstimingsolutions.in/results?q=abc",
        ]
        assert rows[2] == ["", "", "", "", "", "", "", "", "error", "not-a-url"]
        assert payload.filename == "race-results-job-1.csv"
        assert payload.media_type.startswith("text/csv")

    def test_json_keeps_nulls_and_integers(self) -> None:
        payload = export_results(RECORDS, "JSON")

        rows = json.loads(payload.data)
        assert list(rows[0]) == HEADINGS
        assert rows[0]["Rank (Overall)"] == 512
        assert rows[1]["Name"] is None
        assert payload.media_type == "application/json"
        assert payload.filename == "race-results.json"

    def test_excel_workbook_has_results_sheet(self) -> None:
        payload = export_results(RECORDS, "excel", basename="race-results-job-1")

        workbook = load_workbook(io.BytesIO(payload.data))
        assert workbook.sheetnames == ["Race Results"]
        rows = list(workbook["Race Results"].iter_rows(values_only=True))
        assert list(rows[0]) == HEADINGS
        assert rows[1][0] == "Rahul Sharma"
        assert rows[1][4] == 512
        assert rows[2][0] is None
        assert rows[2][-2:] == ("error", "not-a-url")
        assert payload.filename == "race-results-job-1.xlsx"
        assert payload.media_type == EXCEL_MEDIA_TYPE

    def test_empty_excel_export_still_has_header(self) -> None:
        payload = export_results([], "Excel")

        rows = list(load_workbook(io.BytesIO(payload.data)).active.iter_rows(values_only=True))
        assert rows == [tuple(HEADINGS)]

    def test_column_order_is_stable(self) -> None:
        assert [heading for heading, _ in EXPORT_COLUMNS] == HEADINGS

    def test_empty_export_still_has_header(self) -> None:
        payload = export_results([], "csv")
        assert payload.data.decode("utf-8").splitlines() == [",".join(HEADINGS)]

    @pytest.mark.parametrize("fmt", ["xlsx", "xml", ""])
    def test_unknown_format_is_rejected(self, fmt: str) -> None:
        with pytest.raises(ExportFormatUnsupportedError):
            export_results(RECORDS, fmt)
