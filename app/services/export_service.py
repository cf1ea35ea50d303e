"""
app/services/export_service.py

Tabular export of job result records.

Supported formats:

    json  — list of objects keyed by the column headings below
    csv   — header row plus one row per record
    excel — .xlsx workbook with a single "Race Results" sheet

Rows are flattened in a fixed column order so repeated exports of the same
job carry identical rows. No HTTP concerns live here.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from openpyxl import Workbook

from app.domain.race_results import JobResultRecord
from app.errors import ExportFormatUnsupportedError

EXPORT_FORMATS: frozenset[str] = frozenset({"json", "csv", "excel"})

EXCEL_SHEET_TITLE = "Race Results"
EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (heading, record field)
EXPORT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("Name", "name"),
    ("Category", "category"),
    ("Finish Time", "finish_time"),
    ("BIB Number", "bib_number"),
    ("Rank (Overall)", "rank_overall"),
    ("Rank (Category)", "rank_category"),
    ("Pace", "pace"),
    ("Platform", "platform"),
    ("Status", "status"),
    ("URL", "url"),
)


@dataclass(frozen=True)
class ExportPayload:
    data: bytes
    filename: str
    media_type: str


def _export_row(record: JobResultRecord) -> dict[str, Any]:
    values = record.fields()
    values["status"] = record.status
    values["url"] = record.url
    return {heading: values.get(field_name) for heading, field_name in EXPORT_COLUMNS}


def _excel_bytes(rows: list[dict[str, Any]]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = EXCEL_SHEET_TITLE
    sheet.append([heading for heading, _ in EXPORT_COLUMNS])
    for row in rows:
        sheet.append([row[heading] for heading, _ in EXPORT_COLUMNS])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def export_results(
    records: Iterable[JobResultRecord],
    fmt: str,
    *,
    basename: str = "race-results",
) -> ExportPayload:
    """
    Encode records as `fmt`; unknown formats raise ExportFormatUnsupportedError.
    """

    normalized = (fmt or "").strip().lower()
    if normalized not in EXPORT_FORMATS:
        raise ExportFormatUnsupportedError(
            f"Unsupported export format '{fmt}'. Allowed: {sorted(EXPORT_FORMATS)}."
        )

    rows = [_export_row(record) for record in records]

    if normalized == "json":
        return ExportPayload(
            data=json.dumps(rows, ensure_ascii=False, indent=2).encode("utf-8"),
            filename=f"{basename}.json",
            media_type="application/json",
        )

    if normalized == "excel":
        return ExportPayload(
            data=_excel_bytes(rows),
            filename=f"{basename}.xlsx",
            media_type=EXCEL_MEDIA_TYPE,
        )

    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=[heading for heading, _ in EXPORT_COLUMNS],
        lineterminator="\n",
    )
    writer.writeheader()
    for row in rows:
        writer.writerow({key: "" if value is None else value for key, value in row.items()})
    return ExportPayload(
        data=buffer.getvalue().encode("utf-8"),
        filename=f"{basename}.csv",
        media_type="text/csv; charset=utf-8",
    )
