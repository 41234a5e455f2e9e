"""Infrastructure adapter for report export targets (JSON, Excel)."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict, List

import polars as pl
from openpyxl import Workbook

from adreport.application.report_service import ReportResult
from adreport.application.reporting.schemas import table_keys


def _report_cell(value: Any) -> Any:
    """Generated tables may nest lists or objects and carry NaN; sheets get text or blanks."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return value


def _table_frame(rows: Any) -> pl.DataFrame:
    if not isinstance(rows, list):
        return pl.DataFrame()
    records: List[Dict[str, Any]] = []
    columns: List[str] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        for key in row:
            if key not in columns:
                columns.append(key)
        records.append({str(key): _report_cell(value) for key, value in row.items()})
    if not records:
        return pl.DataFrame()
    # Generated tables can mix numbers and strings in one column; keep them as text-safe objects.
    data = {column: [record.get(column) for record in records] for column in columns}
    try:
        return pl.DataFrame(data, strict=False)
    except Exception:
        return pl.DataFrame({column: [None if v is None else str(v) for v in values] for column, values in data.items()})


def report_sheets(result: ReportResult) -> Dict[str, pl.DataFrame]:
    """Summary, coverage and one sheet per breakdown table of the report."""
    summary = result.report.get("summary")
    summary_rows: List[Dict[str, str]] = []
    if isinstance(summary, dict):
        summary_rows = [{"metric": str(key), "value": str(value)} for key, value in summary.items()]
    anchors = result.totals.to_dict()
    summary_rows.extend(
        {"metric": f"anchor.{key}", "value": str(value)}
        for key, value in anchors.items()
        if key not in ("coverage", "resolvedRoles")
    )
    sheets: Dict[str, pl.DataFrame] = {
        "summary": pl.DataFrame(summary_rows, schema={"metric": pl.Utf8, "value": pl.Utf8}),
    }

    coverage_rows: List[Dict[str, Any]] = []
    for role, outcome in result.outcomes.items():
        row: Dict[str, Any] = {"document": role.value, "error": str(outcome.error) if outcome.error else ""}
        if outcome.totals is not None:
            row.update(outcome.totals.coverage.to_dict())
            row["total_cost"] = outcome.totals.total_cost
        coverage_rows.append(row)
    sheets["coverage"] = _table_frame(coverage_rows)

    for key in table_keys(result.family):
        frame = _table_frame(result.report.get(key))
        if not frame.is_empty():
            sheets[key[:31]] = frame
    return sheets


def _save_with_xlsxwriter(path: Path, sheets: Dict[str, pl.DataFrame]) -> bool:
    try:
        import xlsxwriter
    except ImportError:
        return False

    try:
        with xlsxwriter.Workbook(str(path)) as workbook:
            for sheet_name, frame in sheets.items():
                frame.write_excel(workbook=workbook, worksheet=sheet_name, autofit=True)
        return True
    except PermissionError:
        raise
    except Exception:
        return False


def _save_with_openpyxl(path: Path, sheets: Dict[str, pl.DataFrame]) -> None:
    workbook = Workbook()
    workbook.remove(workbook.active)
    for sheet_name, frame in sheets.items():
        worksheet = workbook.create_sheet(title=sheet_name)
        worksheet.append(frame.columns)
        for row in frame.iter_rows():
            worksheet.append([_report_cell(value) for value in row])
        worksheet.freeze_panes = "A2"
    workbook.save(path)


def save_report_workbook(path: Path, result: ReportResult) -> tuple[bool, str]:
    """Write the report sheets, through polars when xlsxwriter is installed.

    Returns ``(False, reason)`` when the target is locked, e.g. open in Excel.
    """
    sheets = report_sheets(result)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        if not _save_with_xlsxwriter(path, sheets):
            _save_with_openpyxl(path, sheets)
    except PermissionError as exc:
        return False, str(exc)
    return True, ""


def save_report_json(path: Path, result: ReportResult) -> None:
    payload = dict(result.report)
    payload["_meta"] = result.meta()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
