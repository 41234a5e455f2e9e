"""Tests for JSON and Excel report export."""

import json
from dataclasses import replace

import pytest
from openpyxl import load_workbook

from adreport.application.invocation import ResilientInvoker, RetryPolicy
from adreport.application.report_service import generate_report
from adreport.infrastructure import report_exporter
from adreport.infrastructure.report_exporter import report_sheets, save_report_json, save_report_workbook


@pytest.fixture
def search_result(search_texts, fenced_search_report, collaborator_factory):
    invoker = ResilientInvoker(RetryPolicy(initial_delay_s=0.0), sleep=lambda _: None)
    return generate_report("search", search_texts, collaborator_factory([fenced_search_report]), invoker=invoker)


class TestReportSheets:
    def test_sheets(self, search_result):
        sheets = report_sheets(search_result)
        assert list(sheets)[:2] == ["summary", "coverage"]
        assert "campaignStats" in sheets
        assert "deviceStats" not in sheets
        assert sheets["campaignStats"].height == 2
        assert sheets["coverage"].get_column("document").to_list() == ["campaign", "device", "keyword"]

        summary = dict(zip(sheets["summary"]["metric"].to_list(), sheets["summary"]["value"].to_list()))
        assert summary["totalCost"] == "₩80,000"
        assert summary["anchor.totalCost"] == "80000.0"

    def test_nested_and_non_finite_cells(self, search_result):
        report = dict(search_result.report)
        report["campaignStats"] = [
            {"name": "브랜드", "cost": float("nan"), "tags": ["a", "b"]},
            {"name": "일반", "cost": 30000.0, "tags": []},
        ]
        sheets = report_sheets(replace(search_result, report=report))
        frame = sheets["campaignStats"]
        assert frame.get_column("cost").to_list() == [None, 30000.0]
        assert frame.get_column("tags").to_list() == ['["a", "b"]', "[]"]


class TestSaveReport:
    def test_json_has_meta(self, tmp_path, search_result):
        path = tmp_path / "out" / "search_report.json"
        save_report_json(path, search_result)
        payload = json.loads(path.read_text(encoding="utf-8"))
        assert payload["summary"]["totalCost"] == "₩80,000"
        assert payload["_meta"]["family"] == "search"
        assert payload["_meta"]["documents"]["keyword"]["reduced_rows"] == 2

    def test_workbook(self, tmp_path, search_result):
        path = tmp_path / "search_report.xlsx"
        saved, message = save_report_workbook(path, search_result)
        assert (saved, message) == (True, "")
        workbook = load_workbook(path)
        assert {"summary", "coverage", "campaignStats"} <= set(workbook.sheetnames)

    def test_openpyxl_fallback(self, tmp_path, search_result, monkeypatch):
        monkeypatch.setattr(report_exporter, "_save_with_xlsxwriter", lambda path, sheets: False)
        path = tmp_path / "fallback.xlsx"
        assert save_report_workbook(path, search_result) == (True, "")
        sheet = load_workbook(path)["campaignStats"]
        assert [cell.value for cell in sheet[1]] == ["name", "cost", "revenue", "roas", "clicks"]
        assert sheet["A2"].value == "브랜드"
        assert sheet.freeze_panes == "A2"

    def test_locked_workbook_is_reported(self, tmp_path, search_result, monkeypatch):
        def _locked(path, sheets):
            raise PermissionError("file is open")

        monkeypatch.setattr(report_exporter, "_save_with_xlsxwriter", _locked)
        assert save_report_workbook(tmp_path / "locked.xlsx", search_result) == (False, "file is open")
