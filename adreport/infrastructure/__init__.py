"""Infrastructure layer package."""

from .report_exporter import save_report_json, save_report_workbook

__all__ = ["save_report_json", "save_report_workbook"]
