"""Ad performance report generator package."""

from .application import ReportResult, generate_report, summarize_totals
from .domain import AdReportError, DocumentRole, ReportFamily
from .ingestion import parse_number, read_texts, split_fields
from .settings import Settings

__all__ = [
    "AdReportError",
    "DocumentRole",
    "ReportFamily",
    "ReportResult",
    "Settings",
    "generate_report",
    "parse_number",
    "read_texts",
    "split_fields",
    "summarize_totals",
]
