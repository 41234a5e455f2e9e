"""Application layer package."""

from .report_service import ReportResult, generate_report, reduce_documents, summarize_totals

__all__ = ["ReportResult", "generate_report", "reduce_documents", "summarize_totals"]
