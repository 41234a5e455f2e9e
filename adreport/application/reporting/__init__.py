"""Reporting helpers: number formatting and per-family report schemas."""

from .metrics import fmt_count, fmt_krw, fmt_pct
from .schemas import schema_for, table_keys

__all__ = ["fmt_count", "fmt_krw", "fmt_pct", "schema_for", "table_keys"]
