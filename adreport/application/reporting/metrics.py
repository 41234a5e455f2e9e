"""Shared numeric/formatting utilities for reporting."""

from __future__ import annotations


def fmt_krw(value: float | None) -> str:
    """KRW currency the way ko-KR locales render it: ₩1,234,567 (no minor unit)."""
    if value is None:
        return "₩0"
    amount = round(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}₩{abs(amount):,}"


def fmt_count(value: float | None) -> str:
    if value is None:
        return "0"
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def fmt_pct(value: float | None, digits: int = 2) -> str:
    """Format a value already expressed in percent (e.g. ROAS 300.0 -> '300.00%')."""
    if value is None:
        return "N/A"
    return f"{value:.{digits}f}%"
