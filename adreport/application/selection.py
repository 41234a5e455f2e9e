"""Top-N cost selection: bound the payload while keeping the highest-spend rows."""

from __future__ import annotations

import math
from typing import List, Mapping, Sequence

from adreport.application.structure import LINE_COLUMN, data_rows_frame, locate_header, resolve_columns
from adreport.domain.errors import HeaderNotFoundError
from adreport.domain.models import ColumnRole, RawDocument, ReducedDocument
from adreport.domain.vocabulary import DocumentProfile
from adreport.ingestion import parse_number, split_fields


def _fit_to_budget(header_line: str, rows: List[str], max_chars: int | None) -> List[str]:
    if max_chars is None:
        return rows
    size = len(header_line) + sum(len(row) + 1 for row in rows)
    while rows and size > max_chars:
        size -= len(rows.pop()) + 1
    return rows


def _fallback(document: RawDocument, limit: int, max_chars: int | None) -> ReducedDocument:
    lines = [line for line in document.lines if line.strip()][:limit]
    if max_chars is not None:
        size = 0
        kept: List[str] = []
        for line in lines:
            size += len(line) + 1
            if size - 1 > max_chars:
                break
            kept.append(line)
        lines = kept
    return ReducedDocument(role=document.role, header_line="", rows=tuple(lines), limit=limit, fallback=True)


def select_top_cost_rows(
    document: RawDocument,
    limit: int,
    profile: DocumentProfile,
    fragments: Mapping[ColumnRole, Sequence[str]],
    max_chars: int | None = None,
) -> ReducedDocument:
    """Header plus the `limit` costliest data rows, original text, descending cost.

    Ties keep file order. Without a header or cost column the first `limit`
    non-blank lines are returned unsorted and flagged as a fallback.
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    try:
        header = locate_header(document, profile.header_keywords, profile.scan_window)
    except HeaderNotFoundError:
        return _fallback(document, limit, max_chars)

    columns = resolve_columns(header.fields, fragments)
    if not columns.is_resolved(ColumnRole.COST):
        return _fallback(document, limit, max_chars)

    rows = data_rows_frame(document, header, columns)
    ranked = rows.frame.sort(ColumnRole.COST.value, descending=True, maintain_order=True).head(limit)
    selected = _fit_to_budget(header.line, ranked.get_column(LINE_COLUMN).to_list(), max_chars)
    return ReducedDocument(role=document.role, header_line=header.line, rows=tuple(selected), limit=limit)


def reduced_cost_total(reduced: ReducedDocument, fragments: Mapping[ColumnRole, Sequence[str]]) -> float:
    """Sum of the cost column over a reduced document's rows (0 for fallbacks)."""
    if reduced.fallback or not reduced.header_line:
        return 0.0
    cost_index = resolve_columns(split_fields(reduced.header_line), fragments).get(ColumnRole.COST)
    if cost_index is None:
        return 0.0
    return math.fsum(parse_number(split_fields(row)[cost_index]) for row in reduced.rows)
