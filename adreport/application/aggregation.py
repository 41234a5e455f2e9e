"""Authoritative per-document totals (full pass over every data row)."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Sequence

import polars as pl

from adreport.application.structure import data_rows_frame, locate_header, resolve_columns
from adreport.domain.errors import IngestionError, MissingColumnError
from adreport.domain.models import (
    AggregateTotals,
    ColumnRole,
    DocumentOutcome,
    DocumentRole,
    RawDocument,
    RowCoverage,
)
from adreport.domain.vocabulary import DocumentProfile, FamilyProfile
from adreport.ingestion import DEFAULTED_CELL_WARN_RATIO

logger = logging.getLogger(__name__)

_TOTAL_FIELDS: Dict[ColumnRole, str] = {
    ColumnRole.COST: "total_cost",
    ColumnRole.REVENUE: "total_revenue",
    ColumnRole.CONVERSIONS: "total_conversions",
    ColumnRole.CLICKS: "total_clicks",
    ColumnRole.IMPRESSIONS: "total_impressions",
}


def aggregate_document(
    document: RawDocument,
    profile: DocumentProfile,
    fragments: Mapping[ColumnRole, Sequence[str]],
) -> AggregateTotals:
    """Sum every resolved metric over all well-formed, non-summary rows."""
    header = locate_header(document, profile.header_keywords, profile.scan_window)
    columns = resolve_columns(header.fields, fragments)
    if not columns.is_resolved(ColumnRole.COST):
        raise MissingColumnError(document.source or document.role.value, ColumnRole.COST.value)

    rows = data_rows_frame(document, header, columns)
    sums: Dict[str, float] = {}
    if rows.metric_roles:
        summed = rows.frame.select([pl.col(role.value).sum() for role in rows.metric_roles]).row(0, named=True)
        sums = {_TOTAL_FIELDS[role]: float(summed[role.value] or 0.0) for role in rows.metric_roles}

    coverage = rows.coverage
    _warn_defaulted_cells(document.source or document.role.value, coverage)
    return AggregateTotals(coverage=coverage, resolved_roles=columns.resolved_roles, **sums)


def _warn_defaulted_cells(context: str, coverage: RowCoverage, threshold: float = DEFAULTED_CELL_WARN_RATIO) -> List[str]:
    if not coverage.used_rows or threshold <= 0:
        return []
    counts = dict(coverage.defaulted_by_role)
    failures: List[str] = []
    for role, ratio in coverage.defaulted_ratios().items():
        if ratio > threshold:
            failures.append(f"{role.value}={ratio:.2%} ({counts[role]}/{coverage.used_rows})")
    if failures:
        logger.warning("%s: metric cells defaulted to 0 above %.2f%%: %s", context, threshold * 100, ", ".join(failures))
    return failures


def aggregate_documents(
    documents: Mapping[DocumentRole, RawDocument],
    family: FamilyProfile,
) -> Dict[DocumentRole, DocumentOutcome]:
    """Aggregate each document independently; ingestion failures are labeled, not raised."""
    outcomes: Dict[DocumentRole, DocumentOutcome] = {}
    for role, document in documents.items():
        try:
            totals = aggregate_document(document, family.document(role), family.fragments_for(role))
        except IngestionError as exc:
            outcomes[role] = DocumentOutcome(role=role, error=exc)
            continue
        outcomes[role] = DocumentOutcome(role=role, totals=totals)
    return outcomes
