"""Domain models for ad-report ingestion and aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Tuple


class ColumnRole(str, Enum):
    COST = "cost"
    REVENUE = "revenue"
    CONVERSIONS = "conversions"
    CLICKS = "clicks"
    IMPRESSIONS = "impressions"
    NAME = "name"


METRIC_ROLES: Tuple[ColumnRole, ...] = (
    ColumnRole.COST,
    ColumnRole.REVENUE,
    ColumnRole.CONVERSIONS,
    ColumnRole.CLICKS,
    ColumnRole.IMPRESSIONS,
)


class ReportFamily(str, Enum):
    SEARCH = "search"
    DISPLAY = "display"


class DocumentRole(str, Enum):
    CAMPAIGN = "campaign"
    DEVICE = "device"
    KEYWORD = "keyword"
    CREATIVE = "creative"
    AUDIENCE = "audience"


def _safe_ratio(num: float, den: float, scale: float = 1.0) -> float:
    if den <= 0:
        return 0.0
    return num / den * scale


@dataclass(frozen=True)
class RawDocument:
    """One uploaded export, split into lines."""

    role: DocumentRole
    lines: Tuple[str, ...]
    source: str = ""

    @classmethod
    def from_text(cls, text: str, role: DocumentRole, source: str = "") -> "RawDocument":
        if text.startswith("\ufeff"):
            text = text[1:]
        lines = tuple(line.rstrip("\r") for line in text.split("\n"))
        return cls(role=role, lines=lines, source=source)


@dataclass(frozen=True)
class HeaderLocation:
    row_index: int
    fields: Tuple[str, ...]
    line: str = ""


@dataclass(frozen=True)
class ColumnRoleMap:
    indices: Mapping[ColumnRole, int | None]

    def get(self, role: ColumnRole) -> int | None:
        return self.indices.get(role)

    def is_resolved(self, role: ColumnRole) -> bool:
        return self.indices.get(role) is not None

    @property
    def resolved_roles(self) -> Tuple[ColumnRole, ...]:
        return tuple(role for role, index in self.indices.items() if index is not None)


@dataclass(frozen=True)
class RowCoverage:
    """Row accounting for one pass over a document's data rows."""

    data_rows: int = 0
    used_rows: int = 0
    malformed_rows: int = 0
    summary_rows: int = 0
    defaulted_cells: int = 0
    defaulted_by_role: Tuple[Tuple[ColumnRole, int], ...] = ()

    def defaulted_ratios(self) -> Dict[ColumnRole, float]:
        """Defaulted cells of each metric column over the used rows."""
        return {
            role: _safe_ratio(float(count), float(self.used_rows))
            for role, count in self.defaulted_by_role
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data_rows": self.data_rows,
            "used_rows": self.used_rows,
            "malformed_rows": self.malformed_rows,
            "summary_rows": self.summary_rows,
            "defaulted_cells": self.defaulted_cells,
            "defaulted_by_role": {role.value: count for role, count in self.defaulted_by_role if count},
        }


@dataclass(frozen=True)
class AggregateTotals:
    """Authoritative totals from a full pass over a document.

    Ratios follow the ad-platform conventions: ROAS, CTR and CVR are percentages,
    CPM is cost per thousand impressions. A zero denominator yields 0.
    """

    total_cost: float = 0.0
    total_revenue: float = 0.0
    total_conversions: float = 0.0
    total_clicks: float = 0.0
    total_impressions: float = 0.0
    coverage: RowCoverage = field(default_factory=RowCoverage)
    resolved_roles: Tuple[ColumnRole, ...] = ()

    @property
    def roas(self) -> float:
        return _safe_ratio(self.total_revenue, self.total_cost, 100.0)

    @property
    def cpc(self) -> float:
        return _safe_ratio(self.total_cost, self.total_clicks)

    @property
    def ctr(self) -> float:
        return _safe_ratio(self.total_clicks, self.total_impressions, 100.0)

    @property
    def cpm(self) -> float:
        return _safe_ratio(self.total_cost, self.total_impressions, 1000.0)

    @property
    def cvr(self) -> float:
        return _safe_ratio(self.total_conversions, self.total_clicks, 100.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalCost": self.total_cost,
            "totalRevenue": self.total_revenue,
            "totalConversions": self.total_conversions,
            "totalClicks": self.total_clicks,
            "totalImpressions": self.total_impressions,
            "totalRoas": self.roas,
            "avgCpc": self.cpc,
            "avgCtr": self.ctr,
            "avgCpm": self.cpm,
            "avgCvr": self.cvr,
            "resolvedRoles": [role.value for role in self.resolved_roles],
            "coverage": self.coverage.to_dict(),
        }


@dataclass(frozen=True)
class ReducedDocument:
    role: DocumentRole
    header_line: str
    rows: Tuple[str, ...]
    limit: int
    fallback: bool = False

    @property
    def text(self) -> str:
        lines = [self.header_line] if self.header_line else []
        lines.extend(self.rows)
        return "\n".join(lines)


@dataclass(frozen=True)
class DocumentOutcome:
    """Aggregation result for one document: totals, or the reason there are none."""

    role: DocumentRole
    totals: AggregateTotals | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.totals is not None and self.error is None
