"""Report request assembly and response parsing."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from adreport.application.reporting.metrics import fmt_count, fmt_krw, fmt_pct
from adreport.application.reporting.schemas import BRIEFS, schema_for
from adreport.domain.errors import ReportFormatError
from adreport.domain.models import AggregateTotals, ReducedDocument, ReportFamily
from adreport.domain.vocabulary import FamilyProfile

CODE_FENCE_MARKERS: tuple[str, ...] = ("```json", "```")
MAX_DOCUMENTS = 3


@dataclass(frozen=True)
class ReportRequest:
    family: ReportFamily
    prompt: str
    schema: Dict[str, Any]
    anchors: AggregateTotals


def anchor_lines(totals: AggregateTotals, family: ReportFamily) -> List[str]:
    lines = [
        f"- Total Cost: {fmt_krw(totals.total_cost)}",
        f"- Total Revenue: {fmt_krw(totals.total_revenue)}",
        f"- Total Conversions: {fmt_count(totals.total_conversions)}",
        f"- Total Clicks: {fmt_count(totals.total_clicks)}",
        f"- Total ROAS: {fmt_pct(totals.roas)}",
    ]
    if family == ReportFamily.DISPLAY:
        lines.extend(
            [
                f"- Total Impressions: {fmt_count(totals.total_impressions)}",
                f"- Avg CPM: {totals.cpm:.0f}",
                f"- Avg CTR: {fmt_pct(totals.ctr)}",
                f"- Avg CPC: {totals.cpc:.0f}",
                f"- Avg CVR (Conv/Click): {fmt_pct(totals.cvr)}",
            ]
        )
    return lines


def _document_block(index: int, profile_label: str, description: str, reduced: ReducedDocument) -> str:
    title = f"{index}. **{profile_label}** ({description})"
    if reduced.fallback:
        note = "*(Note: column header not recognized; first rows passed through unsorted.)*"
    else:
        note = f"*(Note: header plus up to {reduced.limit} highest-cost rows, sorted by cost.)*"
    return f"{title}\n{note}\n{reduced.text}"


def build_request(
    family: FamilyProfile,
    totals: AggregateTotals,
    documents: Sequence[ReducedDocument],
) -> ReportRequest:
    """Compose the single collaborator prompt: brief, anchors, documents, instructions, schema."""
    if not 1 <= len(documents) <= MAX_DOCUMENTS:
        raise ValueError(f"Expected 1-{MAX_DOCUMENTS} documents, got {len(documents)}")

    brief, instructions = BRIEFS[family.family]
    schema = schema_for(family.family)
    anchors = "\n".join(anchor_lines(totals, family.family))
    blocks = []
    for index, reduced in enumerate(documents, start=1):
        profile = family.document(reduced.role)
        blocks.append(_document_block(index, profile.label, profile.description, reduced))

    prompt = "\n\n".join(
        [
            brief,
            "**MANDATORY: USE THESE PRE-CALCULATED TOTALS FOR THE SUMMARY SECTION. DO NOT RECALCULATE OR "
            "HALLUCINATE NUMBERS.** They were computed from every row of the campaign file.\n" + anchors,
            "DATASETS:\n" + "\n\n".join(blocks),
            "--- ANALYSIS INSTRUCTIONS (STRICTLY FOLLOW) ---\n" + instructions,
            "RETURN JSON ONLY matching this schema (All string values must be in Korean):\n"
            + json.dumps(schema, indent=2, ensure_ascii=False),
        ]
    )
    return ReportRequest(family=family.family, prompt=prompt, schema=schema, anchors=totals)


def strip_code_fences(text: str) -> str:
    cleaned = text
    for marker in CODE_FENCE_MARKERS:
        cleaned = cleaned.replace(marker, "")
    return cleaned.strip()


def parse_report_text(text: str | None) -> Dict[str, Any]:
    if not text or not text.strip():
        raise ReportFormatError("Empty response from report collaborator", raw_text=text or "")
    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ReportFormatError(f"Failed to parse report JSON: {exc}", raw_text=text[:2000]) from exc
    if not isinstance(parsed, dict):
        raise ReportFormatError(f"Report JSON must be an object, got {type(parsed).__name__}", raw_text=text[:2000])
    return parsed


def apply_anchors(report: Dict[str, Any], totals: AggregateTotals, family: ReportFamily) -> Dict[str, Any]:
    """Overwrite anchor fields with locally computed values; leaves everything else as generated."""
    anchored = dict(report)
    summary = anchored.get("summary")
    summary = dict(summary) if isinstance(summary, dict) else {}
    summary.update(
        {
            "totalCost": fmt_krw(totals.total_cost),
            "totalRevenue": fmt_krw(totals.total_revenue),
            "totalRoas": fmt_pct(totals.roas),
            "totalConversions": fmt_count(totals.total_conversions),
        }
    )
    anchored["summary"] = summary

    if family == ReportFamily.DISPLAY:
        funnel = anchored.get("funnelAnalysis")
        funnel = dict(funnel) if isinstance(funnel, dict) else {}
        funnel.update(
            {
                "cpm": round(totals.cpm, 2),
                "ctr": round(totals.ctr, 2),
                "cpc": round(totals.cpc, 2),
                "cvr": round(totals.cvr, 2),
                "roas": round(totals.roas, 2),
            }
        )
        anchored["funnelAnalysis"] = funnel
    return anchored
