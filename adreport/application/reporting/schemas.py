"""Output schemas and analyst briefs per report family.

Every string-valued field is natural-language Korean. The schema trees are
rendered into the prompt as JSON and double as the list of breakdown tables
the exporter writes out.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from adreport.domain.models import ReportFamily

SUMMARY_SCHEMA: Dict[str, Any] = {
    "totalCost": "string (formatted KRW)",
    "totalRevenue": "string (formatted KRW)",
    "totalRoas": "string (%)",
    "totalConversions": "string",
    "roasChange": "string (+/- %)",
    "costChange": "string (+/- %)",
}

INSIGHT_SCHEMA: Dict[str, Any] = {
    "title": "string",
    "description": "string (Long detailed paragraph)",
    "severity": "high | medium | low",
}

TREND_POINT_SCHEMA: Dict[str, Any] = {
    "name": "string (Date/Week e.g. 2025.11.10)",
    "value": "number (revenue)",
    "cost": "number",
    "roas": "number",
}

SEARCH_SCHEMA: Dict[str, Any] = {
    "summary": SUMMARY_SCHEMA,
    "weeklyStats": [
        {"date": "string", "cost": "number", "revenue": "number", "roas": "number", "clicks": "number", "conversions": "number"}
    ],
    "campaignStats": [
        {"name": "string", "cost": "number", "revenue": "number", "roas": "number", "clicks": "number"}
    ],
    "deviceStats": [
        {
            "device": "string (PC/Mobile)",
            "placement": "string (Search/Content)",
            "cost": "number",
            "revenue": "number",
            "roas": "number",
            "clicks": "number",
        }
    ],
    "topKeywords": [
        {"keyword": "string", "cost": "number", "revenue": "number", "roas": "number", "clicks": "number", "conversions": "number"}
    ],
    "criticalIssues": ["string (Long detailed paragraph)"],
    "actionItems": ["string (Long detailed paragraph)"],
    "insights": [INSIGHT_SCHEMA],
    "trendData": [TREND_POINT_SCHEMA],
    "performanceByDevice": [{"name": "PC | Mobile", "value": "number (roas)"}],
    "keywordOpportunities": ["string"],
    "negativeKeywords": ["string"],
}

AUDIENCE_STAT_SCHEMA: Dict[str, Any] = {
    "segment": "string",
    "cost": "number",
    "revenue": "number",
    "roas": "number",
    "clicks": "number",
}

DISPLAY_SCHEMA: Dict[str, Any] = {
    "summary": SUMMARY_SCHEMA,
    "funnelAnalysis": {
        "cpm": "number",
        "ctr": "number",
        "cpc": "number",
        "cvr": "number",
        "roas": "number",
        "diagnosis": "string (Korean funnel diagnosis)",
    },
    "trendData": [TREND_POINT_SCHEMA],
    "creativeStats": [
        {
            "creativeName": "string",
            "cost": "number",
            "revenue": "number",
            "roas": "number",
            "clicks": "number",
            "ctr": "number",
            "conversions": "number",
            "reach": "number",
            "frequency": "number",
        }
    ],
    "audienceAgeStats": [AUDIENCE_STAT_SCHEMA],
    "audienceMediaStats": [AUDIENCE_STAT_SCHEMA],
    "criticalIssues": ["string (Be specific: Name, Metric, Problem)"],
    "actionItems": ["string (Be specific: Name, Action, Reason)"],
    "insights": [INSIGHT_SCHEMA],
}

SCHEMAS: Dict[ReportFamily, Dict[str, Any]] = {
    ReportFamily.SEARCH: SEARCH_SCHEMA,
    ReportFamily.DISPLAY: DISPLAY_SCHEMA,
}

SEARCH_BRIEF = (
    "You are AdAiAn, a high-end Advertising AI Analyst expert in Naver Search Ads.\n"
    "Analyze the provided data and provide a PROFESSIONAL, IN-DEPTH Report.\n"
    "IMPORTANT: ALL OUTPUT MUST BE IN KOREAN. (한국어로 작성해주세요)"
)

DISPLAY_BRIEF = (
    "You are AdAiAn, a Naver GFA (Glad for Advertisers - Display Ads) Expert.\n"
    "Analyze the provided CSV data for a Korean brand.\n"
    "IMPORTANT: ALL OUTPUT MUST BE IN KOREAN. (한국어로 작성해주세요)"
)

SEARCH_INSTRUCTIONS = """\
1. **Summary**: Use the provided totals verbatim. Estimate roasChange/costChange from the weekly rows.
2. **Trend Data (Weekly)**:
   - The 'name' field MUST be the Date/Week string (e.g. "2025.11.10") from the Campaign Data.
   - Aggregate ALL campaigns for each week to get the total Cost and ROAS for that week.
3. **Device Performance**:
   - PC ROAS = Sum(Revenue of PC rows) / Sum(Cost of PC rows) * 100; Mobile likewise.
   - DO NOT sum ROAS percentages; recalculate from totals.
4. **Critical Issues & Action Items (LONG FORM)**:
   - At least 3-4 detailed sentences per point: the Cause, the Effect, and the Specific Solution.
   - Look for high spend/zero conversion keywords, Mobile vs PC disparities, low ROAS campaigns,
     and 'Content' placement waste. Mention specific campaign names or terms.
5. **Top Keywords**: Return the keywords provided (pre-filtered by cost, high to low).
6. **Keyword Opportunities & Negatives**: Suggest keywords to expand and negative keywords to add."""

DISPLAY_INSTRUCTIONS = """\
1. **Summary & Funnel Diagnosis**: Diagnose the funnel CPM -> CTR -> CPC -> CVR -> ROAS and identify the bottleneck.
2. **Critical Issues**:
   - INEFFICIENT CREATIVES: creatives with high spend (> 50,000 KRW) but low ROAS (< 150%) or low CTR.
   - FATIGUE: creatives with frequency above 3~4 that show declining CTR.
   - INEFFICIENT TARGETING: 'Ad Group' + 'Age/Gender' combinations with high spend but low ROAS.
3. **Action Items**: OFF actions (what to pause), SCALE actions (where to add budget), CREATIVE REFRESH.
4. **Creative Analysis**: List top creatives sorted by Cost (high to low).
5. **Audience Analysis**:
   - audienceAgeStats: aggregate by age group (e.g. "20-24", "30-34"), sorted by Cost (high to low).
   - audienceMediaStats: aggregate by media/platform/OS (e.g. "Smart Channel", "Android"), sorted by Cost."""

BRIEFS: Dict[ReportFamily, Tuple[str, str]] = {
    ReportFamily.SEARCH: (SEARCH_BRIEF, SEARCH_INSTRUCTIONS),
    ReportFamily.DISPLAY: (DISPLAY_BRIEF, DISPLAY_INSTRUCTIONS),
}


def schema_for(family: ReportFamily) -> Dict[str, Any]:
    return SCHEMAS[family]


def table_keys(family: ReportFamily) -> Tuple[str, ...]:
    """Top-level keys whose schema is a list of row objects."""
    return tuple(
        key
        for key, value in SCHEMAS[family].items()
        if isinstance(value, list) and value and isinstance(value[0], dict)
    )
