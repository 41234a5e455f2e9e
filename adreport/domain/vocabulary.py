"""Column vocabularies and document profiles per report family."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Tuple

from adreport.domain.models import ColumnRole, DocumentRole, ReportFamily

KeywordGroups = Tuple[Tuple[str, ...], ...]

# First field containing any of these marks a platform subtotal row.
SUMMARY_ROW_MARKERS: Tuple[str, ...] = ("합계", "총계", "total")

CAMPAIGN_SCAN_WINDOW = 50
DEVICE_SCAN_WINDOW = 50
KEYWORD_SCAN_WINDOW = 20
CREATIVE_SCAN_WINDOW = 50
AUDIENCE_SCAN_WINDOW = 50

SEARCH_MAX_CHARS = 100_000
DISPLAY_MAX_CHARS = 50_000


@dataclass(frozen=True)
class DocumentProfile:
    role: DocumentRole
    label: str
    description: str
    header_keywords: KeywordGroups
    scan_window: int
    top_n: int
    max_chars: int | None = None
    name_fragments: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FamilyProfile:
    family: ReportFamily
    title: str
    documents: Tuple[DocumentProfile, ...]
    authoritative_role: DocumentRole
    metric_fragments: Mapping[ColumnRole, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def roles(self) -> Tuple[DocumentRole, ...]:
        return tuple(profile.role for profile in self.documents)

    def document(self, role: DocumentRole) -> DocumentProfile:
        for profile in self.documents:
            if profile.role == role:
                return profile
        raise KeyError(f"{role.value} is not a document of the {self.family.value} family")

    def fragments_for(self, role: DocumentRole) -> Dict[ColumnRole, Tuple[str, ...]]:
        fragments = dict(self.metric_fragments)
        fragments[ColumnRole.NAME] = self.document(role).name_fragments
        return fragments


# Ordered most specific first; the resolver takes the first fragment that hits any column.
SEARCH_METRIC_FRAGMENTS: Dict[ColumnRole, Tuple[str, ...]] = {
    ColumnRole.COST: ("총비용", "Cost", "비용"),
    ColumnRole.REVENUE: ("전환매출액", "매출", "Revenue"),
    ColumnRole.CONVERSIONS: ("전환수", "Conversions"),
    ColumnRole.CLICKS: ("클릭수", "Clicks"),
    ColumnRole.IMPRESSIONS: ("노출수", "Impressions"),
}

DISPLAY_METRIC_FRAGMENTS: Dict[ColumnRole, Tuple[str, ...]] = {
    ColumnRole.COST: ("총 비용", "총비용", "Cost", "비용"),
    ColumnRole.REVENUE: ("구매완료 전환 매출액", "전환 매출액", "전환매출액", "Revenue", "매출"),
    ColumnRole.CONVERSIONS: ("구매완료수", "전환수", "Conversions"),
    ColumnRole.CLICKS: ("클릭수", "클릭", "Clicks"),
    ColumnRole.IMPRESSIONS: ("노출수", "노출", "Impressions"),
}

_SEARCH_COST_KEYWORDS: Tuple[str, ...] = ("총비용", "Cost")
_DISPLAY_COST_KEYWORDS: Tuple[str, ...] = ("총 비용", "총비용", "Cost")

SEARCH_FAMILY = FamilyProfile(
    family=ReportFamily.SEARCH,
    title="네이버 검색광고",
    authoritative_role=DocumentRole.CAMPAIGN,
    metric_fragments=SEARCH_METRIC_FRAGMENTS,
    documents=(
        DocumentProfile(
            role=DocumentRole.CAMPAIGN,
            label="CAMPAIGN (Weekly)",
            description="캠페인 유형, 캠페인, 주별 구분 (총비용/노출수/클릭수/전환수/매출/ROAS)",
            header_keywords=(_SEARCH_COST_KEYWORDS,),
            scan_window=CAMPAIGN_SCAN_WINDOW,
            top_n=500,
            max_chars=SEARCH_MAX_CHARS,
            name_fragments=("캠페인", "Campaign"),
        ),
        DocumentProfile(
            role=DocumentRole.DEVICE,
            label="DEVICE/PLACEMENT",
            description="캠페인, 광고그룹, PC/모바일, 검색/콘텐츠 구분",
            header_keywords=(_SEARCH_COST_KEYWORDS,),
            scan_window=DEVICE_SCAN_WINDOW,
            top_n=300,
            max_chars=SEARCH_MAX_CHARS,
            name_fragments=("광고그룹", "캠페인", "Ad group", "Campaign"),
        ),
        DocumentProfile(
            role=DocumentRole.KEYWORD,
            label="TOP KEYWORDS (By Cost)",
            description="검색어별 성과 (비용 상위 검색어만 포함)",
            header_keywords=(("검색어", "키워드"), _SEARCH_COST_KEYWORDS),
            scan_window=KEYWORD_SCAN_WINDOW,
            top_n=100,
            max_chars=SEARCH_MAX_CHARS,
            name_fragments=("검색어", "키워드", "Keyword", "Search term"),
        ),
    ),
)

DISPLAY_FAMILY = FamilyProfile(
    family=ReportFamily.DISPLAY,
    title="네이버 GFA",
    authoritative_role=DocumentRole.CAMPAIGN,
    metric_fragments=DISPLAY_METRIC_FRAGMENTS,
    documents=(
        DocumentProfile(
            role=DocumentRole.CAMPAIGN,
            label="CAMPAIGN/PERIOD DATA",
            description="캠페인 이름, 기간(일) 포함 (퍼널 및 트렌드 분석용)",
            header_keywords=(_DISPLAY_COST_KEYWORDS,),
            scan_window=CAMPAIGN_SCAN_WINDOW,
            top_n=500,
            max_chars=DISPLAY_MAX_CHARS,
            name_fragments=("캠페인 이름", "캠페인", "Campaign"),
        ),
        DocumentProfile(
            role=DocumentRole.CREATIVE,
            label="CREATIVE DATA",
            description="소재별 성과 (도달, 빈도, CTR)",
            header_keywords=(_DISPLAY_COST_KEYWORDS,),
            scan_window=CREATIVE_SCAN_WINDOW,
            top_n=100,
            max_chars=DISPLAY_MAX_CHARS,
            name_fragments=("소재 이름", "소재", "Creative"),
        ),
        DocumentProfile(
            role=DocumentRole.AUDIENCE,
            label="AUDIENCE/GROUP DATA",
            description="광고 그룹, 연령, 성별, 지면별 성과",
            header_keywords=(_DISPLAY_COST_KEYWORDS,),
            scan_window=AUDIENCE_SCAN_WINDOW,
            top_n=200,
            max_chars=DISPLAY_MAX_CHARS,
            name_fragments=("광고 그룹 이름", "광고 그룹", "Ad group"),
        ),
    ),
)

FAMILIES: Dict[ReportFamily, FamilyProfile] = {
    ReportFamily.SEARCH: SEARCH_FAMILY,
    ReportFamily.DISPLAY: DISPLAY_FAMILY,
}


def family_profile(family: ReportFamily | str) -> FamilyProfile:
    return FAMILIES[ReportFamily(family)]
