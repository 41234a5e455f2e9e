"""Shared fixtures: small platform exports and a scripted report collaborator."""

import json

import pytest

from adreport.domain.models import DocumentRole

SEARCH_CAMPAIGN_CSV = "\n".join(
    [
        "캠페인 보고서,,,,,,,",
        "기간: 2025.11.01 ~ 2025.11.30,,,,,,,",
        "캠페인 유형,캠페인,주별,노출수,클릭수,총비용,전환수,전환매출액",
        '파워링크,브랜드,2025.11.03,"1,000",100,"50,000",5,"200,000"',
        '파워링크,일반,2025.11.03,"2,000",50,"30,000",1,"20,000"',
        '합계,,,"3,000",150,"80,000",6,"220,000"',
        "",
    ]
)

SEARCH_DEVICE_CSV = "\n".join(
    [
        "캠페인,광고그룹,PC/모바일 매체,검색/콘텐츠 매체,노출수,클릭수,총비용,전환수,전환매출액",
        '브랜드,그룹A,PC,검색,500,40,"20,000",2,"80,000"',
        '브랜드,그룹A,모바일,검색,500,60,"30,000",3,"120,000"',
    ]
)

SEARCH_KEYWORD_CSV = "\n".join(
    [
        "검색어 보고서",
        "검색어,노출수,클릭수,총비용,전환수,전환매출액",
        '신발,100,10,"5,000",1,"30,000"',
        '운동화,200,20,"9,000",0,0',
    ]
)

DISPLAY_CAMPAIGN_CSV = "\n".join(
    [
        "캠페인 이름,기간,노출,클릭,총 비용,구매완료수,구매완료 전환 매출액",
        '봄 캠페인,2025.03.01,"6,000",60,"30,000",3,"90,000"',
        '봄 캠페인,2025.03.02,"4,000",40,"20,000",1,"60,000"',
    ]
)

DISPLAY_CREATIVE_CSV = "\n".join(
    [
        "소재 이름,노출,클릭,총 비용,구매완료수,구매완료 전환 매출액",
        '소재1,5000,50,"30,000",2,"90,000"',
        '소재2,5000,50,"20,000",2,"60,000"',
    ]
)

DISPLAY_AUDIENCE_CSV = "\n".join(
    [
        "광고 그룹 이름,연령,성별,노출,클릭,총 비용",
        '그룹1,25-29,여성,3000,30,"20,000"',
        '그룹1,30-34,남성,7000,70,"30,000"',
    ]
)

SEARCH_REPORT = {
    "summary": {
        "totalCost": "₩1",
        "totalRevenue": "₩2",
        "totalRoas": "9999%",
        "totalConversions": "0",
        "roasChange": "+5%",
        "costChange": "-3%",
    },
    "campaignStats": [
        {"name": "브랜드", "cost": 50000, "revenue": 200000, "roas": 400, "clicks": 100},
        {"name": "일반", "cost": 30000, "revenue": 20000, "roas": 66.7, "clicks": 50},
    ],
    "criticalIssues": ["일반 캠페인의 ROAS가 낮습니다."],
    "actionItems": ["일반 캠페인 예산을 브랜드 캠페인으로 이동하세요."],
    "insights": [{"title": "브랜드 효율", "description": "브랜드 캠페인이 매출을 견인합니다.", "severity": "low"}],
}


@pytest.fixture
def search_texts():
    return {
        DocumentRole.CAMPAIGN: SEARCH_CAMPAIGN_CSV,
        DocumentRole.DEVICE: SEARCH_DEVICE_CSV,
        DocumentRole.KEYWORD: SEARCH_KEYWORD_CSV,
    }


@pytest.fixture
def display_texts():
    return {
        DocumentRole.CAMPAIGN: DISPLAY_CAMPAIGN_CSV,
        DocumentRole.CREATIVE: DISPLAY_CREATIVE_CSV,
        DocumentRole.AUDIENCE: DISPLAY_AUDIENCE_CSV,
    }


class ScriptedCollaborator:
    """Replays a list of outcomes: strings are returned, exceptions are raised."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.prompts = []
        self.timeouts = []

    def generate(self, prompt, *, json_output=True, timeout_s=None):
        self.prompts.append(prompt)
        self.timeouts.append(timeout_s)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakeClock:
    """Monotonic clock advanced only by the injected sleep."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fenced_search_report():
    return "```json\n" + json.dumps(SEARCH_REPORT, ensure_ascii=False) + "\n```"


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def collaborator_factory():
    return ScriptedCollaborator
