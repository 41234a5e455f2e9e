"""Tests for header location, column resolution and row framing."""

import pytest

from adreport.application.structure import (
    data_rows_frame,
    is_summary_row,
    locate_header,
    resolve_column,
    resolve_columns,
)
from adreport.domain.errors import HeaderNotFoundError, IngestionError
from adreport.domain.models import ColumnRole, DocumentRole, RawDocument
from adreport.domain.vocabulary import SEARCH_FAMILY, SEARCH_METRIC_FRAGMENTS

COST_KEYWORDS = (("총비용", "Cost"),)
KEYWORD_KEYWORDS = (("검색어", "키워드"), ("총비용", "Cost"))


def _document(lines, role=DocumentRole.CAMPAIGN):
    return RawDocument.from_text("\n".join(lines), role=role, source=f"{role.value} export")


class TestLocateHeader:
    """The header is the first line within the scan window holding every keyword group."""

    def test_skips_metadata_preamble(self):
        document = _document(["리포트 이름,검색광고", "조회 기간,2025.11", "", "캠페인,총비용,클릭수", "A,10,1"])
        header = locate_header(document, COST_KEYWORDS, scan_window=50)
        assert header.row_index == 3
        assert header.fields == ("캠페인", "총비용", "클릭수")
        assert header.line == "캠페인,총비용,클릭수"

    def test_header_beyond_scan_window_is_not_found(self):
        preamble = [f"메타데이터 {i}" for i in range(60)]
        document = _document(preamble + ["캠페인,총비용", "A,10"])
        with pytest.raises(HeaderNotFoundError) as excinfo:
            locate_header(document, COST_KEYWORDS, scan_window=50)
        assert excinfo.value.scan_window == 50
        assert isinstance(excinfo.value, IngestionError)

    def test_keyword_window_is_narrower(self):
        preamble = [f"메타 {i}" for i in range(30)]
        document = _document(preamble + ["검색어,총비용", "신발,10"], role=DocumentRole.KEYWORD)
        with pytest.raises(HeaderNotFoundError):
            locate_header(document, KEYWORD_KEYWORDS, scan_window=20)
        assert locate_header(document, KEYWORD_KEYWORDS, scan_window=50).row_index == 30

    def test_every_keyword_group_must_match(self):
        document = _document(["캠페인,총비용", "검색어,클릭수,총비용", "신발,1,10"], role=DocumentRole.KEYWORD)
        header = locate_header(document, KEYWORD_KEYWORDS, scan_window=20)
        assert header.row_index == 1

    def test_matching_is_case_insensitive(self):
        document = _document(["Campaign,COST,Clicks", "A,10,1"])
        assert locate_header(document, COST_KEYWORDS, scan_window=50).row_index == 0

    def test_empty_document(self):
        with pytest.raises(HeaderNotFoundError):
            locate_header(_document([""]), COST_KEYWORDS, scan_window=50)


class TestResolveColumns:
    """Fragments are tried in priority order; the first that hits any column wins."""

    def test_specific_fragment_beats_earlier_generic_column(self):
        fields = ["광고비용 비중", "총비용"]
        assert resolve_column(fields, ("총비용", "Cost", "비용")) == 1

    def test_generic_fragment_used_when_specific_absent(self):
        assert resolve_column(["광고비용"], ("총비용", "Cost", "비용")) == 0

    def test_case_insensitive(self):
        assert resolve_column(["Campaign", "COST"], ("Cost",)) == 1

    def test_unresolved_role_is_none(self):
        columns = resolve_columns(["검색어", "노출수", "클릭수"], SEARCH_METRIC_FRAGMENTS)
        assert columns.get(ColumnRole.COST) is None
        assert columns.is_resolved(ColumnRole.IMPRESSIONS)
        assert ColumnRole.COST not in columns.resolved_roles

    def test_search_header_roles(self):
        fields = ["캠페인", "노출수", "클릭수", "총비용", "전환수", "전환매출액"]
        columns = resolve_columns(fields, SEARCH_FAMILY.fragments_for(DocumentRole.CAMPAIGN))
        assert columns.get(ColumnRole.COST) == 3
        assert columns.get(ColumnRole.REVENUE) == 5
        assert columns.get(ColumnRole.CONVERSIONS) == 4
        assert columns.get(ColumnRole.CLICKS) == 2
        assert columns.get(ColumnRole.IMPRESSIONS) == 1
        assert columns.get(ColumnRole.NAME) == 0


class TestSummaryRows:
    @pytest.mark.parametrize("first", ["합계", "총계", "Total", "TOTAL 합계"])
    def test_markers(self, first):
        assert is_summary_row([first, "1"]) is True

    @pytest.mark.parametrize("fields", [["브랜드", "1"], ["", "합계"], []])
    def test_non_summary(self, fields):
        assert is_summary_row(fields) is False


class TestDataRowsFrame:
    """Coverage accounts for every non-blank line after the header."""

    def test_coverage_counts(self):
        document = _document(
            [
                "캠페인,총비용,클릭수",
                "A,\"1,000\",10",
                "",
                "B,-,5",
                "broken",
                "합계,1000,15",
                "C,200,abc",
            ]
        )
        header = locate_header(document, COST_KEYWORDS, scan_window=50)
        columns = resolve_columns(header.fields, SEARCH_FAMILY.fragments_for(DocumentRole.CAMPAIGN))

        rows = data_rows_frame(document, header, columns)

        assert rows.coverage.data_rows == 5
        assert rows.coverage.used_rows == 3
        assert rows.coverage.malformed_rows == 1
        assert rows.coverage.summary_rows == 1
        assert rows.coverage.defaulted_cells == 2
        assert dict(rows.coverage.defaulted_by_role) == {ColumnRole.COST: 1, ColumnRole.CLICKS: 1}
        assert rows.frame.get_column("cost").to_list() == [1000.0, 0.0, 200.0]
        assert rows.frame.get_column("clicks").to_list() == [10.0, 5.0, 0.0]
        assert rows.frame.get_column("name").to_list() == ["A", "B", "C"]
        assert rows.frame.get_column("line_no").to_list() == [1, 3, 6]

    def test_extra_trailing_fields_are_tolerated(self):
        document = _document(["캠페인,총비용", "A,10,extra"])
        header = locate_header(document, COST_KEYWORDS, scan_window=50)
        columns = resolve_columns(header.fields, SEARCH_FAMILY.fragments_for(DocumentRole.CAMPAIGN))
        rows = data_rows_frame(document, header, columns)
        assert rows.coverage.used_rows == 1
        assert rows.frame.get_column("cost").to_list() == [10.0]

    def test_header_only_document_gives_empty_frame(self):
        document = _document(["캠페인,총비용"])
        header = locate_header(document, COST_KEYWORDS, scan_window=50)
        columns = resolve_columns(header.fields, SEARCH_FAMILY.fragments_for(DocumentRole.CAMPAIGN))
        rows = data_rows_frame(document, header, columns)
        assert rows.frame.height == 0
        assert rows.coverage.used_rows == 0
