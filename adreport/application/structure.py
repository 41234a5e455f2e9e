"""Header location, column role resolution and data-row framing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

import polars as pl

from adreport.domain.errors import HeaderNotFoundError
from adreport.domain.models import (
    METRIC_ROLES,
    ColumnRole,
    ColumnRoleMap,
    HeaderLocation,
    RawDocument,
    RowCoverage,
)
from adreport.domain.vocabulary import SUMMARY_ROW_MARKERS
from adreport.ingestion import split_fields, try_parse_number

LINE_NO_COLUMN = "line_no"
LINE_COLUMN = "line"


def _fields_contain(fields: Sequence[str], fragment: str) -> bool:
    needle = fragment.casefold()
    return any(needle in field.casefold() for field in fields)


def locate_header(
    document: RawDocument,
    required: Sequence[Sequence[str]],
    scan_window: int,
) -> HeaderLocation:
    """Return the first line within `scan_window` whose fields satisfy every keyword group."""
    for index, line in enumerate(document.lines[:scan_window]):
        if not line.strip():
            continue
        fields = split_fields(line)
        if all(any(_fields_contain(fields, fragment) for fragment in group) for group in required):
            return HeaderLocation(row_index=index, fields=tuple(fields), line=line)
    raise HeaderNotFoundError(document.source or document.role.value, required, scan_window)


def resolve_column(fields: Sequence[str], fragments: Sequence[str]) -> int | None:
    for fragment in fragments:
        needle = fragment.casefold()
        for index, field in enumerate(fields):
            if needle in field.casefold():
                return index
    return None


def resolve_columns(
    fields: Sequence[str],
    fragments: Mapping[ColumnRole, Sequence[str]],
) -> ColumnRoleMap:
    return ColumnRoleMap(indices={role: resolve_column(fields, candidates) for role, candidates in fragments.items()})


def is_summary_row(fields: Sequence[str], markers: Sequence[str] = SUMMARY_ROW_MARKERS) -> bool:
    if not fields or not fields[0]:
        return False
    first = fields[0].casefold()
    return any(marker.casefold() in first for marker in markers)


@dataclass(frozen=True)
class DataRows:
    """Well-formed data rows below a header, one polars row per source line."""

    frame: pl.DataFrame
    coverage: RowCoverage
    metric_roles: tuple[ColumnRole, ...]


def data_rows_frame(document: RawDocument, header: HeaderLocation, columns: ColumnRoleMap) -> DataRows:
    """Tokenize every line after the header, skipping malformed and summary rows.

    Metric cells are normalized to floats; cells that carry text but no number
    count as defaulted and contribute 0.
    """
    metric_roles = tuple(role for role in METRIC_ROLES if columns.is_resolved(role))
    name_index = columns.get(ColumnRole.NAME)
    header_width = len(header.fields)

    records: Dict[str, List[object]] = {LINE_NO_COLUMN: [], LINE_COLUMN: [], ColumnRole.NAME.value: []}
    for role in metric_roles:
        records[role.value] = []

    data_rows = 0
    malformed_rows = 0
    summary_rows = 0
    defaulted: Dict[ColumnRole, int] = {role: 0 for role in metric_roles}
    for line_no in range(header.row_index + 1, len(document.lines)):
        line = document.lines[line_no]
        if not line.strip():
            continue
        data_rows += 1
        fields = split_fields(line)
        if len(fields) < header_width:
            malformed_rows += 1
            continue
        if is_summary_row(fields):
            summary_rows += 1
            continue

        records[LINE_NO_COLUMN].append(line_no)
        records[LINE_COLUMN].append(line)
        records[ColumnRole.NAME.value].append(fields[name_index] if name_index is not None else None)
        for role in metric_roles:
            value = try_parse_number(fields[columns.get(role)])  # type: ignore[index]
            if value is None:
                defaulted[role] += 1
                value = 0.0
            records[role.value].append(value)

    schema: Dict[str, pl.DataType] = {
        LINE_NO_COLUMN: pl.Int64(),
        LINE_COLUMN: pl.Utf8(),
        ColumnRole.NAME.value: pl.Utf8(),
    }
    for role in metric_roles:
        schema[role.value] = pl.Float64()

    frame = pl.DataFrame(records, schema=schema)
    coverage = RowCoverage(
        data_rows=data_rows,
        used_rows=int(frame.height),
        malformed_rows=malformed_rows,
        summary_rows=summary_rows,
        defaulted_cells=sum(defaulted.values()),
        defaulted_by_role=tuple(defaulted.items()),
    )
    return DataRows(frame=frame, coverage=coverage, metric_roles=metric_roles)
