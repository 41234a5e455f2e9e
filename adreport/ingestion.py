"""CSV export ingestion: line tokenizing, locale number parsing and file reads."""

from __future__ import annotations

import math
import os
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from adreport.domain.models import DocumentRole, RawDocument

FIELD_SEPARATOR = ","
QUOTE_CHAR = '"'
FALLBACK_ENCODINGS: tuple[str, ...] = ("utf-8-sig", "cp949")
# Longest leading decimal literal; ASCII digits only.
_NUMBER_PREFIX_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_NUMBER_NOISE_RE = re.compile(r"[,\"']")


def _parse_warn_ratio() -> float:
    raw = os.getenv("ADREPORT_DEFAULTED_CELL_WARN_RATIO", "0.01")
    try:
        ratio = float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid ADREPORT_DEFAULTED_CELL_WARN_RATIO: {raw}") from exc
    if ratio < 0 or ratio > 1:
        raise ValueError(f"ADREPORT_DEFAULTED_CELL_WARN_RATIO must be in [0, 1], got {ratio}")
    return ratio


DEFAULTED_CELL_WARN_RATIO = _parse_warn_ratio()


def split_fields(line: str, separator: str = FIELD_SEPARATOR, quote: str = QUOTE_CHAR) -> List[str]:
    """Split one export line into trimmed fields, honoring quoted spans."""
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    for char in line:
        if char == quote:
            in_quotes = not in_quotes
        elif char == separator and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())
    return fields


def try_parse_number(token: str | None) -> float | None:
    """Parse a locale-formatted number; None when a non-empty token has no number."""
    if token is None:
        return 0.0
    cleaned = _NUMBER_NOISE_RE.sub("", token).strip()
    if not cleaned:
        return 0.0
    match = _NUMBER_PREFIX_RE.match(cleaned)
    if match is None:
        return None
    value = float(match.group(0))
    if not math.isfinite(value):
        return None
    return value


def parse_number(token: str | None) -> float:
    value = try_parse_number(token)
    return 0.0 if value is None else value


def decode_bytes(data: bytes, encodings: Sequence[str] = FALLBACK_ENCODINGS) -> str:
    last_error: UnicodeDecodeError | None = None
    for encoding in encodings:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError as exc:
            last_error = exc
    if last_error is not None:
        raise last_error
    raise ValueError("No encodings given")


def read_text(path: str | Path) -> str:
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Input export not found: {file_path}")
    return decode_bytes(file_path.read_bytes())


def read_texts(paths: Mapping[DocumentRole, str | Path]) -> Dict[DocumentRole, str]:
    """Read every export concurrently and wait for all of them."""
    if not paths:
        return {}
    with ThreadPoolExecutor(max_workers=len(paths)) as pool:
        futures = {role: pool.submit(read_text, path) for role, path in paths.items()}
        return {role: future.result() for role, future in futures.items()}


def documents_from_texts(texts: Mapping[DocumentRole, str]) -> Dict[DocumentRole, RawDocument]:
    return {
        role: RawDocument.from_text(text, role=role, source=f"{role.value} export")
        for role, text in texts.items()
    }
