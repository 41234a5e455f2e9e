"""Error taxonomy for report ingestion and collaborator calls."""

from __future__ import annotations

from typing import Any, Sequence


class AdReportError(Exception):
    """Base error. `user_message` is safe to show to the end user."""

    user_message = "AI 분석 생성에 실패했습니다. 잠시 후 다시 시도해주세요."


class IngestionError(AdReportError, ValueError):
    user_message = "업로드한 파일 형식을 확인해주세요."


class HeaderNotFoundError(IngestionError):
    user_message = "헤더 행을 찾을 수 없습니다. 광고 관리자에서 다운로드한 원본 리포트인지 확인해주세요."

    def __init__(self, source: str, required: Sequence[Sequence[str]], scan_window: int) -> None:
        self.source = source
        self.required = tuple(tuple(group) for group in required)
        self.scan_window = scan_window
        groups = " & ".join("/".join(group) for group in self.required)
        super().__init__(f"Header row not found in {source} within first {scan_window} lines (required: {groups})")


class MissingColumnError(IngestionError):
    user_message = "필수 컬럼(총비용)을 찾을 수 없습니다. 파일 형식을 확인해주세요."

    def __init__(self, source: str, column_role: str) -> None:
        self.source = source
        self.column_role = column_role
        super().__init__(f"Required column '{column_role}' not found in {source}")


class MissingDocumentError(IngestionError):
    user_message = "모든 데이터 파일을 업로드해주세요."

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required documents: {self.missing}")


class InputTooLargeError(IngestionError):
    user_message = "업로드하는 데이터가 너무 큽니다. 기간조정이나 비용필터를 통해 데이터를 간소화 해주세요."

    def __init__(self, total_bytes: int, limit_bytes: int) -> None:
        self.total_bytes = total_bytes
        self.limit_bytes = limit_bytes
        super().__init__(f"Input too large: {total_bytes} bytes (limit {limit_bytes})")


class CollaboratorError(AdReportError, RuntimeError):
    pass


class TransientUnavailableError(CollaboratorError):
    user_message = "사용량이 많아 AI 서버가 혼잡합니다. 약 30초 후 다시 시도해주세요."

    def __init__(self, message: str = "Collaborator is temporarily unavailable", attempts: int = 0) -> None:
        self.attempts = attempts
        super().__init__(message)


class QuotaExceededError(CollaboratorError):
    user_message = "요청 한도에 도달했습니다. 잠시 기다린 후 다시 시도해주세요."


class DeadlineExceededError(CollaboratorError):
    user_message = "AI 보고서 생성 시간이 초과되었습니다. 잠시 후 다시 시도해주세요."

    def __init__(self, deadline_s: float) -> None:
        self.deadline_s = deadline_s
        super().__init__(f"Report request exceeded its {deadline_s:.1f}s deadline")


class ReportFormatError(CollaboratorError):
    user_message = "AI 보고서 재생성에 실패했습니다. 다시 시도해주세요. 이번 요청은 사용량에 포함되지 않습니다."

    def __init__(self, message: str, raw_text: str = "") -> None:
        self.raw_text = raw_text
        super().__init__(message)


TRANSIENT_STATUS_CODES: frozenset[int] = frozenset({503})
QUOTA_STATUS_CODES: frozenset[int] = frozenset({429})
TRANSIENT_STATUSES: tuple[str, ...] = ("UNAVAILABLE",)
QUOTA_STATUSES: tuple[str, ...] = ("RESOURCE_EXHAUSTED",)
TRANSIENT_MESSAGE_MARKERS: tuple[str, ...] = ("overloaded", "unavailable", "try again later")
QUOTA_MESSAGE_MARKERS: tuple[str, ...] = ("quota", "rate limit", "resource_exhausted", "resource exhausted")


def _status_code(exc: BaseException) -> int | None:
    for attr in ("code", "status_code"):
        value: Any = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def classify_collaborator_error(exc: BaseException) -> CollaboratorError:
    """Map an SDK/transport exception to overload, quota, or generic failure."""
    if isinstance(exc, CollaboratorError):
        return exc

    code = _status_code(exc)
    status = str(getattr(exc, "status", "") or "").upper()
    message = str(getattr(exc, "message", "") or exc).lower()

    # Quota first: a 429 body can also mention "try again later".
    if code in QUOTA_STATUS_CODES or status in QUOTA_STATUSES or any(m in message for m in QUOTA_MESSAGE_MARKERS):
        return QuotaExceededError(str(exc))
    if (
        code in TRANSIENT_STATUS_CODES
        or status in TRANSIENT_STATUSES
        or any(m in message for m in TRANSIENT_MESSAGE_MARKERS)
    ):
        return TransientUnavailableError(str(exc))
    if isinstance(exc, TimeoutError) or "timeout" in type(exc).__name__.lower():
        return TransientUnavailableError(f"Collaborator call timed out: {exc}")
    return CollaboratorError(str(exc))
