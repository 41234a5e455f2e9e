"""Domain layer package."""

from .errors import (
    AdReportError,
    CollaboratorError,
    DeadlineExceededError,
    HeaderNotFoundError,
    IngestionError,
    InputTooLargeError,
    MissingColumnError,
    MissingDocumentError,
    QuotaExceededError,
    ReportFormatError,
    TransientUnavailableError,
    classify_collaborator_error,
)
from .models import (
    AggregateTotals,
    ColumnRole,
    ColumnRoleMap,
    DocumentOutcome,
    DocumentRole,
    HeaderLocation,
    RawDocument,
    ReducedDocument,
    ReportFamily,
    RowCoverage,
)
from .vocabulary import DISPLAY_FAMILY, SEARCH_FAMILY, DocumentProfile, FamilyProfile, family_profile

__all__ = [
    "AdReportError",
    "CollaboratorError",
    "DeadlineExceededError",
    "HeaderNotFoundError",
    "IngestionError",
    "InputTooLargeError",
    "MissingColumnError",
    "MissingDocumentError",
    "QuotaExceededError",
    "ReportFormatError",
    "TransientUnavailableError",
    "classify_collaborator_error",
    "AggregateTotals",
    "ColumnRole",
    "ColumnRoleMap",
    "DocumentOutcome",
    "DocumentRole",
    "HeaderLocation",
    "RawDocument",
    "ReducedDocument",
    "ReportFamily",
    "RowCoverage",
    "DISPLAY_FAMILY",
    "SEARCH_FAMILY",
    "DocumentProfile",
    "FamilyProfile",
    "family_profile",
]
