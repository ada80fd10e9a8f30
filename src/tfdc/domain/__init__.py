"""Domain layer - pure data types with no I/O."""

from tfdc.domain.errors import NotFoundError, TfdcError, ValidationError, WriteError
from tfdc.domain.models import (
    DocContent,
    DocumentDetail,
    DocumentSummary,
    ExportOptions,
    ExportSummary,
    ManifestEntry,
    PlannedFile,
)
from tfdc.domain.types import (
    DEFAULT_NAMESPACE,
    DEFAULT_PATH_TEMPLATE,
    PROVIDER_DOC_CATEGORIES,
    extension_for_format,
)

__all__ = [
    "DEFAULT_NAMESPACE",
    "DEFAULT_PATH_TEMPLATE",
    "PROVIDER_DOC_CATEGORIES",
    "DocContent",
    "DocumentDetail",
    "DocumentSummary",
    "ExportOptions",
    "ExportSummary",
    "ManifestEntry",
    "NotFoundError",
    "PlannedFile",
    "TfdcError",
    "ValidationError",
    "WriteError",
    "extension_for_format",
]
