"""Provider documentation use cases."""

from tfdc.application.provider.export import (
    PreparedExport,
    export_docs,
    normalize_categories,
    preflight_export_options,
)
from tfdc.application.provider.search import SearchOptions, SearchResult, get_doc, search_docs

__all__ = [
    "PreparedExport",
    "SearchOptions",
    "SearchResult",
    "export_docs",
    "get_doc",
    "normalize_categories",
    "preflight_export_options",
    "search_docs",
]
