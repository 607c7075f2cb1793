"""Domain layer: typed results and closed enumerations."""

from .models import (
    Author,
    ExportFormat,
    Library,
    LibraryDetail,
    LinkType,
    Metrics,
    NetworkType,
    Paper,
    PdfLink,
    PdfLinkType,
    Permission,
    ResolvedReference,
    SearchResponse,
    SetOperation,
    Sort,
    SortDirection,
)

__all__ = [
    "Author",
    "ExportFormat",
    "Library",
    "LibraryDetail",
    "LinkType",
    "Metrics",
    "NetworkType",
    "Paper",
    "PdfLink",
    "PdfLinkType",
    "Permission",
    "ResolvedReference",
    "SearchResponse",
    "SetOperation",
    "Sort",
    "SortDirection",
]
