"""
Domain Models - Typed results of SciX API operations.

Architecture Decision:
    Plain dataclasses, consistent with the rest of the package. Every model
    has ``to_dict()`` so results can be re-serialized to JSON at the CLI and
    MCP boundaries.

Closed enumerations (export formats, permission levels, library set
operations, link types, network types) are ``Enum``s whose values are the
exact strings the API expects on the wire.

Example:
    >>> Author.from_ads_format("Einstein, Albert").display_name
    'Albert Einstein'
    >>> ExportFormat.from_str_loose("BibTeX").value
    'bibtex'
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

ABS_URL_TEMPLATE = "https://scixplorer.org/abs/{bibcode}"


class _WireEnum(Enum):
    """Enum whose value is the wire-format string."""

    @classmethod
    def from_str_loose(cls, value: str | None):
        """Parse case-insensitively; ``None`` when unknown."""
        if value is None:
            return None
        wanted = value.strip().lower()
        for member in cls:
            if member.value == wanted:
                return member
        return None

    @classmethod
    def choices(cls) -> list[str]:
        return [member.value for member in cls]

    def __str__(self) -> str:
        return self.value


class ExportFormat(_WireEnum):
    """Citation export formats supported by the export endpoint."""

    BIBTEX = "bibtex"
    BIBTEX_ABS = "bibtexabs"
    AASTEX = "aastex"
    ICARUS = "icarus"
    MNRAS = "mnras"
    SOPH = "soph"
    RIS = "ris"
    ENDNOTE = "endnote"
    MEDLARS = "medlars"
    IEEE = "ieee"
    CSL = "csl"
    DCXML = "dcxml"
    REFXML = "refxml"
    REFABSXML = "refabsxml"
    VOTABLE = "votable"
    RSS = "rss"
    CUSTOM = "custom"


class Permission(_WireEnum):
    """Collaborator permission levels on a library."""

    OWNER = "owner"
    ADMIN = "admin"
    WRITE = "write"
    READ = "read"


class SetOperation(_WireEnum):
    """Library set operations."""

    UNION = "union"
    INTERSECTION = "intersection"
    DIFFERENCE = "difference"
    COPY = "copy"
    EMPTY = "empty"

    @property
    def needs_sources(self) -> bool:
        return self is not SetOperation.EMPTY


class LinkType(_WireEnum):
    """Link resolver categories."""

    ESOURCE = "esource"
    DATA = "data"
    CITATION = "citation"
    REFERENCE = "reference"
    COREADS = "coreads"


class NetworkType(_WireEnum):
    """Network visualization types."""

    AUTHOR = "author"
    PAPER = "paper"


class SortDirection(_WireEnum):
    ASC = "asc"
    DESC = "desc"


class PdfLinkType(_WireEnum):
    """Source type for a PDF link."""

    ARXIV = "arxiv"
    PUBLISHER = "publisher"
    ADS_SCAN = "ads_scan"
    DIRECT = "direct"


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, list | tuple):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    return value


class _Serializable:
    def to_dict(self) -> dict[str, Any]:
        return {f.name: _to_jsonable(getattr(self, f.name)) for f in fields(self)}  # type: ignore[arg-type]


@dataclass(frozen=True)
class Sort(_Serializable):
    """Sort specification, rendered as ``"<field> <direction>"``."""

    field: str = "date"
    direction: SortDirection = SortDirection.DESC

    @classmethod
    def parse(cls, text: str | None) -> Sort:
        """Parse ``"citation_count desc"``; direction defaults to desc."""
        if not text or not text.strip():
            return cls()
        parts = text.split()
        direction = SortDirection.ASC if len(parts) > 1 and parts[1].lower() == "asc" else SortDirection.DESC
        return cls(parts[0], direction)

    @classmethod
    def date_desc(cls) -> Sort:
        return cls("date", SortDirection.DESC)

    @classmethod
    def citation_count_desc(cls) -> Sort:
        return cls("citation_count", SortDirection.DESC)

    @classmethod
    def score_desc(cls) -> Sort:
        return cls("score", SortDirection.DESC)

    def __str__(self) -> str:
        return f"{self.field} {self.direction.value}"


@dataclass
class Author(_Serializable):
    """
    An author of a paper.

    ``name`` is the raw name as returned by the API ("Last, First M.").
    """

    name: str
    family_name: str
    given_name: str | None = None

    @classmethod
    def from_ads_format(cls, name: str) -> Author:
        """Parse "Last, First M."; fall back to "First Last" or a single word."""
        if "," in name:
            family, given = name.split(",", 1)
            return cls(name=name, family_name=family.strip(), given_name=given.strip())
        words = name.split()
        if len(words) > 1:
            return cls(name=name, family_name=words[-1], given_name=" ".join(words[:-1]))
        return cls(name=name, family_name=name)

    @property
    def display_name(self) -> str:
        """Format as "First M. Last"."""
        if self.given_name:
            return f"{self.given_name} {self.family_name}"
        return self.family_name

    @property
    def bibtex_name(self) -> str:
        """Format as "Last, First M."."""
        if self.given_name:
            return f"{self.family_name}, {self.given_name}"
        return self.family_name


@dataclass
class PdfLink(_Serializable):
    url: str
    link_type: PdfLinkType
    label: str

    @classmethod
    def from_esources(
        cls,
        esources: list[str],
        doi: str | None,
        arxiv_id: str | None,
        bibcode: str,
    ) -> list[PdfLink]:
        """
        Build PDF links from esource flags, DOI, arXiv ID and bibcode.

        Priority: arXiv PDF > DOI/publisher > ADS scans > fallbacks.
        """
        links: list[PdfLink] = []
        has_preprint = False
        has_publisher = False

        for esource in esources:
            flag = esource.upper()
            if flag == "EPRINT_PDF" and arxiv_id:
                links.append(cls._arxiv(arxiv_id))
                has_preprint = True
            elif flag in ("PUB_PDF", "PUB_HTML") and doi and not has_publisher:
                links.append(cls._publisher(doi))
                has_publisher = True
            elif flag in ("ADS_PDF", "ADS_SCAN"):
                links.append(
                    cls(
                        url=f"https://articles.adsabs.harvard.edu/pdf/{bibcode}",
                        link_type=PdfLinkType.ADS_SCAN,
                        label="ADS Scan",
                    )
                )

        if not has_preprint and arxiv_id:
            links.append(cls._arxiv(arxiv_id))
        if not has_publisher and doi:
            links.append(cls._publisher(doi))
        return links

    @classmethod
    def _arxiv(cls, arxiv_id: str) -> PdfLink:
        return cls(url=f"https://arxiv.org/pdf/{arxiv_id}.pdf", link_type=PdfLinkType.ARXIV, label="arXiv PDF")

    @classmethod
    def _publisher(cls, doi: str) -> PdfLink:
        return cls(url=f"https://doi.org/{doi}", link_type=PdfLinkType.PUBLISHER, label="Publisher")


@dataclass
class Paper(_Serializable):
    """A document from search results."""

    bibcode: str
    title: str
    authors: list[Author] = field(default_factory=list)
    year: int | None = None
    publication: str | None = None
    abstract: str | None = None
    doi: str | None = None
    arxiv_id: str | None = None
    identifiers: list[str] = field(default_factory=list)
    esources: list[str] = field(default_factory=list)
    citation_count: int | None = None
    read_count: int | None = None
    doctype: str | None = None
    properties: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    affiliations: list[str] = field(default_factory=list)
    volume: str | None = None
    page: str | None = None
    pdf_links: list[PdfLink] = field(default_factory=list)
    url: str = ""

    def __post_init__(self) -> None:
        if not self.url:
            self.url = ABS_URL_TEMPLATE.format(bibcode=self.bibcode)

    @property
    def first_author(self) -> Author | None:
        return self.authors[0] if self.authors else None


@dataclass
class SearchResponse(_Serializable):
    """One page of search results; ``num_found`` is the total match count."""

    papers: list[Paper] = field(default_factory=list)
    num_found: int = 0

    def __len__(self) -> int:
        return len(self.papers)

    def __iter__(self):
        return iter(self.papers)

    @property
    def bibcodes(self) -> list[str]:
        return [paper.bibcode for paper in self.papers]


# =============================================================================
# Metrics
# =============================================================================


def _pick(data: dict[str, Any], cls: type) -> Any:
    names = {f.name for f in fields(cls)}
    return cls(**{k.replace(" ", "_").replace("-", "_"): v for k, v in data.items() if k.replace(" ", "_").replace("-", "_") in names})


@dataclass
class BasicStatsEntry(_Serializable):
    number_of_papers: int | None = None
    normalized_paper_count: float | None = None
    total_number_of_reads: int | None = None
    average_number_of_reads: float | None = None
    median_number_of_reads: float | None = None
    total_number_of_downloads: int | None = None


@dataclass
class CitationStatsEntry(_Serializable):
    number_of_citing_papers: int | None = None
    total_number_of_citations: int | None = None
    number_of_self_citations: int | None = None
    average_number_of_citations: float | None = None
    median_number_of_citations: float | None = None
    normalized_number_of_citations: float | None = None
    total_number_of_refereed_citations: int | None = None


@dataclass
class Indicators(_Serializable):
    """Bibliometric indicators (h-index, g-index, ...)."""

    h: int | None = None
    g: int | None = None
    i10: int | None = None
    i100: int | None = None
    m: float | None = None
    tori: float | None = None
    riq: float | None = None
    read10: float | None = None


@dataclass
class BasicStats(_Serializable):
    total: BasicStatsEntry | None = None
    refereed: BasicStatsEntry | None = None


@dataclass
class CitationStats(_Serializable):
    total: CitationStatsEntry | None = None
    refereed: CitationStatsEntry | None = None


@dataclass
class Metrics(_Serializable):
    """Citation metrics for a set of papers."""

    basic_stats: BasicStats = field(default_factory=BasicStats)
    citation_stats: CitationStats = field(default_factory=CitationStats)
    indicators: Indicators | None = None
    indicators_refereed: Indicators | None = None
    skipped_bibcodes: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Metrics:
        """
        Build from a metrics response.

        The API uses space-separated keys ("basic stats", "citation stats
        refereed", ...). Unknown keys are ignored.
        """
        if not isinstance(payload, dict):
            raise TypeError(f"metrics payload must be an object, got {type(payload).__name__}")

        def section(key: str, entry_cls: type) -> Any:
            value = payload.get(key) or payload.get(key.replace(" ", "_"))
            return _pick(value, entry_cls) if isinstance(value, dict) else None

        def split(key: str, entry_cls: type) -> tuple[Any, Any]:
            # Either {"basic_stats": {"total": {...}, "refereed": {...}}}
            # or flat "basic stats" / "basic stats refereed" sections.
            nested = payload.get(key.replace(" ", "_"))
            if isinstance(nested, dict) and ("total" in nested or "refereed" in nested):
                return (
                    _pick(nested["total"], entry_cls) if isinstance(nested.get("total"), dict) else None,
                    _pick(nested["refereed"], entry_cls) if isinstance(nested.get("refereed"), dict) else None,
                )
            return section(key, entry_cls), section(f"{key} refereed", entry_cls)

        basic_total, basic_refereed = split("basic stats", BasicStatsEntry)
        citation_total, citation_refereed = split("citation stats", CitationStatsEntry)

        return cls(
            basic_stats=BasicStats(total=basic_total, refereed=basic_refereed),
            citation_stats=CitationStats(total=citation_total, refereed=citation_refereed),
            indicators=section("indicators", Indicators),
            indicators_refereed=section("indicators refereed", Indicators),
            skipped_bibcodes=list(payload.get("skipped bibcodes") or payload.get("skipped_bibcodes") or []),
        )

    @property
    def h_index(self) -> int | None:
        return self.indicators.h if self.indicators else None


# =============================================================================
# Libraries
# =============================================================================


@dataclass
class Library(_Serializable):
    """A personal library."""

    id: str
    name: str = ""
    description: str = ""
    num_documents: int = 0
    public: bool = False
    owner: str = ""
    date_created: str = ""
    date_last_modified: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any], library_id: str | None = None) -> Library:
        return cls(
            id=library_id or str(data["id"]),
            name=data.get("name") or "",
            description=data.get("description") or "",
            num_documents=int(data.get("num_documents") or 0),
            public=bool(data.get("public", False)),
            owner=data.get("owner") or "",
            date_created=data.get("date_created") or "",
            date_last_modified=data.get("date_last_modified") or "",
        )


@dataclass
class LibraryDetail(_Serializable):
    """A library with its documents."""

    metadata: Library
    documents: list[str] = field(default_factory=list)


@dataclass
class ResolvedReference(_Serializable):
    """Result of resolving one free-text reference."""

    reference: str
    bibcode: str | None = None
    score: str | None = None

    @property
    def resolved(self) -> bool:
        return self.bibcode is not None
