"""
Tool Registry - The fixed set of MCP tools and their parameter schemas.

Descriptors are built once at import and never change, so ``tools/list``
returns the same bytes every time it is called.

Usage:
    from .tool_registry import TOOLS, get_tool, validate_arguments

    descriptor = get_tool("scix_search")
    args = validate_arguments(descriptor, {"query": "dark matter"})
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mcp.types import Tool, ToolAnnotations

from scix_client.domain.models import ExportFormat, LinkType, NetworkType, Permission
from scix_client.shared.exceptions import ErrorContext, InvalidParameterError

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    SEARCH = "scix_search"
    BIGQUERY = "scix_bigquery"
    EXPORT = "scix_export"
    METRICS = "scix_metrics"
    LIBRARY = "scix_library"
    LIBRARY_DOCUMENTS = "scix_library_documents"
    CITATION_HELPER = "scix_citation_helper"
    NETWORK = "scix_network"
    OBJECT_SEARCH = "scix_object_search"
    RESOLVE_REFERENCE = "scix_resolve_reference"
    RESOLVE_LINKS = "scix_resolve_links"
    GET_PAPER = "scix_get_paper"


class LibraryAction(str, Enum):
    LIST = "list"
    GET = "get"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    PERMISSIONS = "permissions"
    UPDATE_PERMISSIONS = "update_permissions"
    TRANSFER = "transfer"


class DocumentAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    GET_NOTES = "get_notes"
    ADD_NOTE = "add_note"
    EDIT_NOTE = "edit_note"
    DELETE_NOTE = "delete_note"
    UNION = "union"
    INTERSECTION = "intersection"
    DIFFERENCE = "difference"
    COPY = "copy"
    EMPTY = "empty"
    ADD_BY_QUERY = "add_by_query"


# JSON Schema type name -> accepted Python types
_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
    "array": (list,),
    "object": (dict,),
}


@dataclass(frozen=True)
class ParamSpec:
    """One parameter of a tool's input schema."""

    name: str
    type: str
    description: str = ""
    required: bool = False
    enum: tuple[str, ...] | None = None
    default: Any = None
    items: str | None = None  # element type for arrays

    def to_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type}
        if self.items:
            schema["items"] = {"type": self.items}
        if self.description:
            schema["description"] = self.description
        if self.enum:
            schema["enum"] = list(self.enum)
        if self.default is not None:
            schema["default"] = self.default
        return schema

    def check(self, value: Any) -> None:
        """Raise ``InvalidParameterError`` if *value* does not fit the declared type."""
        expected = _JSON_TYPES[self.type]
        # bool is a subclass of int in Python but not in JSON
        if isinstance(value, bool) and self.type in ("integer", "number"):
            raise InvalidParameterError(self.name, f"expected {self.type}, got boolean")
        if not isinstance(value, expected):
            raise InvalidParameterError(self.name, f"expected {self.type}, got {_json_type_name(value)}")
        if self.items and isinstance(value, list):
            item_types = _JSON_TYPES[self.items]
            for index, item in enumerate(value):
                if not isinstance(item, item_types) or (isinstance(item, bool) and self.items != "boolean"):
                    raise InvalidParameterError(
                        self.name, f"item {index} expected {self.items}, got {_json_type_name(item)}"
                    )
        if self.enum and value not in self.enum:
            raise InvalidParameterError(self.name, f"must be one of {list(self.enum)}, got {value!r}")


def _json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


@dataclass(frozen=True)
class ToolDescriptor:
    """Name, description, ordered parameters and behaviour hints of one tool."""

    name: ToolName
    description: str
    params: tuple[ParamSpec, ...] = field(default_factory=tuple)
    read_only: bool = True
    destructive: bool = False
    idempotent: bool = True
    open_world: bool = True

    @property
    def required(self) -> list[str]:
        return [p.name for p in self.params if p.required]

    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {p.name: p.to_schema() for p in self.params},
            "required": self.required,
        }

    def to_mcp_tool(self) -> Tool:
        return Tool(
            name=self.name.value,
            description=self.description,
            inputSchema=self.input_schema(),
            annotations=ToolAnnotations(
                readOnlyHint=self.read_only,
                destructiveHint=self.destructive,
                idempotentHint=self.idempotent,
                openWorldHint=self.open_world,
            ),
        )


def _bibcodes(description: str) -> ParamSpec:
    return ParamSpec("bibcodes", "array", description, required=True, items="string")


# ============================================================================
# Tool Definitions
# ============================================================================

TOOLS: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        ToolName.SEARCH,
        "Search the SciX / NASA ADS database. Supports field queries (author, title, abstract, year, etc.), "
        "boolean operators, and functional operators (citations(), references(), similar()).",
        (
            ParamSpec("query", "string", "ADS query string (e.g., 'author:\"Einstein\" year:1905')", required=True),
            ParamSpec("rows", "integer", "Max results (default 10)", default=10),
            ParamSpec("start", "integer", "Starting index for pagination (default 0)", default=0),
            ParamSpec("sort", "string", "Sort order (e.g., 'date desc', 'citation_count desc')"),
            ParamSpec("fields", "string", "Comma-separated fields to return"),
        ),
    ),
    ToolDescriptor(
        ToolName.BIGQUERY,
        "Search within a set of known bibcodes. Useful for filtering a collection of papers.",
        (
            _bibcodes("List of bibcodes to search within"),
            ParamSpec("query", "string", "Optional additional query filter"),
        ),
    ),
    ToolDescriptor(
        ToolName.EXPORT,
        "Export papers in citation formats (bibtex, ris, aastex, mnras, ieee, csl, etc.).",
        (
            _bibcodes("Bibcodes to export"),
            ParamSpec(
                "format",
                "string",
                "Export format",
                enum=tuple(ExportFormat.choices()),
                default=ExportFormat.BIBTEX.value,
            ),
        ),
    ),
    ToolDescriptor(
        ToolName.METRICS,
        "Get citation metrics (h-index, g-index, citation counts) for a set of papers.",
        (_bibcodes("Bibcodes to get metrics for"),),
    ),
    ToolDescriptor(
        ToolName.LIBRARY,
        "Manage SciX personal libraries (list, get, create, edit, delete, permissions, transfer).",
        (
            ParamSpec("action", "string", "Operation to perform", required=True, enum=tuple(a.value for a in LibraryAction)),
            ParamSpec("id", "string", "Library ID (for get/edit/delete/permissions/update_permissions/transfer)"),
            ParamSpec("name", "string", "Library name (for create/edit)"),
            ParamSpec("description", "string", "Library description (for create/edit)"),
            ParamSpec("public", "boolean", "Public visibility (for create/edit)"),
            ParamSpec("email", "string", "Collaborator email (for update_permissions/transfer)"),
            ParamSpec(
                "permission",
                "string",
                "Permission level (for update_permissions)",
                enum=tuple(Permission.choices()),
            ),
        ),
        read_only=False,
        idempotent=False,
    ),
    ToolDescriptor(
        ToolName.LIBRARY_DOCUMENTS,
        "Manage documents in a SciX library: add/remove bibcodes, notes, set operations "
        "(union/intersection/difference/copy/empty), or add by search query.",
        (
            ParamSpec("action", "string", "Operation to perform", required=True, enum=tuple(a.value for a in DocumentAction)),
            ParamSpec("library_id", "string", "Library ID", required=True),
            ParamSpec("bibcodes", "array", "Bibcodes to add/remove", items="string"),
            ParamSpec("bibcode", "string", "Single bibcode (for note operations)"),
            ParamSpec("content", "string", "Note content (for add_note/edit_note)"),
            ParamSpec(
                "libraries",
                "array",
                "Source library IDs (for set operations: union/intersection/difference/copy)",
                items="string",
            ),
            ParamSpec("query", "string", "Search query (for add_by_query)"),
            ParamSpec("rows", "integer", "Max documents to add by query (default 50)"),
        ),
        read_only=False,
        idempotent=False,
    ),
    ToolDescriptor(
        ToolName.CITATION_HELPER,
        "Find papers frequently co-cited with the given set but not yet included.",
        (_bibcodes("Bibcodes for co-citation analysis"),),
    ),
    ToolDescriptor(
        ToolName.NETWORK,
        "Get author collaboration or paper citation network data.",
        (
            _bibcodes("Bibcodes for network analysis"),
            ParamSpec(
                "type",
                "string",
                "Network type",
                enum=tuple(NetworkType.choices()),
                default=NetworkType.AUTHOR.value,
            ),
        ),
    ),
    ToolDescriptor(
        ToolName.OBJECT_SEARCH,
        "Resolve astronomical object names (M31, NGC 1234, Crab Nebula) via SIMBAD/NED.",
        (ParamSpec("objects", "array", "Object names to resolve", required=True, items="string"),),
    ),
    ToolDescriptor(
        ToolName.RESOLVE_REFERENCE,
        "Resolve free-text references to bibcodes (e.g., 'Einstein 1905 Annalen der Physik 17 891').",
        (ParamSpec("references", "array", "Free-text reference strings", required=True, items="string"),),
    ),
    ToolDescriptor(
        ToolName.RESOLVE_LINKS,
        "Resolve links for a paper (full-text, datasets, citations, references).",
        (
            ParamSpec("bibcode", "string", "Paper bibcode", required=True),
            ParamSpec("link_type", "string", "Specific link type (optional)", enum=tuple(LinkType.choices())),
        ),
    ),
    ToolDescriptor(
        ToolName.GET_PAPER,
        "Get detailed metadata for a single paper by bibcode, including abstract, affiliations, keywords, and links.",
        (ParamSpec("bibcode", "string", "Paper bibcode", required=True),),
    ),
)

_BY_NAME: dict[str, ToolDescriptor] = {tool.name.value: tool for tool in TOOLS}

# Rendered once; tools/list hands out this exact structure.
TOOL_LIST_PAYLOAD: list[dict[str, Any]] = [
    tool.to_mcp_tool().model_dump(by_alias=True, exclude_none=True, mode="json") for tool in TOOLS
]


def get_tool(name: str) -> ToolDescriptor | None:
    return _BY_NAME.get(name)


def list_tool_names() -> list[str]:
    return [tool.name.value for tool in TOOLS]


def validate_arguments(tool: ToolDescriptor, arguments: dict[str, Any] | None) -> dict[str, Any]:
    """
    Check *arguments* against the tool's schema.

    ``null`` counts as absent. Unknown arguments are dropped.

    Raises:
        InvalidParameterError: a required parameter is missing, or a value has
            the wrong JSON type or is not in the declared enum
    """
    arguments = arguments or {}
    validated: dict[str, Any] = {}
    for spec in tool.params:
        value = arguments.get(spec.name)
        if value is None:
            if spec.required:
                raise InvalidParameterError(
                    spec.name,
                    "required parameter is missing",
                    context=ErrorContext(tool_name=tool.name.value),
                )
            continue
        spec.check(value)
        validated[spec.name] = value

    unknown = set(arguments) - {p.name for p in tool.params}
    if unknown:
        logger.debug(f"{tool.name.value}: ignoring unknown arguments {sorted(unknown)}")
    return validated
