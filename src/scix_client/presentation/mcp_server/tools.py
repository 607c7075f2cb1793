"""
Tool handlers - Map validated ``tools/call`` arguments onto ``SciXClient``.

Arguments reaching a handler have already passed schema validation
(presence of required parameters, JSON types, enum membership). Handlers
check action-specific requirements and raise ``InvalidParameterError`` for
them; every other error comes from the client and propagates unchanged.
"""

from __future__ import annotations

import logging
from typing import Any

from scix_client.domain.models import ExportFormat, NetworkType, SetOperation
from scix_client.infrastructure.scix import DEFAULT_SEARCH_FIELDS, SciXClient
from scix_client.shared.exceptions import ErrorContext, InvalidParameterError

from .formatting import format_paper, format_search_results, to_json_text
from .tool_registry import DocumentAction, LibraryAction, ToolName

logger = logging.getLogger(__name__)


def _require(args: dict[str, Any], name: str, action: str, tool: ToolName) -> Any:
    value = args.get(name)
    if value is None or (isinstance(value, str | list) and not value):
        raise InvalidParameterError(
            name,
            f"required for action '{action}'",
            context=ErrorContext(tool_name=tool.value),
        )
    return value


class ToolHandlers:
    """
    Executes tools against a ``SciXClient``.

    ``call()`` decodes the tool name into ``ToolName`` and matches it
    exhaustively; each handler returns the text placed in the result's
    ``content``.
    """

    def __init__(self, client: SciXClient) -> None:
        self._client = client

    async def call(self, tool: ToolName, args: dict[str, Any]) -> str:
        match tool:
            case ToolName.SEARCH:
                return await self._search(args)
            case ToolName.GET_PAPER:
                paper = await self._client.get_paper(args["bibcode"])
                return format_paper(paper)
            case ToolName.BIGQUERY:
                results = await self._client.bigquery(args["bibcodes"], query=args.get("query"))
                return format_search_results(results)
            case ToolName.EXPORT:
                fmt = ExportFormat.from_str_loose(args.get("format")) or ExportFormat.BIBTEX
                return await self._client.export(args["bibcodes"], fmt)
            case ToolName.METRICS:
                return to_json_text(await self._client.metrics(args["bibcodes"]))
            case ToolName.CITATION_HELPER:
                return to_json_text(await self._client.citation_helper(args["bibcodes"]))
            case ToolName.NETWORK:
                kind = NetworkType.from_str_loose(args.get("type")) or NetworkType.AUTHOR
                return to_json_text(await self._client.network(args["bibcodes"], kind))
            case ToolName.OBJECT_SEARCH:
                return to_json_text(await self._client.resolve_objects(args["objects"]))
            case ToolName.RESOLVE_REFERENCE:
                return to_json_text(await self._client.resolve_references(args["references"]))
            case ToolName.RESOLVE_LINKS:
                return to_json_text(await self._client.resolve_links(args["bibcode"], args.get("link_type")))
            case ToolName.LIBRARY:
                return await self._library(LibraryAction(args["action"]), args)
            case ToolName.LIBRARY_DOCUMENTS:
                return await self._library_documents(DocumentAction(args["action"]), args)

    async def _search(self, args: dict[str, Any]) -> str:
        start = args.get("start", 0)
        results = await self._client.search_with_options(
            args["query"],
            fields=args.get("fields") or DEFAULT_SEARCH_FIELDS,
            sort=args.get("sort"),
            rows=args.get("rows", 10),
            start=start,
        )
        return format_search_results(results, start)

    # =========================================================================
    # Libraries
    # =========================================================================

    async def _library(self, action: LibraryAction, args: dict[str, Any]) -> str:
        tool = ToolName.LIBRARY
        client = self._client

        match action:
            case LibraryAction.LIST:
                return to_json_text(await client.list_libraries())
            case LibraryAction.GET:
                library_id = _require(args, "id", action.value, tool)
                return to_json_text(await client.get_library(library_id))
            case LibraryAction.CREATE:
                name = _require(args, "name", action.value, tool)
                library = await client.create_library(
                    name,
                    description=args.get("description", ""),
                    public=args.get("public", False),
                )
                return to_json_text(library)
            case LibraryAction.EDIT:
                library_id = _require(args, "id", action.value, tool)
                await client.edit_library(
                    library_id,
                    name=args.get("name"),
                    description=args.get("description"),
                    public=args.get("public"),
                )
                return f"Library {library_id} updated"
            case LibraryAction.DELETE:
                library_id = _require(args, "id", action.value, tool)
                await client.delete_library(library_id)
                return f"Library {library_id} deleted"
            case LibraryAction.PERMISSIONS:
                library_id = _require(args, "id", action.value, tool)
                return to_json_text(await client.get_permissions(library_id))
            case LibraryAction.UPDATE_PERMISSIONS:
                library_id = _require(args, "id", action.value, tool)
                email = _require(args, "email", action.value, tool)
                permission = _require(args, "permission", action.value, tool)
                await client.update_permissions(library_id, email, permission)
                return f"Permissions updated for {email} on library {library_id}"
            case LibraryAction.TRANSFER:
                library_id = _require(args, "id", action.value, tool)
                email = _require(args, "email", action.value, tool)
                await client.transfer_library(library_id, email)
                return f"Library {library_id} transferred to {email}"

    async def _library_documents(self, action: DocumentAction, args: dict[str, Any]) -> str:
        tool = ToolName.LIBRARY_DOCUMENTS
        client = self._client
        library_id = args["library_id"]

        match action:
            case DocumentAction.ADD:
                bibcodes = _require(args, "bibcodes", action.value, tool)
                await client.add_documents(library_id, bibcodes)
                return f"Added {len(bibcodes)} documents"
            case DocumentAction.REMOVE:
                bibcodes = _require(args, "bibcodes", action.value, tool)
                await client.remove_documents(library_id, bibcodes)
                return f"Removed {len(bibcodes)} documents"
            case DocumentAction.GET_NOTES:
                bibcode = _require(args, "bibcode", action.value, tool)
                return await client.get_annotation(library_id, bibcode)
            case DocumentAction.ADD_NOTE | DocumentAction.EDIT_NOTE:
                bibcode = _require(args, "bibcode", action.value, tool)
                content = _require(args, "content", action.value, tool)
                await client.set_annotation(library_id, bibcode, content)
                return f"Note saved for {bibcode}"
            case DocumentAction.DELETE_NOTE:
                bibcode = _require(args, "bibcode", action.value, tool)
                await client.delete_annotation(library_id, bibcode)
                return f"Note deleted for {bibcode}"
            case (
                DocumentAction.UNION
                | DocumentAction.INTERSECTION
                | DocumentAction.DIFFERENCE
                | DocumentAction.COPY
                | DocumentAction.EMPTY
            ):
                operation = SetOperation(action.value)
                sources = args.get("libraries")
                if operation.needs_sources and not sources:
                    _require(args, "libraries", action.value, tool)
                result = await client.library_operation(library_id, operation, sources)
                return to_json_text(result)
            case DocumentAction.ADD_BY_QUERY:
                query = _require(args, "query", action.value, tool)
                count = await client.add_documents_by_query(library_id, query, args.get("rows"))
                return f"Added {count} documents by query"
