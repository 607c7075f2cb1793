"""
Libraries Mixin - Personal library management.

Covers library CRUD, documents, permissions, ownership transfer, notes and
set operations.

Every mutating call here changes state on the server and is sent exactly
once: there is no retry and no client-side deduplication, so repeating a
failed call may duplicate its side effects.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

import httpx

from scix_client.domain.models import Library, LibraryDetail, Permission, SetOperation
from scix_client.infrastructure.http.client import ApiRequest
from scix_client.shared.exceptions import InvalidParameterError

from .parse import require_bibcodes

logger = logging.getLogger(__name__)

DEFAULT_ADD_BY_QUERY_ROWS = 50


def _require_id(library_id: str, param: str = "library_id") -> str:
    if not library_id or not library_id.strip():
        raise InvalidParameterError(param, "must not be empty")
    return library_id.strip()


def _parse_libraries(response: httpx.Response) -> list[Library]:
    entries = response.json().get("libraries") or []
    # Entries without an id are not addressable; skip them.
    return [Library.from_api(entry) for entry in entries if isinstance(entry, dict) and entry.get("id")]


def _parse_library_detail(library_id: str) -> Callable[[httpx.Response], LibraryDetail]:
    def parse(response: httpx.Response) -> LibraryDetail:
        payload = response.json()
        metadata = payload.get("metadata") or {}
        documents = [d for d in payload.get("documents") or [] if isinstance(d, str)]
        return LibraryDetail(metadata=Library.from_api(metadata, library_id=library_id), documents=documents)

    return parse


def _parse_note(response: httpx.Response) -> str:
    content = response.json().get("content")
    return content if isinstance(content, str) else ""


class LibrariesMixin:
    """
    Mixin providing personal library management.

    Read-only:
        list_libraries, get_library, get_permissions, get_annotation

    Mutating (non-idempotent):
        create_library, edit_library, delete_library, add_documents,
        remove_documents, update_permissions, transfer_library,
        set_annotation, delete_annotation, library_operation,
        add_documents_by_query
    """

    # =========================================================================
    # Libraries
    # =========================================================================

    async def list_libraries(self) -> list[Library]:
        return await self.execute(ApiRequest.get("/biblib/libraries"), _parse_libraries)

    async def get_library(self, library_id: str) -> LibraryDetail:
        """Library metadata plus its bibcodes."""
        library_id = _require_id(library_id, "id")
        return await self.execute(ApiRequest.get(f"/biblib/libraries/{library_id}"), _parse_library_detail(library_id))

    async def create_library(
        self,
        name: str,
        description: str = "",
        public: bool = False,
        bibcodes: Sequence[str] | None = None,
    ) -> Library:
        if not name or not name.strip():
            raise InvalidParameterError("name", "must not be empty")
        body: dict[str, Any] = {"name": name, "description": description, "public": public}
        if bibcodes:
            body["bibcode"] = list(bibcodes)

        payload = await self._post_json("/biblib/libraries", body)
        library_id = payload.get("id") if isinstance(payload, dict) else None
        logger.info(f"Created library {name!r} ({library_id})")
        return Library(
            id=str(library_id or ""),
            name=name,
            description=description,
            num_documents=len(bibcodes) if bibcodes else 0,
            public=public,
        )

    async def edit_library(
        self,
        library_id: str,
        name: str | None = None,
        description: str | None = None,
        public: bool | None = None,
    ) -> None:
        """Update only the metadata fields that are given."""
        library_id = _require_id(library_id, "id")
        body: dict[str, Any] = {}
        if name is not None:
            body["name"] = name
        if description is not None:
            body["description"] = description
        if public is not None:
            body["public"] = public
        await self._put_json(f"/biblib/documents/{library_id}", body)

    async def delete_library(self, library_id: str) -> None:
        library_id = _require_id(library_id, "id")
        await self._delete(f"/biblib/documents/{library_id}")
        logger.info(f"Deleted library {library_id}")

    # =========================================================================
    # Documents
    # =========================================================================

    async def add_documents(self, library_id: str, bibcodes: Sequence[str]) -> None:
        await self._modify_documents(library_id, bibcodes, "add")

    async def remove_documents(self, library_id: str, bibcodes: Sequence[str]) -> None:
        await self._modify_documents(library_id, bibcodes, "remove")

    async def _modify_documents(self, library_id: str, bibcodes: Sequence[str], action: str) -> None:
        library_id = _require_id(library_id)
        body = {"bibcode": require_bibcodes(bibcodes), "action": action}
        await self._post_json(f"/biblib/documents/{library_id}", body)

    async def add_documents_by_query(self, library_id: str, query: str, rows: int | None = None) -> int:
        """
        Run *query* and add the matching bibcodes to the library.

        Two requests: a search, then an add. If the add fails the search
        results are discarded.

        Returns:
            Number of bibcodes added (0 when the search matched nothing).
        """
        library_id = _require_id(library_id)
        results = await self.search(query, rows or DEFAULT_ADD_BY_QUERY_ROWS)
        bibcodes = results.bibcodes
        if not bibcodes:
            return 0
        await self.add_documents(library_id, bibcodes)
        return len(bibcodes)

    # =========================================================================
    # Permissions
    # =========================================================================

    async def get_permissions(self, library_id: str) -> Any:
        library_id = _require_id(library_id, "id")
        return await self._get_json(f"/biblib/permissions/{library_id}")

    async def update_permissions(self, library_id: str, email: str, permission: Permission | str) -> None:
        library_id = _require_id(library_id, "id")
        if not email:
            raise InvalidParameterError("email", "must not be empty")
        level = permission if isinstance(permission, Permission) else Permission.from_str_loose(permission)
        if level is None:
            raise InvalidParameterError("permission", f"must be one of {Permission.choices()}")
        await self._post_json(f"/biblib/permissions/{library_id}", {"email": email, "permission": level.value})

    async def transfer_library(self, library_id: str, email: str) -> None:
        library_id = _require_id(library_id, "id")
        if not email:
            raise InvalidParameterError("email", "must not be empty")
        await self._post_json(f"/biblib/transfer/{library_id}", {"email": email})

    # =========================================================================
    # Notes
    # =========================================================================

    def _note_path(self, library_id: str, bibcode: str) -> str:
        library_id = _require_id(library_id)
        if not bibcode or not bibcode.strip():
            raise InvalidParameterError("bibcode", "must not be empty")
        return f"/biblib/libraries/{library_id}/notes/{bibcode.strip()}"

    async def get_annotation(self, library_id: str, bibcode: str) -> str:
        return await self.execute(ApiRequest.get(self._note_path(library_id, bibcode)), _parse_note)

    async def set_annotation(self, library_id: str, bibcode: str, content: str) -> None:
        await self._post_json(self._note_path(library_id, bibcode), {"content": content})

    async def delete_annotation(self, library_id: str, bibcode: str) -> None:
        await self._delete(self._note_path(library_id, bibcode))

    # =========================================================================
    # Set operations
    # =========================================================================

    async def library_operation(
        self,
        library_id: str,
        operation: SetOperation | str,
        source_library_ids: Sequence[str] | None = None,
    ) -> Any:
        """
        Apply a set operation to *library_id*.

        union / intersection / difference / copy take ``source_library_ids``;
        empty removes every document from the library.
        """
        library_id = _require_id(library_id)
        op = operation if isinstance(operation, SetOperation) else SetOperation.from_str_loose(operation)
        if op is None:
            raise InvalidParameterError("action", f"must be one of {SetOperation.choices()}")
        body: dict[str, Any] = {"action": op.value}
        if source_library_ids:
            body["libraries"] = list(source_library_ids)
        elif op.needs_sources:
            raise InvalidParameterError("source_library_ids", f"required for {op.value}")
        return await self._post_json(f"/biblib/libraries/operations/{library_id}", body)
