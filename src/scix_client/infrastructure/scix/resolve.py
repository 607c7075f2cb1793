"""
Resolve Mixin - Object names, free-text references and resource links.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import httpx

from scix_client.domain.models import LinkType, ResolvedReference
from scix_client.infrastructure.http.client import ApiRequest
from scix_client.shared.exceptions import InvalidParameterError

from .metrics import _parse_object


def _zip_resolved(references: list[str]) -> Callable[[httpx.Response], list[ResolvedReference]]:
    def parse(response: httpx.Response) -> list[ResolvedReference]:
        payload = response.json()
        resolved = payload.get("resolved") if isinstance(payload, dict) else None
        if not isinstance(resolved, list):
            resolved = []
        results = []
        for entry, reference in zip(resolved, references, strict=False):
            entry = entry if isinstance(entry, dict) else {}
            bibcode = entry.get("bibcode")
            score = entry.get("score")
            results.append(
                ResolvedReference(
                    reference=reference,
                    bibcode=bibcode if isinstance(bibcode, str) and bibcode else None,
                    score=str(score) if score is not None else None,
                )
            )
        return results

    return parse


class ResolveMixin:
    """
    Mixin providing identifier resolution.

    Methods:
        resolve_objects: Astronomical object names to canonical identifiers
        resolve_references: Free-text citations to bibcodes
        resolve_links: Full text, data and related links for a bibcode
    """

    async def resolve_objects(self, objects: Sequence[str]) -> dict[str, Any]:
        names = [o.strip() for o in objects if o and o.strip()]
        if not names:
            raise InvalidParameterError("objects", "at least one object name is required")
        body = {"query": [f'object:"{name}"' for name in names]}
        return await self.execute(ApiRequest.post("/objects", body), _parse_object)

    async def resolve_references(self, references: Sequence[str]) -> list[ResolvedReference]:
        """
        Resolve free-text references, one per input line.

        Results are paired with the inputs in order; unresolved references
        have ``bibcode=None``.
        """
        refs = [r.strip() for r in references if r and r.strip()]
        if not refs:
            raise InvalidParameterError("references", "at least one reference is required")
        request = ApiRequest.post_text("/reference/text", "\n".join(refs))
        return await self.execute(request, _zip_resolved(refs))

    async def resolve_links(self, bibcode: str, link_type: LinkType | str | None = None) -> dict[str, Any]:
        bibcode = bibcode.strip()
        if not bibcode:
            raise InvalidParameterError("bibcode", "must not be empty")
        path = f"/resolver/{bibcode}"
        if link_type is not None:
            kind = link_type if isinstance(link_type, LinkType) else LinkType.from_str_loose(link_type)
            if kind is None:
                raise InvalidParameterError("link_type", f"must be one of {LinkType.choices()}")
            path = f"{path}/{kind.value}"
        return await self.execute(ApiRequest.get(path), _parse_object)
