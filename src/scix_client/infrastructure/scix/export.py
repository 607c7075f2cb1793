"""
Export Mixin - Citation export in any of the supported formats.

Usage:
    bibtex = await client.export(["2023ApJ...123..456A"], ExportFormat.BIBTEX)
"""

from __future__ import annotations

from collections.abc import Sequence

from scix_client.domain.models import ExportFormat, Sort
from scix_client.infrastructure.http.client import ApiRequest
from scix_client.shared.exceptions import InvalidParameterError

from .parse import parse_export_response, require_bibcodes


class ExportMixin:
    """Mixin providing citation export."""

    async def export(
        self,
        bibcodes: Sequence[str],
        format: ExportFormat | str = ExportFormat.BIBTEX,
        sort: Sort | str | None = None,
    ) -> str:
        """
        Export citations for *bibcodes*.

        Returns:
            The formatted export text.
        """
        codes = require_bibcodes(bibcodes)
        fmt = format if isinstance(format, ExportFormat) else ExportFormat.from_str_loose(format)
        if fmt is None:
            raise InvalidParameterError("format", f"unknown export format {format!r}")

        body: dict[str, object] = {"bibcode": codes}
        if sort:
            body["sort"] = str(sort)
        return await self.execute(ApiRequest.post(f"/export/{fmt.value}", body), parse_export_response)

    async def export_bibtex(self, bibcodes: Sequence[str]) -> str:
        return await self.export(bibcodes, ExportFormat.BIBTEX)
