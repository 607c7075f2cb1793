"""
Metrics Mixin - Citation metrics, network visualizations and citation helper.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx

from scix_client.domain.models import Metrics, NetworkType
from scix_client.infrastructure.http.client import ApiRequest
from scix_client.shared.exceptions import InvalidParameterError

from .parse import require_bibcodes

METRICS_TYPES = ("basic", "citations", "indicators")


def _parse_metrics(response: httpx.Response) -> Metrics:
    return Metrics.from_api(response.json())


def _parse_object(response: httpx.Response) -> dict[str, Any]:
    payload = response.json()
    if not isinstance(payload, dict):
        raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
    return payload


class MetricsMixin:
    """
    Mixin providing bibliometric analysis.

    Methods:
        metrics: Basic stats, citation stats and indicators for a set of papers
        author_network / paper_network: Network visualization data
        network: Dispatch on ``NetworkType``
        citation_helper: Papers frequently co-cited with the given set
    """

    async def metrics(self, bibcodes: Sequence[str]) -> Metrics:
        body = {"bibcodes": require_bibcodes(bibcodes), "types": list(METRICS_TYPES)}
        return await self.execute(ApiRequest.post("/metrics", body), _parse_metrics)

    async def author_network(self, bibcodes: Sequence[str]) -> dict[str, Any]:
        return await self.network(bibcodes, NetworkType.AUTHOR)

    async def paper_network(self, bibcodes: Sequence[str]) -> dict[str, Any]:
        return await self.network(bibcodes, NetworkType.PAPER)

    async def network(self, bibcodes: Sequence[str], network_type: NetworkType | str = NetworkType.AUTHOR) -> dict[str, Any]:
        """Raw network data; the response schema is not interpreted."""
        kind = network_type if isinstance(network_type, NetworkType) else NetworkType.from_str_loose(network_type)
        if kind is None:
            raise InvalidParameterError("network_type", f"must be one of {NetworkType.choices()}")
        body = {"bibcodes": require_bibcodes(bibcodes), "types": [kind.value]}
        return await self.execute(ApiRequest.post(f"/vis/{kind.value}-network", body), _parse_object)

    async def citation_helper(self, bibcodes: Sequence[str]) -> Any:
        """Suggest papers that are frequently cited together with *bibcodes*."""
        body = {"bibcodes": require_bibcodes(bibcodes)}
        return await self.execute(ApiRequest.post("/citation_helper", body), lambda r: r.json())
