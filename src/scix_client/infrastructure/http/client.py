"""
Transport Client - Rate-limited, authenticated HTTP requests to the SciX API.

Every API operation builds an ``ApiRequest`` and hands it to
``SciXBase.execute()`` together with a parse function. ``execute()`` either
returns the parsed value or raises exactly one ``SciXError`` subclass:

    no token        -> AuthRequiredError   (before any limiter/network use)
    transport fail  -> NetworkError
    2xx             -> parse(response)     (ParseError on malformed body)
    401             -> AuthRequiredError
    404             -> NotFoundError
    429             -> RateLimitError(retry_after)
    other 4xx/5xx   -> APIError(status, message)

Rate-limit headers are fed back into the shared limiter on every response.
Nothing is retried here.

Usage:
    async with SciXBase(ClientConfig.from_env(), RateLimiter()) as base:
        data = await base._get_json("/search/query", {"q": "black holes"})
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from email.utils import parsedate_to_datetime
from typing import Any, TypeVar

import httpx
from typing_extensions import Self

from scix_client.shared.config import ClientConfig
from scix_client.shared.exceptions import (
    APIError,
    AuthRequiredError,
    NetworkError,
    NotFoundError,
    ParseError,
    RateLimitError,
)
from scix_client.shared.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")

QueryParams = tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class ApiRequest:
    """
    Immutable description of one HTTP call.

    ``params`` is a tuple of pairs so the request stays hashable and keeps
    parameter order. At most one of ``json`` / ``content`` is set.
    """

    method: str
    path: str
    params: QueryParams = ()
    json: Any = None
    content: str | None = None
    content_type: str | None = None
    headers: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    @classmethod
    def get(cls, path: str, params: Mapping[str, Any] | Sequence[tuple[str, Any]] | None = None) -> ApiRequest:
        return cls("GET", path, params=_freeze_params(params))

    @classmethod
    def post(cls, path: str, body: Any) -> ApiRequest:
        return cls("POST", path, json=body)

    @classmethod
    def put(cls, path: str, body: Any) -> ApiRequest:
        return cls("PUT", path, json=body)

    @classmethod
    def delete(cls, path: str) -> ApiRequest:
        return cls("DELETE", path)

    @classmethod
    def post_text(cls, path: str, text: str) -> ApiRequest:
        return cls("POST", path, content=text, content_type="text/plain")


def _freeze_params(params: Mapping[str, Any] | Sequence[tuple[str, Any]] | None) -> QueryParams:
    if not params:
        return ()
    items = params.items() if isinstance(params, Mapping) else params
    return tuple((str(k), str(v)) for k, v in items if v is not None)


class SciXBase:
    """
    Base class for the SciX API client.

    Owns the ``httpx.AsyncClient``; the ``RateLimiter`` is borrowed and may
    be shared with other clients in the same process.

    Subclasses (the operation mixins) call ``execute()`` or one of the
    ``_get_json`` / ``_post_json`` / ``_put_json`` / ``_post_text`` /
    ``_delete`` helpers.
    """

    _service_name: str = "SciX"

    def __init__(
        self,
        config: ClientConfig,
        rate_limiter: RateLimiter,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._rate_limiter = rate_limiter
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout,
            limits=httpx.Limits(
                max_connections=10,
                max_keepalive_connections=5,
                keepalive_expiry=30.0,
            ),
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    def _build_url(self, path: str) -> str:
        """Build full URL from path or full URL."""
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return f"{self._config.base_url}{path}"

    def _headers(self, request: ApiRequest) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._config.token}",
            "User-Agent": self._config.user_agent,
        }
        if request.content_type:
            headers["Content-Type"] = request.content_type
        headers.update(request.headers)
        return headers

    async def execute(self, request: ApiRequest, parse: Callable[[httpx.Response], T]) -> T:
        """
        Send *request* and return ``parse(response)`` for a 2xx response.

        Raises:
            AuthRequiredError: no token configured, or the token was rejected
            NetworkError: connection, DNS or timeout failure
            RateLimitError: HTTP 429
            NotFoundError: HTTP 404
            APIError: any other non-2xx status
            ParseError: the 2xx body did not have the expected structure
        """
        if not self._config.has_token:
            raise AuthRequiredError()

        waited = await self._rate_limiter.acquire()
        if waited > 0:
            logger.debug(f"{self._service_name}: waited {waited:.3f}s for rate limiter")

        url = self._build_url(request.path)
        started = time.monotonic()
        try:
            response = await self._client.request(
                request.method,
                url,
                params=list(request.params) or None,
                json=request.json,
                content=request.content,
                headers=self._headers(request),
            )
        except httpx.TimeoutException as e:
            logger.warning(f"{self._service_name} {request.method} {request.path} timed out")
            raise NetworkError(f"request timed out after {self._config.timeout:g}s") from e
        except httpx.TransportError as e:
            logger.warning(f"{self._service_name} {request.method} {request.path} failed: {e}")
            raise NetworkError(str(e) or type(e).__name__) from e

        logger.debug(
            f"{self._service_name} {request.method} {request.path} -> "
            f"{response.status_code} ({time.monotonic() - started:.2f}s)"
        )
        self._rate_limiter.update_from_headers(response.headers)
        return self._handle_response(request, response, parse)

    def _handle_response(
        self,
        request: ApiRequest,
        response: httpx.Response,
        parse: Callable[[httpx.Response], T],
    ) -> T:
        status = response.status_code

        if 200 <= status < 300:
            try:
                return parse(response)
            except ParseError:
                raise
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                raise ParseError(str(e) or type(e).__name__, source=request.path) from e

        if status == 401:
            raise AuthRequiredError(f"Authentication failed: {_error_message(response)}")

        if status == 404:
            raise NotFoundError(identifier=request.path)

        if status == 429:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            if retry_after is not None:
                self._rate_limiter.note_retry_after(retry_after)
            logger.warning(f"{self._service_name}: rate limited (429), retry after {retry_after}")
            raise RateLimitError(retry_after)

        message = _error_message(response)
        logger.warning(f"{self._service_name} HTTP error {status}: {message}")
        raise APIError(status, message)

    # =========================================================================
    # Convenience wrappers
    # =========================================================================

    async def _get_json(self, path: str, params: Mapping[str, Any] | Sequence[tuple[str, Any]] | None = None) -> Any:
        return await self.execute(ApiRequest.get(path, params), _json_body)

    async def _post_json(self, path: str, body: Any) -> Any:
        return await self.execute(ApiRequest.post(path, body), _json_body)

    async def _put_json(self, path: str, body: Any) -> Any:
        return await self.execute(ApiRequest.put(path, body), _json_body)

    async def _post_text(self, path: str, text: str) -> Any:
        return await self.execute(ApiRequest.post_text(path, text), _json_body)

    async def _delete(self, path: str) -> None:
        await self.execute(ApiRequest.delete(path), _ignore_body)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


def _json_body(response: httpx.Response) -> Any:
    # Some mutating endpoints answer 200 with an empty body.
    if not response.content:
        return {}
    return response.json()


def _ignore_body(response: httpx.Response) -> None:
    return None


def parse_retry_after(value: str | None) -> float | None:
    """
    Parse a ``Retry-After`` header: delta-seconds or an HTTP-date.

    Returns ``None`` when absent or unparseable; never negative.
    """
    if value is None or not value.strip():
        return None
    value = value.strip()
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring malformed Retry-After header: {value!r}")
        return None
    return max(0.0, when.timestamp() - time.time())


def _error_message(response: httpx.Response) -> str:
    """Extract the API's error text from a JSON body, else a generic description."""
    fallback = f"HTTP {response.status_code}: {response.reason_phrase}"
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text[:500] if text else fallback
    if isinstance(body, dict):
        for key in ("error", "message", "msg"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and isinstance(value.get("msg"), str):
                return value["msg"]
    return fallback
