"""
JSON-RPC 2.0 envelopes and MCP session state.

One request or notification per input line; one response line per request.
Method names are decoded into the closed ``RpcMethod`` enum before dispatch;
anything else is ``None`` and answered with "method not found".
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from scix_client.shared.exceptions import RpcErrorCode

JSONRPC_VERSION = "2.0"

# Oldest first; the last entry is offered when the client asks for a
# version this server does not speak.
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26", "2025-06-18")
LATEST_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[-1]

_MISSING = object()


class RpcMethod(str, Enum):
    """Methods this server understands."""

    INITIALIZE = "initialize"
    INITIALIZED = "notifications/initialized"
    CANCELLED = "notifications/cancelled"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    RESOURCES_LIST = "resources/list"
    RESOURCES_READ = "resources/read"

    @classmethod
    def decode(cls, name: str) -> RpcMethod | None:
        try:
            return cls(name)
        except ValueError:
            return None


class SessionState(Enum):
    """Connection lifecycle."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"  # initialize answered, waiting for notifications/initialized
    READY = "ready"
    TERMINAL = "terminal"  # input closed


class RpcProtocolError(Exception):
    """A request that cannot be processed at the protocol level."""

    def __init__(
        self,
        code: int,
        message: str,
        data: Any = None,
        request_id: Any = None,
        is_notification: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data
        self.request_id = request_id
        # The offending message was a notification; no reply is due.
        self.is_notification = is_notification


@dataclass(frozen=True)
class RpcRequest:
    """
    Decoded JSON-RPC message.

    A message without an ``id`` member is a notification and gets no reply.
    """

    method: str
    params: dict[str, Any] = field(default_factory=dict)
    id: Any = None
    is_notification: bool = False

    @classmethod
    def from_line(cls, line: str | bytes) -> RpcRequest:
        """
        Decode one input line, given as text or as raw UTF-8 bytes.

        Raises:
            RpcProtocolError: -32700 for invalid UTF-8 or invalid JSON, -32600
                for a JSON value that is not a valid request object
        """
        try:
            if isinstance(line, bytes):
                line = line.decode("utf-8")
            message = json.loads(line)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise RpcProtocolError(RpcErrorCode.PARSE_ERROR, f"Parse error: {e}") from e
        return cls.from_message(message)

    @classmethod
    def from_message(cls, message: Any) -> RpcRequest:
        if not isinstance(message, dict):
            raise RpcProtocolError(RpcErrorCode.INVALID_REQUEST, "Invalid Request: expected a JSON object")

        request_id = message.get("id", _MISSING)
        is_notification = request_id is _MISSING
        if is_notification:
            request_id = None
        elif request_id is not None and (isinstance(request_id, bool) or not isinstance(request_id, str | int | float)):
            raise RpcProtocolError(RpcErrorCode.INVALID_REQUEST, "Invalid Request: id must be a string or number")

        method = message.get("method")
        if not isinstance(method, str) or not method:
            raise RpcProtocolError(
                RpcErrorCode.INVALID_REQUEST,
                "Invalid Request: missing method",
                request_id=request_id,
            )

        params = message.get("params")
        if params is None:
            params = {}
        elif not isinstance(params, dict):
            raise RpcProtocolError(
                RpcErrorCode.INVALID_PARAMS,
                "Invalid params: expected an object",
                request_id=request_id,
                is_notification=is_notification,
            )

        return cls(method=method, params=params, id=request_id, is_notification=is_notification)


@dataclass(frozen=True)
class RpcResponse:
    """Carries ``result`` xor ``error``."""

    id: Any
    result: Any = None
    error: dict[str, Any] | None = None

    @classmethod
    def success(cls, request_id: Any, result: Any) -> RpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Any, code: int, message: str, data: Any = None) -> RpcResponse:
        error: dict[str, Any] = {"code": code, "message": message}
        if data is not None:
            error["data"] = data
        return cls(id=request_id, error=error)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": self.id}
        if self.error is not None:
            body["error"] = self.error
        else:
            body["result"] = self.result
        return body

    def to_line(self) -> str:
        """Serialize as a single line (no embedded newlines)."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))
