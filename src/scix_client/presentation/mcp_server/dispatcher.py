"""
JSON-RPC Dispatcher - Line-oriented MCP server loop.

Reads one JSON-RPC message per line, writes one response line per request
and nothing for notifications. Requests are processed strictly in order:
each one, including any rate-limiter wait, finishes before the next line
is read.

Session states:
    UNINITIALIZED --initialize--> INITIALIZING --notifications/initialized--> READY
    any state --end of input--> TERMINAL

Per-request failures become JSON-RPC error responses; the loop itself only
stops when the input ends.

Usage:
    dispatcher = Dispatcher(client)
    await dispatcher.serve(sys.stdin.buffer, sys.stdout)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, BinaryIO, TextIO

from mcp.types import (
    Implementation,
    InitializeResult,
    ResourcesCapability,
    ServerCapabilities,
    TextContent,
    ToolsCapability,
)

from scix_client import __version__
from scix_client.infrastructure.scix import SciXClient
from scix_client.shared.exceptions import InvalidParameterError, RpcErrorCode, SciXError

from .instructions import SERVER_INSTRUCTIONS
from .protocol import (
    LATEST_PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    RpcMethod,
    RpcProtocolError,
    RpcRequest,
    RpcResponse,
    SessionState,
)
from .resources import RESOURCE_LIST_PAYLOAD, read_resource
from .tool_registry import TOOL_LIST_PAYLOAD, ToolName, get_tool, validate_arguments
from .tools import ToolHandlers

logger = logging.getLogger(__name__)

SERVER_NAME = "scix-mcp"


class Dispatcher:
    """
    Routes decoded requests to handlers and tracks the session state.

    ``handle_line()`` is the unit of work: it takes one raw input line and
    returns the response line, or ``None`` when no reply is due.
    """

    def __init__(self, client: SciXClient, handlers: ToolHandlers | None = None) -> None:
        self._client = client
        self._handlers = handlers or ToolHandlers(client)
        self.state = SessionState.UNINITIALIZED
        self.protocol_version: str | None = None

    # =========================================================================
    # Stream loop
    # =========================================================================

    async def serve(self, instream: BinaryIO, outstream: TextIO) -> None:
        """
        Process *instream* until end of input.

        *instream* is read as bytes; each line is decoded on its own so an
        invalid UTF-8 line is answered with a parse error instead of ending
        the loop.
        """
        logger.info("SciX MCP server ready on stdio")
        while True:
            # Blocking readline runs in a worker thread so the event loop
            # stays free for the in-flight request.
            line = await asyncio.to_thread(instream.readline)
            if not line:
                break
            if not line.strip():
                continue
            reply = await self.handle_line(line)
            if reply is not None:
                outstream.write(reply + "\n")
                outstream.flush()

        self.state = SessionState.TERMINAL
        logger.info("Input closed, shutting down")

    async def handle_line(self, line: str | bytes) -> str | None:
        try:
            request = RpcRequest.from_line(line)
        except RpcProtocolError as e:
            if e.is_notification:
                logger.warning(f"Dropping malformed notification: {e.message}")
                return None
            if e.code == RpcErrorCode.PARSE_ERROR:
                logger.warning(f"Skipping unparseable input line: {e.message}")
            else:
                logger.warning(f"Rejecting malformed request: {e.message}")
            return RpcResponse.failure(e.request_id, e.code, e.message, e.data).to_line()

        response = await self.handle(request)
        return response.to_line() if response is not None else None

    # =========================================================================
    # Routing
    # =========================================================================

    async def handle(self, request: RpcRequest) -> RpcResponse | None:
        """Handle one decoded message; ``None`` for notifications."""
        method = RpcMethod.decode(request.method)

        if request.is_notification:
            self._handle_notification(method, request.method)
            return None

        try:
            result = await self._dispatch(method, request)
        except RpcProtocolError as e:
            return RpcResponse.failure(request.id, e.code, e.message, e.data)
        except SciXError as e:
            logger.info(f"{request.method} failed: {e}")
            return RpcResponse.failure(request.id, e.rpc_code, str(e), e.to_dict())
        except Exception as e:
            logger.exception(f"Unexpected error handling {request.method}: {e}")
            return RpcResponse.failure(request.id, RpcErrorCode.INTERNAL_ERROR, f"Internal error: {e}")
        return RpcResponse.success(request.id, result)

    def _handle_notification(self, method: RpcMethod | None, name: str) -> None:
        match method:
            case RpcMethod.INITIALIZED:
                if self.state is SessionState.INITIALIZING:
                    self.state = SessionState.READY
                    logger.info("Session ready")
                else:
                    logger.warning(f"Ignoring {name} in state {self.state.value}")
            case RpcMethod.CANCELLED:
                # Requests run to completion; there is nothing to cancel.
                logger.debug("Ignoring cancellation notification")
            case _:
                logger.debug(f"Ignoring notification {name}")

    async def _dispatch(self, method: RpcMethod | None, request: RpcRequest) -> Any:
        if method is None:
            raise RpcProtocolError(RpcErrorCode.METHOD_NOT_FOUND, f"Method not found: {request.method}")

        if method is RpcMethod.INITIALIZE:
            return self._initialize(request.params)

        if self.state is SessionState.UNINITIALIZED:
            raise RpcProtocolError(RpcErrorCode.SERVER_NOT_INITIALIZED, "Server not initialized")
        if self.state is SessionState.INITIALIZING:
            logger.debug(f"{request.method} received before notifications/initialized; accepting")

        match method:
            case RpcMethod.PING:
                return {}
            case RpcMethod.TOOLS_LIST:
                return {"tools": TOOL_LIST_PAYLOAD}
            case RpcMethod.TOOLS_CALL:
                return await self._call_tool(request.params)
            case RpcMethod.RESOURCES_LIST:
                return {"resources": RESOURCE_LIST_PAYLOAD}
            case RpcMethod.RESOURCES_READ:
                uri = request.params.get("uri")
                if not isinstance(uri, str):
                    raise InvalidParameterError("uri", "must be a string")
                return read_resource(uri)
            case RpcMethod.INITIALIZED | RpcMethod.CANCELLED:
                # Notification methods sent with an id.
                self._handle_notification(method, request.method)
                return {}
            case _:
                raise RpcProtocolError(RpcErrorCode.METHOD_NOT_FOUND, f"Method not found: {request.method}")

    # =========================================================================
    # Handlers
    # =========================================================================

    def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        if self.state is not SessionState.UNINITIALIZED:
            raise RpcProtocolError(RpcErrorCode.INVALID_REQUEST, "Server already initialized")

        requested = params.get("protocolVersion")
        if not isinstance(requested, str):
            raise RpcProtocolError(
                RpcErrorCode.INVALID_PARAMS,
                "Invalid params: protocolVersion must be a string",
                data={"parameter": "protocolVersion"},
            )

        if requested in SUPPORTED_PROTOCOL_VERSIONS:
            version = requested
        else:
            version = LATEST_PROTOCOL_VERSION
            logger.info(f"Client requested unsupported protocol {requested!r}; offering {version}")

        client_info = params.get("clientInfo") or {}
        if isinstance(client_info, dict) and client_info.get("name"):
            logger.info(f"Client: {client_info.get('name')} {client_info.get('version', '')}".rstrip())

        self.protocol_version = version
        self.state = SessionState.INITIALIZING

        result = InitializeResult(
            protocolVersion=version,
            capabilities=ServerCapabilities(tools=ToolsCapability(), resources=ResourcesCapability()),
            serverInfo=Implementation(name=SERVER_NAME, version=__version__),
            instructions=SERVER_INSTRUCTIONS,
        )
        return result.model_dump(by_alias=True, exclude_none=True, mode="json")

    async def _call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str):
            raise InvalidParameterError("name", "tool name must be a string")

        descriptor = get_tool(name)
        if descriptor is None:
            raise RpcProtocolError(
                RpcErrorCode.INVALID_PARAMS,
                f"Unknown tool: {name}",
                data={"tool": name},
            )

        arguments = params.get("arguments")
        if arguments is not None and not isinstance(arguments, dict):
            raise InvalidParameterError("arguments", "must be an object")

        validated = validate_arguments(descriptor, arguments)
        logger.info(f"Tool call: {name}")
        text = await self._handlers.call(ToolName(name), validated)
        content = TextContent(type="text", text=text)
        return {"content": [content.model_dump(by_alias=True, exclude_none=True, mode="json")]}
