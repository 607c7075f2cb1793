"""
Unified Exception Hierarchy for the SciX client.

Every failure of a remote call surfaces as exactly one of these kinds, so
callers (CLI, MCP dispatcher, library users) can branch on the type.

Exception Hierarchy:
    SciXError (base)
    ├── APIError (status, message)
    │   ├── RateLimitError (retry_after)
    │   └── NotFoundError
    ├── NetworkError
    ├── AuthRequiredError
    ├── ParseError
    ├── ValidationError
    │   ├── InvalidQueryError
    │   └── InvalidParameterError
    └── ConfigurationError

No error is retried by the client itself; ``retryable`` is only a hint for
the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Categories for error classification."""

    API = "api"
    NETWORK = "network"
    AUTH = "auth"
    DATA = "data"
    VALIDATION = "validation"
    CONFIGURATION = "config"


class RpcErrorCode:
    """JSON-RPC error codes used when an error crosses the dispatcher boundary."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    SERVER_NOT_INITIALIZED = -32002

    AUTH_REQUIRED = -32001
    NOT_FOUND = -32004
    API_ERROR = -32010
    NETWORK_ERROR = -32011
    PARSE_FAILURE = -32012
    CONFIGURATION_ERROR = -32013
    RATE_LIMITED = -32029


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Extra, agent-facing detail attached to an error."""

    tool_name: str | None = None
    suggestion: str | None = None
    example: str | None = None


class SciXError(Exception):
    """
    Base exception for all SciX client errors.

    Provides:
    - Structured error context
    - Category and retry hint
    - JSON-RPC error code
    - Agent-friendly formatting
    """

    rpc_code: int = RpcErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        category: ErrorCategory = ErrorCategory.API,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.category = category
        self.retryable = retryable

    @property
    def kind(self) -> str:
        """Short, stable name of the error kind (e.g. ``"rate_limited"``)."""
        return _KIND_NAMES.get(type(self), "error")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "kind": self.kind,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.context.tool_name:
            result["tool"] = self.context.tool_name
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        if self.context.example:
            result["example"] = self.context.example
        return result

    def to_agent_message(self) -> str:
        """Format for Agent consumption (Markdown)."""
        parts = [f"**Error**: {self}"]
        if self.context.suggestion:
            parts.append(f"**Suggestion**: {self.context.suggestion}")
        if self.context.example:
            parts.append(f"**Example**: `{self.context.example}`")
        return "\n".join(parts)


# =============================================================================
# API Errors
# =============================================================================


class APIError(SciXError):
    """The remote API reported a failure (HTTP 4xx/5xx)."""

    rpc_code = RpcErrorCode.API_ERROR

    def __init__(
        self,
        status: int,
        message: str,
        *,
        context: ErrorContext | None = None,
        retryable: bool | None = None,
    ) -> None:
        super().__init__(
            f"API error (HTTP {status}): {message}",
            context=context,
            category=ErrorCategory.API,
            retryable=status >= 500 if retryable is None else retryable,
        )
        self.status = status
        self.api_message = message

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["status"] = self.status
        return result


class RateLimitError(APIError):
    """Raised on HTTP 429. Carries the server-suggested wait, if any."""

    rpc_code = RpcErrorCode.RATE_LIMITED

    def __init__(
        self,
        retry_after: float | None = None,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext(suggestion="Wait before issuing further requests")
        super().__init__(429, "rate limit exceeded", context=ctx, retryable=True)
        self.retry_after = retry_after
        if retry_after is not None:
            self.args = (f"Rate limited, retry after {retry_after:g}s",)
        else:
            self.args = ("Rate limited",)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.retry_after is not None:
            result["retry_after_seconds"] = self.retry_after
        return result

    def to_agent_message(self) -> str:
        message = super().to_agent_message()
        if self.retry_after is not None:
            message += f"\nRetry after {self.retry_after:.1f} seconds"
        return message


class NotFoundError(APIError):
    """Raised on HTTP 404, or when a lookup returns no record."""

    rpc_code = RpcErrorCode.NOT_FOUND

    def __init__(
        self,
        resource: str = "Resource",
        identifier: str | None = None,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        msg = f"{resource} not found"
        if identifier:
            msg = f"{resource} not found: {identifier}"
        ctx = context or ErrorContext(suggestion="Check the identifier and try again")
        super().__init__(404, msg, context=ctx, retryable=False)
        self.args = (f"Not found: {msg}",)
        self.identifier = identifier


# =============================================================================
# Transport / auth / data errors
# =============================================================================


class NetworkError(SciXError):
    """Connection refused, DNS failure or timeout. Not retried automatically."""

    rpc_code = RpcErrorCode.NETWORK_ERROR

    def __init__(
        self,
        message: str = "Network connection failed",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            f"HTTP request failed: {message}",
            context=context,
            category=ErrorCategory.NETWORK,
            retryable=True,
        )


class AuthRequiredError(SciXError):
    """No API token configured, or the configured token was rejected."""

    rpc_code = RpcErrorCode.AUTH_REQUIRED

    def __init__(
        self,
        message: str = (
            "Authentication required: set SCIX_API_TOKEN (or ADS_API_TOKEN) "
            "environment variable or pass a token to SciXClient"
        ),
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, context=context, category=ErrorCategory.AUTH)


class ParseError(SciXError):
    """The response body did not match the expected structure."""

    rpc_code = RpcErrorCode.PARSE_FAILURE

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        full_msg = f"Failed to parse response: {message}"
        if source:
            full_msg = f"Failed to parse response ({source}): {message}"
        super().__init__(full_msg, context=context, category=ErrorCategory.DATA)


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(SciXError):
    """Base class for errors detected locally, before any request is sent."""

    rpc_code = RpcErrorCode.INVALID_PARAMS

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, context=context, category=ErrorCategory.VALIDATION)


class InvalidQueryError(ValidationError):
    """Raised when query syntax is malformed (where detectable)."""

    def __init__(
        self,
        query: str | None,
        reason: str = "Query cannot be empty",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext(
            suggestion="Check parentheses, quotes and boolean operators",
            example='author:"Einstein" AND year:1905',
        )
        super().__init__(f"Invalid query: {reason}", context=ctx)
        self.query = query
        self.reason = reason


class InvalidParameterError(ValidationError):
    """Raised when a tool or operation parameter is missing or malformed."""

    def __init__(
        self,
        param_name: str,
        reason: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(f"Invalid parameter '{param_name}': {reason}", context=context)
        self.param_name = param_name
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["parameter"] = self.param_name
        return result


class ConfigurationError(SciXError):
    """Invalid local configuration, e.g. a malformed base URL."""

    rpc_code = RpcErrorCode.CONFIGURATION_ERROR

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            f"Configuration error: {message}",
            context=context,
            category=ErrorCategory.CONFIGURATION,
        )


_KIND_NAMES: dict[type[SciXError], str] = {
    SciXError: "error",
    APIError: "api",
    RateLimitError: "rate_limited",
    NotFoundError: "not_found",
    NetworkError: "network",
    AuthRequiredError: "auth_required",
    ParseError: "parse",
    ValidationError: "validation",
    InvalidQueryError: "invalid_query",
    InvalidParameterError: "invalid_parameter",
    ConfigurationError: "config",
}
