"""Shared infrastructure: errors, configuration and the rate limiter."""

from .config import ClientConfig
from .exceptions import (
    APIError,
    AuthRequiredError,
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    InvalidParameterError,
    InvalidQueryError,
    NetworkError,
    NotFoundError,
    ParseError,
    RateLimitError,
    SciXError,
    ValidationError,
)
from .rate_limiter import RateLimiter

__all__ = [
    "APIError",
    "AuthRequiredError",
    "ClientConfig",
    "ConfigurationError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidParameterError",
    "InvalidQueryError",
    "NetworkError",
    "NotFoundError",
    "ParseError",
    "RateLimitError",
    "RateLimiter",
    "SciXError",
    "ValidationError",
]
