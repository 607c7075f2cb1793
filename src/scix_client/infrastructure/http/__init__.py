"""HTTP transport for the SciX API."""

from .client import ApiRequest, SciXBase, parse_retry_after

__all__ = ["ApiRequest", "SciXBase", "parse_retry_after"]
