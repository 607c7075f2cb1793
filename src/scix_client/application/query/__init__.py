"""Query construction and pre-flight validation."""

from .builder import QueryBuilder
from .validator import QueryValidationResult, QueryValidator, validate_query

__all__ = [
    "QueryBuilder",
    "QueryValidationResult",
    "QueryValidator",
    "validate_query",
]
