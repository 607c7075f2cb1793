"""
QueryValidator - SciX query syntax validation

Pre-flight validation for SciX queries before they are sent to the API.
Only structural problems are detected; the query text itself is passed
through unmodified.

Validation checks:
- Empty query
- Parentheses balancing (outside quotes)
- Quote balancing
- Range brackets ``[a TO b]`` balancing
- Dangling or doubled Boolean operators
- Unknown field prefixes (warning only)

Example:
    >>> validator = QueryValidator()
    >>> result = validator.validate('author:"Einstein AND year:1905')
    >>> result.is_valid
    False
    >>> result.errors
    ['Unbalanced quotes: 1 double quote(s) found (should be even)']
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from scix_client.shared.exceptions import InvalidQueryError

MAX_QUERY_LENGTH = 8192

# Search fields recognised by the API. Unknown ones only produce a warning,
# since the API accepts many more.
KNOWN_FIELDS = frozenset(
    {
        "abs",
        "abstract",
        "ack",
        "aff",
        "aff_id",
        "alternate_bibcode",
        "arxiv_class",
        "author",
        "author_count",
        "bibcode",
        "bibgroup",
        "bibstem",
        "body",
        "citation_count",
        "collection",
        "data",
        "database",
        "date",
        "doctype",
        "doi",
        "entdate",
        "esources",
        "first_author",
        "full",
        "grant",
        "identifier",
        "inst",
        "issue",
        "keyword",
        "lang",
        "object",
        "orcid",
        "orcid_pub",
        "orcid_user",
        "orcid_other",
        "page",
        "property",
        "pub",
        "pubdate",
        "read_count",
        "title",
        "vizier",
        "volume",
        "year",
    }
)

FUNCTIONAL_OPERATORS = frozenset(
    {"citations", "references", "similar", "trending", "reviews", "useful", "topn", "pos"}
)

_QUOTED = re.compile(r'"[^"]*"')
_FIELD_PREFIX = re.compile(r"(?<![\w.])([A-Za-z_]+):")
_DOUBLE_OPS = re.compile(r"\b(AND|OR|NOT)\s+(AND|OR)\b")
_LEADING_OP = re.compile(r"^\s*(AND|OR)\b")
_TRAILING_OP = re.compile(r"\b(AND|OR|NOT)\s*$")
_OP_AFTER_OPEN = re.compile(r"\(\s*(AND|OR)\b")
_OP_BEFORE_CLOSE = re.compile(r"\b(AND|OR|NOT)\s*\)")


@dataclass
class QueryValidationResult:
    """Result of query syntax validation."""

    is_valid: bool
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def summary(self) -> str:
        """Human-readable summary."""
        if self.is_valid and not self.warnings:
            return "Query syntax is valid"
        parts = []
        if self.errors:
            parts.append(f"{len(self.errors)} error(s): {'; '.join(self.errors)}")
        if self.warnings:
            parts.append(f"{len(self.warnings)} warning(s): {'; '.join(self.warnings)}")
        return " | ".join(parts)


class QueryValidator:
    """
    SciX query syntax validator.

    ``validate()`` reports every problem found; ``ensure_valid()`` raises
    ``InvalidQueryError`` with the first error.
    """

    def validate(self, query: str | None) -> QueryValidationResult:
        """
        Validate a SciX query string.

        Checks (in order):
        1. Empty/whitespace-only query
        2. Query length
        3. Quote balance
        4. Parentheses balance
        5. Range bracket balance
        6. Boolean operator placement
        7. Field prefixes
        """
        if query is None or not query.strip():
            return QueryValidationResult(is_valid=False, errors=["Query cannot be empty"])

        errors: list[str] = []
        warnings: list[str] = []

        if len(query) > MAX_QUERY_LENGTH:
            warnings.append(f"Query length ({len(query)}) exceeds recommended limit ({MAX_QUERY_LENGTH})")

        quote_error = self._check_quotes(query)
        if quote_error:
            errors.append(quote_error)
            # Everything after a stray quote is ambiguous; stop here.
            return QueryValidationResult(is_valid=False, errors=errors, warnings=warnings)

        stripped = _QUOTED.sub('""', query)

        paren_error = self._check_pairs(stripped, "(", ")", "parentheses")
        if paren_error:
            errors.append(paren_error)

        bracket_error = self._check_pairs(stripped, "[", "]", "range brackets")
        if bracket_error:
            errors.append(bracket_error)

        errors.extend(self._check_boolean_operators(stripped))
        warnings.extend(self._check_fields(stripped))

        return QueryValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

    def ensure_valid(self, query: str | None) -> str:
        """Return *query* unchanged, or raise ``InvalidQueryError``."""
        result = self.validate(query)
        if not result.is_valid:
            raise InvalidQueryError(query, result.errors[0])
        return query  # type: ignore[return-value]

    # ================================================================
    # Check methods
    # ================================================================

    @staticmethod
    def _check_quotes(query: str) -> str | None:
        count = query.count('"')
        if count % 2 != 0:
            return f"Unbalanced quotes: {count} double quote(s) found (should be even)"
        return None

    @staticmethod
    def _check_pairs(text: str, opening: str, closing: str, label: str) -> str | None:
        depth = 0
        for ch in text:
            if ch == opening:
                depth += 1
            elif ch == closing:
                depth -= 1
                if depth < 0:
                    return f"Unbalanced {label}: closing '{closing}' without matching opening '{opening}'"
        if depth > 0:
            return f"Unbalanced {label}: {depth} opening '{opening}' without matching closing '{closing}'"
        return None

    @staticmethod
    def _check_boolean_operators(stripped: str) -> list[str]:
        # Operators are case-sensitive in the query language; lowercase
        # "and"/"or" are ordinary search terms. "AND NOT" is valid.
        errors: list[str] = []
        if _DOUBLE_OPS.search(stripped):
            errors.append("Consecutive Boolean operators (e.g. 'AND OR') without an operand between")
        if _LEADING_OP.match(stripped) or _OP_AFTER_OPEN.search(stripped):
            errors.append("Boolean operator (AND/OR) is missing its left operand")
        if _TRAILING_OP.search(stripped) or _OP_BEFORE_CLOSE.search(stripped):
            errors.append("Boolean operator is missing its right operand")
        return errors

    @staticmethod
    def _check_fields(stripped: str) -> list[str]:
        warnings = []
        for match in _FIELD_PREFIX.finditer(stripped):
            name = match.group(1).lower()
            if name in KNOWN_FIELDS or name in FUNCTIONAL_OPERATORS:
                continue
            # "arXiv:2301.12345" inside identifier values
            if name == "arxiv":
                continue
            warnings.append(f"Unrecognized field '{match.group(1)}:'. It may still be valid.")
        return warnings


_default_validator = QueryValidator()


def validate_query(query: str | None) -> str:
    """Validate with the shared validator; raise ``InvalidQueryError`` on structural errors."""
    return _default_validator.ensure_valid(query)
