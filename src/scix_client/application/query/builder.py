"""
QueryBuilder - Fluent construction of SciX query strings.

Example:
    >>> QueryBuilder().author("Einstein").and_().year_range(1905, 1910).build()
    'author:"Einstein" AND year:[1905 TO 1910]'
    >>> QueryBuilder.citations_of("2023ApJ...123..456A").build()
    'citations(bibcode:2023ApJ...123..456A)'

Parts are joined with single spaces; Boolean operators are added explicitly.
"""

from __future__ import annotations


def _quoted(text: str) -> str:
    # Embedded double quotes would unbalance the phrase.
    return '"' + text.replace('"', "") + '"'


class QueryBuilder:
    """Accumulates query fragments; every method returns ``self`` for chaining."""

    def __init__(self) -> None:
        self._parts: list[str] = []

    def _add(self, part: str) -> QueryBuilder:
        self._parts.append(part)
        return self

    # Field selectors

    def author(self, name: str) -> QueryBuilder:
        return self._add(f"author:{_quoted(name)}")

    def first_author(self, name: str) -> QueryBuilder:
        return self._add(f"first_author:{_quoted(name)}")

    def title(self, text: str) -> QueryBuilder:
        return self._add(f"title:{_quoted(text)}")

    def abstract_contains(self, text: str) -> QueryBuilder:
        return self._add(f"abs:{_quoted(text)}")

    def year(self, year: int) -> QueryBuilder:
        return self._add(f"year:{year}")

    def year_range(self, start: int, end: int) -> QueryBuilder:
        return self._add(f"year:[{start} TO {end}]")

    def bibcode(self, bibcode: str) -> QueryBuilder:
        return self._add(f"bibcode:{bibcode}")

    def doi(self, doi: str) -> QueryBuilder:
        return self._add(f"doi:{_quoted(doi)}")

    def arxiv(self, arxiv_id: str) -> QueryBuilder:
        return self._add(f"identifier:arXiv:{arxiv_id}")

    def object(self, name: str) -> QueryBuilder:
        return self._add(f"object:{_quoted(name)}")

    def bibstem(self, stem: str) -> QueryBuilder:
        return self._add(f"bibstem:{stem}")

    def property(self, prop: str) -> QueryBuilder:
        return self._add(f"property:{prop}")

    def doctype(self, doctype: str) -> QueryBuilder:
        return self._add(f"doctype:{doctype}")

    def orcid(self, orcid: str) -> QueryBuilder:
        return self._add(f"orcid:{orcid}")

    # Boolean operators

    def and_(self) -> QueryBuilder:
        return self._add("AND")

    def or_(self) -> QueryBuilder:
        return self._add("OR")

    def exclude(self) -> QueryBuilder:
        return self._add("NOT")

    def raw(self, fragment: str) -> QueryBuilder:
        """Append *fragment* verbatim."""
        return self._add(fragment)

    # Functional operators

    @classmethod
    def citations_of(cls, bibcode: str) -> QueryBuilder:
        return cls()._add(f"citations(bibcode:{bibcode})")

    @classmethod
    def references_of(cls, bibcode: str) -> QueryBuilder:
        return cls()._add(f"references(bibcode:{bibcode})")

    @classmethod
    def similar_to(cls, bibcode: str) -> QueryBuilder:
        return cls()._add(f"similar(bibcode:{bibcode})")

    @classmethod
    def trending(cls, bibcode: str) -> QueryBuilder:
        return cls()._add(f"trending(bibcode:{bibcode})")

    def build(self) -> str:
        return " ".join(self._parts)

    def __str__(self) -> str:
        return self.build()

    def __repr__(self) -> str:
        return f"QueryBuilder({self.build()!r})"
