"""Query value objects.

A ``SearchQuery`` is immutable once built. Raw query text is split on
whitespace; ``+word`` marks a required term and ``-word`` an excluded one.
Terms are kept as typed; the engine normalizes them with the text processor
before touching the index.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class QueryType(str, Enum):
    """How the terms of a query are combined."""

    EXACT_MATCH = "exact_match"
    ALL_TERMS = "all_terms"
    ANY_TERMS = "any_terms"
    FUZZY = "fuzzy"
    WILDCARD = "wildcard"


SortField = Literal["relevance", "date", "length", "title"]


def _clean(words: tuple[str, ...] | list[str]) -> list[str]:
    """Split each raw term on whitespace so "java development" becomes two terms."""
    return [part for word in words if word for part in word.split()]


class SearchQuery(BaseModel):
    """Value object describing one search request."""

    model_config = ConfigDict(frozen=True)

    original_text: str = ""
    terms: list[str] = Field(default_factory=list)
    required_terms: list[str] = Field(default_factory=list)
    excluded_terms: list[str] = Field(default_factory=list)
    query_type: QueryType = QueryType.ALL_TERMS
    max_results: int = Field(default=10, description="Result cap; zero or negative means unlimited")
    include_snippets: bool = True
    highlight_terms: bool = True
    language: str | None = Field(default=None, description="Only return documents whose metadata language matches")
    sort_by: SortField = "relevance"
    sort_ascending: bool = False
    max_distance: int = Field(default=2, ge=0, description="Edit distance for fuzzy queries")

    @classmethod
    def parse(cls, text: str | None, query_type: QueryType = QueryType.ALL_TERMS, **options: Any) -> "SearchQuery":
        """Build a query from raw text, honouring ``+required`` and ``-excluded`` prefixes."""
        terms: list[str] = []
        required: list[str] = []
        excluded: list[str] = []

        for word in (text or "").split():
            if word.startswith("+"):
                target, word = required, word[1:]
            elif word.startswith("-"):
                target, word = excluded, word[1:]
            else:
                target = terms
            if word:
                target.append(word)

        return cls(
            original_text=(text or "").strip(),
            terms=terms,
            required_terms=required,
            excluded_terms=excluded,
            query_type=query_type,
            **options,
        )

    @classmethod
    def exact_phrase(cls, phrase: str, **options: Any) -> "SearchQuery":
        return cls.parse(phrase, QueryType.EXACT_MATCH, **options)

    @classmethod
    def all_terms(cls, *terms: str, **options: Any) -> "SearchQuery":
        cleaned = _clean(terms)
        return cls(original_text=" ".join(cleaned), terms=cleaned, query_type=QueryType.ALL_TERMS, **options)

    @classmethod
    def any_terms(cls, *terms: str, **options: Any) -> "SearchQuery":
        cleaned = _clean(terms)
        return cls(original_text=" ".join(cleaned), terms=cleaned, query_type=QueryType.ANY_TERMS, **options)

    @classmethod
    def fuzzy(cls, text: str, **options: Any) -> "SearchQuery":
        return cls.parse(text, QueryType.FUZZY, **options)

    @classmethod
    def wildcard(cls, pattern: str, **options: Any) -> "SearchQuery":
        return cls.parse(pattern, QueryType.WILDCARD, **options)

    def all_search_terms(self) -> list[str]:
        """Plain terms followed by required terms."""
        return [*self.terms, *self.required_terms]

    def phrase_text(self) -> str:
        """The query text in its original word order with ``+``/``-`` prefixes removed."""
        if not self.original_text:
            return " ".join(self.all_search_terms())
        words = (word[1:] if word[0] in "+-" else word for word in self.original_text.split())
        return " ".join(word for word in words if word)

    def has_terms(self) -> bool:
        return bool(self.terms or self.required_terms)

    def term_count(self) -> int:
        return len(self.terms) + len(self.required_terms)

    def is_unlimited(self) -> bool:
        return self.max_results <= 0

    def with_options(self, **updates: Any) -> "SearchQuery":
        """Return a copy with some fields replaced."""
        return self.model_copy(update=updates)
