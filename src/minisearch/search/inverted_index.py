"""In-memory inverted index.

Two structures are maintained together: the primary store (URL -> record)
and the posting store (term -> URL -> record). A term is present in the
posting store only while at least one document contains it, and every
term in a stored record's frequency map has a posting for that record.

The index is not thread-safe on its own; ``SearchIndexer`` serializes
access with a reader/writer lock.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from minisearch.search.document import DocumentRecord
from minisearch.search.scoring import index_relevance


MOST_COMMON_TERMS_LIMIT = 10


@dataclass(frozen=True)
class RankedDocument:
    """A candidate document paired with its index-level score."""

    document: DocumentRecord
    score: float

    @property
    def url(self) -> str:
        return self.document.url


@dataclass(frozen=True)
class IndexStats:
    """Point-in-time summary of the index."""

    total_terms: int
    total_documents: int
    unique_terms: int
    most_common_terms: tuple[tuple[str, int], ...] = field(default_factory=tuple)

    @property
    def average_terms_per_document(self) -> float:
        if self.total_documents == 0:
            return 0.0
        return self.total_terms / self.total_documents

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_terms": self.total_terms,
            "total_documents": self.total_documents,
            "unique_terms": self.unique_terms,
            "average_terms_per_document": self.average_terms_per_document,
            "most_common_terms": [list(entry) for entry in self.most_common_terms],
        }


def rank(documents: Iterable[DocumentRecord], terms: Sequence[str]) -> list[RankedDocument]:
    """Score documents and order them by score desc, then URL asc."""
    ranked = [RankedDocument(document=doc, score=index_relevance(doc, terms)) for doc in documents]
    ranked.sort(key=lambda entry: (-entry.score, entry.document.url))
    return ranked


class InvertedIndex:
    """Term -> document posting structure with corpus-level statistics."""

    def __init__(self) -> None:
        self._postings: dict[str, dict[str, DocumentRecord]] = {}
        self._documents: dict[str, DocumentRecord] = {}
        self._total_terms = 0

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def add_document(self, document: DocumentRecord) -> None:
        """Store a document and post it under each of its terms.

        Adding a URL that is already present replaces the old version.
        """
        if document.url in self._documents:
            self.remove_document(document.url)

        self._documents[document.url] = document
        for term in document.term_frequencies:
            self._postings.setdefault(term, {})[document.url] = document
            self._total_terms += 1

    def remove_document(self, url: str) -> DocumentRecord | None:
        """Remove a document and every posting that points at it."""
        document = self._documents.pop(url, None)
        if document is None:
            return None

        for term in document.term_frequencies:
            term_docs = self._postings.get(term)
            if term_docs is None or url not in term_docs:
                continue
            del term_docs[url]
            self._total_terms -= 1
            if not term_docs:
                del self._postings[term]
        return document

    def update_document(self, document: DocumentRecord) -> None:
        """Full replace: remove whatever is stored under the URL, then add."""
        self.remove_document(document.url)
        self.add_document(document)

    def clear(self) -> None:
        self._postings.clear()
        self._documents.clear()
        self._total_terms = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def search(self, terms: Sequence[str]) -> list[RankedDocument]:
        """AND search: documents that contain every term."""
        if not terms:
            return []

        common: set[str] | None = None
        for term in terms:
            term_urls = self.document_urls_for_term(term)
            common = set(term_urls) if common is None else common & term_urls
            if not common:
                return []

        return rank((self._documents[url] for url in common or ()), terms)

    def search_any(self, terms: Sequence[str]) -> list[RankedDocument]:
        """OR search: documents that contain at least one term."""
        if not terms:
            return []

        urls: set[str] = set()
        for term in terms:
            urls.update(self.document_urls_for_term(term))

        return rank((self._documents[url] for url in urls), terms)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def documents_for_term(self, term: str) -> list[DocumentRecord]:
        return list(self._postings.get(term, {}).values())

    def document_urls_for_term(self, term: str) -> set[str]:
        return set(self._postings.get(term, ()))

    def all_terms(self) -> set[str]:
        return set(self._postings)

    def all_documents(self) -> list[DocumentRecord]:
        return list(self._documents.values())

    def get_document(self, url: str) -> DocumentRecord | None:
        return self._documents.get(url)

    def is_document_indexed(self, url: str) -> bool:
        return url in self._documents

    def contains_term(self, term: str) -> bool:
        return term in self._postings

    def document_frequency(self, term: str) -> int:
        return len(self._postings.get(term, ()))

    @property
    def total_terms(self) -> int:
        """Number of live (term, document) postings."""
        return self._total_terms

    @property
    def total_documents(self) -> int:
        return len(self._documents)

    @property
    def unique_terms(self) -> int:
        return len(self._postings)

    def index_stats(self) -> IndexStats:
        most_common = sorted(
            ((term, len(docs)) for term, docs in self._postings.items()),
            key=lambda item: (-item[1], item[0]),
        )[:MOST_COMMON_TERMS_LIMIT]
        return IndexStats(
            total_terms=self._total_terms,
            total_documents=self.total_documents,
            unique_terms=self.unique_terms,
            most_common_terms=tuple(most_common),
        )

    def __len__(self) -> int:
        return len(self._documents)
