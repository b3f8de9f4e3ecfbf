"""Per-document term statistics and metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from minisearch.search.models import WebPage


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DocumentRecord:
    """An indexed document.

    ``term_frequencies`` and ``term_positions`` always share the same keys
    once the record has been processed. ``update_content`` empties both;
    the indexer re-tokenizes and repopulates them.
    """

    url: str
    title: str = ""
    domain: str = ""
    content: str = ""
    links: list[str] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)
    term_frequencies: dict[str, int] = field(default_factory=dict)
    term_positions: dict[str, list[int]] = field(default_factory=dict)
    indexed_at: datetime = field(default_factory=_utcnow)
    last_updated: datetime = field(default_factory=_utcnow)
    content_length: int = 0
    relevance_score: float = 0.0

    @classmethod
    def from_page(cls, page: WebPage) -> DocumentRecord:
        now = _utcnow()
        return cls(
            url=page.url,
            title=page.title,
            domain=page.domain,
            content=page.content,
            links=list(page.links),
            metadata=dict(page.metadata),
            indexed_at=now,
            last_updated=now,
            content_length=len(page.content),
        )

    def add_term(self, term: str, frequency: int, positions: list[int]) -> None:
        self.term_frequencies[term] = frequency
        self.term_positions[term] = positions

    def term_frequency(self, term: str) -> int:
        return self.term_frequencies.get(term, 0)

    def positions_for(self, term: str) -> list[int]:
        return list(self.term_positions.get(term, ()))

    def contains_term(self, term: str) -> bool:
        return term in self.term_frequencies

    def all_terms(self) -> list[str]:
        return list(self.term_frequencies)

    def update_content(self, new_content: str) -> None:
        """Replace content and drop the stale term maps."""
        self.content = new_content
        self.content_length = len(new_content)
        self.last_updated = _utcnow()
        self.term_frequencies.clear()
        self.term_positions.clear()

    def calculate_relevance_score(self) -> float:
        """Query-independent quality signal: term diversity plus capped length."""
        term_diversity = float(len(self.term_frequencies))
        content_score = min(self.content_length / 1000.0, 10.0)
        self.relevance_score = term_diversity + content_score
        return self.relevance_score

    def __repr__(self) -> str:
        return (
            f"DocumentRecord(url={self.url!r}, title={self.title!r}, terms={len(self.term_frequencies)}, "
            f"content_length={self.content_length}, relevance_score={self.relevance_score:.2f})"
        )
