"""Relevance formulas.

Ranking runs in two stages. ``index_relevance`` pre-ranks the candidate
documents coming out of the inverted index; ``result_relevance`` produces
the score surfaced on each ``SearchResult`` and used for the final order.
Neither function mutates the documents it scores.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import math
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from minisearch.search.document import DocumentRecord


QUALITY_WEIGHT = 0.1
TITLE_BONUS = 2.0
DOMAIN_BONUS = 0.5
POSITION_WEIGHT = 0.5


def _in_title(term: str, title: str | None) -> bool:
    return bool(title) and term.lower() in title.lower()  # type: ignore[union-attr]


def index_relevance(document: DocumentRecord, terms: Sequence[str]) -> float:
    """Score a candidate document against the query terms.

    For each query term present in the document: ``1 + ln(1 + tf)`` plus a
    title bonus. The sum is normalized by the number of query terms, then
    the document's static quality score is blended in.
    """
    if not terms:
        return QUALITY_WEIGHT * document.relevance_score

    score = 0.0
    for term in terms:
        frequency = document.term_frequency(term)
        if not frequency:
            continue
        score += 1.0 + math.log1p(frequency)
        if _in_title(term, document.title):
            score += TITLE_BONUS

    score /= len(terms)
    return score + QUALITY_WEIGHT * document.relevance_score


def result_relevance(
    matched_terms: Sequence[str],
    term_positions: Mapping[str, Sequence[int]],
    *,
    title: str | None,
    domain: str | None,
    content_length: int,
) -> float:
    """Score a result from its matched terms and document metadata."""
    score = float(len(matched_terms))
    score += POSITION_WEIGHT * sum(len(positions) for positions in term_positions.values())
    score += sum(TITLE_BONUS for term in matched_terms if _in_title(term, title))

    if domain:
        score += DOMAIN_BONUS

    if content_length > 0:
        score += min(1000.0 / content_length, 1.0)

    return score
