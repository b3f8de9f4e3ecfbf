"""Exact-phrase verification over raw-word positions.

Positions stored on a document count every whitespace-separated word, so a
stop word removed from the phrase still occupies its slot. A phrase such as
"state of the art" therefore requires ``art`` three words after ``state``.
"""

from __future__ import annotations

from collections.abc import Sequence

from minisearch.search.analyzers import Token
from minisearch.search.document import DocumentRecord


def phrase_offsets(tokens: Sequence[Token]) -> list[tuple[str, int]]:
    """Turn analyzed phrase tokens into (term, offset-from-first-term) pairs."""
    if not tokens:
        return []
    base = tokens[0].position
    return [(token.text, token.position - base) for token in tokens]


def matches_phrase(document: DocumentRecord, offsets: Sequence[tuple[str, int]]) -> bool:
    """Check whether the terms occur in the document at the given relative offsets.

    Args:
        document: Indexed document with populated term positions.
        offsets: Output of :func:`phrase_offsets`.

    Returns:
        True when some anchor position satisfies every (term, offset) pair.
        An empty phrase never matches.
    """
    if not offsets:
        return False

    position_sets: dict[str, set[int]] = {}
    for term, _offset in offsets:
        if term not in position_sets:
            positions = document.term_positions.get(term)
            if not positions:
                return False
            position_sets[term] = set(positions)

    first_term, first_offset = offsets[0]
    for position in sorted(position_sets[first_term]):
        anchor = position - first_offset
        if all(anchor + offset in position_sets[term] for term, offset in offsets):
            return True
    return False
