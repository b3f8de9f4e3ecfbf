"""Candidate term expansion for typo-tolerant and pattern queries.

Fuzzy candidates for a query term are every vocabulary term that contains
it or is contained in it, plus every term within ``max_distance`` edits.
With ``max_distance=0`` only the substring rule applies.
"""

from __future__ import annotations

from collections.abc import Iterable
import fnmatch


WILDCARD_CHARS = frozenset("*?[")


def levenshtein_distance(s1: str, s2: str, max_distance: int | None = None) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    Args:
        s1: First string.
        s2: Second string.
        max_distance: If provided, return max_distance+1 as soon as the
            distance is guaranteed to exceed this threshold.

    Returns:
        The minimum number of single-character insertions, deletions and
        substitutions needed to change s1 into s2.

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
        >>> levenshtein_distance("", "abc")
        3
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)
    if max_distance is not None and n - m > max_distance:
        return max_distance + 1

    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        row_min = j
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(prev_row[i] + 1, curr_row[i - 1] + 1, prev_row[i - 1] + cost)
            row_min = min(row_min, curr_row[i])

        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


def substring_matches(query_term: str, vocabulary: Iterable[str]) -> list[str]:
    """Vocabulary terms that contain ``query_term`` or are contained in it."""
    if not query_term:
        return []
    needle = query_term.lower()
    matches = []
    for term in vocabulary:
        candidate = term.lower()
        if needle in candidate or candidate in needle:
            matches.append(term)
    return sorted(matches)


def find_fuzzy_matches(query_term: str, vocabulary: Iterable[str], max_distance: int) -> list[tuple[str, int]]:
    """Find vocabulary terms within ``max_distance`` edits of the query term.

    Returns:
        (term, distance) tuples sorted by distance, then term.
    """
    if not query_term or max_distance < 0:
        return []

    needle = query_term.lower()
    matches: list[tuple[str, int]] = []
    for term in vocabulary:
        candidate = term.lower()
        if abs(len(needle) - len(candidate)) > max_distance:
            continue
        distance = levenshtein_distance(needle, candidate, max_distance)
        if distance <= max_distance:
            matches.append((term, distance))

    matches.sort(key=lambda item: (item[1], item[0]))
    return matches


def expand_fuzzy_term(query_term: str, vocabulary: Iterable[str], max_distance: int) -> list[str]:
    """Union of substring and edit-distance candidates, sorted."""
    terms = list(vocabulary)
    candidates = set(substring_matches(query_term, terms))
    if max_distance > 0:
        candidates.update(term for term, _distance in find_fuzzy_matches(query_term, terms, max_distance))
    return sorted(candidates)


def has_wildcards(pattern: str) -> bool:
    return any(char in WILDCARD_CHARS for char in pattern)


def expand_wildcard(pattern: str, vocabulary: Iterable[str]) -> list[str]:
    """Vocabulary terms matching a shell-style pattern (``*`` and ``?``)."""
    if not pattern:
        return []
    lowered = pattern.lower()
    return sorted(term for term in vocabulary if fnmatch.fnmatchcase(term.lower(), lowered))
