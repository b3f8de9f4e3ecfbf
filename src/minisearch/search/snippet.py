"""Snippet extraction with term highlighting.

The snippet is the fixed-length window of the content that covers the most
distinct matched terms. Windows are scanned at a fixed stride and the
earliest best window wins, so the result is deterministic.
"""

from __future__ import annotations

from collections.abc import Sequence
import re


ELLIPSIS = "..."


def count_terms_in_window(window: str, terms: Sequence[str]) -> int:
    """Number of distinct terms occurring (case-insensitively) in the window."""
    lowered = window.lower()
    return sum(1 for term in set(t.lower() for t in terms if t) if term in lowered)


def find_best_window_start(content: str, terms: Sequence[str], max_length: int, stride: int) -> int:
    """Start offset of the first window with the most distinct matched terms."""
    if len(content) <= max_length:
        return 0

    best_start = 0
    best_score = 0
    for start in range(0, len(content) - max_length + 1, max(stride, 1)):
        score = count_terms_in_window(content[start : start + max_length], terms)
        if score > best_score:
            best_score = score
            best_start = start
    return best_start


def highlight_terms_in_snippet(snippet: str, terms: Sequence[str], tag: str = "strong") -> str:
    """Wrap every case-insensitive occurrence of each term in ``<tag>``.

    Longer terms are preferred where matches overlap, and a region of the
    snippet is never wrapped twice.
    """
    if not snippet or not terms:
        return snippet

    matches: list[tuple[int, int]] = []
    for term in sorted({t for t in terms if t}, key=lambda t: (-len(t), t)):
        pattern = re.compile(re.escape(term), re.IGNORECASE)
        matches.extend((match.start(), match.end()) for match in pattern.finditer(snippet))

    if not matches:
        return snippet

    # Sort by start position, longer matches first
    matches.sort(key=lambda span: (span[0], -(span[1] - span[0])))

    selected: list[tuple[int, int]] = []
    for start, end in matches:
        if any(start < sel_end and end > sel_start for sel_start, sel_end in selected):
            continue
        selected.append((start, end))

    # Apply from end to start so earlier offsets stay valid
    result = snippet
    for start, end in sorted(selected, reverse=True):
        result = f"{result[:start]}<{tag}>{result[start:end]}</{tag}>{result[end:]}"
    return result


def build_snippet(
    content: str | None,
    terms: Sequence[str],
    max_length: int = 200,
    stride: int = 100,
    tag: str = "strong",
    highlight: bool = True,
) -> str:
    """Build a highlighted snippet of at most ``max_length`` content characters.

    Args:
        content: Full document content.
        terms: Matched terms to locate and highlight.
        max_length: Maximum number of content characters in the snippet.
        stride: Step between candidate windows.
        tag: HTML tag used for highlighting.
        highlight: When False the window is chosen the same way but left unmarked.

    Returns:
        The snippet, with ``...`` marking truncation on either side. Blank
        content yields an empty string.
    """
    if not content or not content.strip():
        return ""

    if not terms:
        if len(content) > max_length:
            return content[:max_length] + ELLIPSIS
        return content

    start = find_best_window_start(content, terms, max_length, stride)
    end = min(start + max_length, len(content))

    snippet = content[start:end]
    if highlight:
        snippet = highlight_terms_in_snippet(snippet, terms, tag)
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(content):
        snippet += ELLIPSIS
    return snippet
