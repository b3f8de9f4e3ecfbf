"""Text processing for indexing and querying.

The pipeline mirrors Whoosh's composable tokenizer/filter design: a
tokenizer yields raw word tokens and filters normalize or drop them. Unlike
a classic analyzer, positions are NOT renumbered after filtering. A token's
position is its offset in the raw whitespace-separated word stream, so a
dropped stop word still occupies a slot. Phrase verification relies on this.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
import re
from typing import Protocol


@dataclass
class Token:
    """Represents a token emitted by the pipeline."""

    text: str
    position: int
    start_char: int
    end_char: int

    def copy_with(self, **updates: object) -> Token:
        data = {
            "text": self.text,
            "position": self.position,
            "start_char": self.start_char,
            "end_char": self.end_char,
        }
        data.update(updates)
        return Token(**data)  # type: ignore[arg-type]


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class WhitespaceTokenizer:
    """Yields every whitespace-separated word, numbered in stream order."""

    _WORD_PATTERN = re.compile(r"\S+")

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self._WORD_PATTERN.finditer(text)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


class NormalizeFilter:
    """Lowercases and strips everything except word characters and apostrophes."""

    _STRIP_PATTERN = re.compile(r"[^\w']", re.UNICODE)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            cleaned = self._STRIP_PATTERN.sub("", token.text.lower())
            if cleaned == token.text:
                yield token
            else:
                yield token.copy_with(text=cleaned)


class MinLengthFilter:
    """Drops tokens shorter than ``min_length`` characters."""

    def __init__(self, min_length: int = 2) -> None:
        self.min_length = min_length

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if len(token.text) >= self.min_length:
                yield token


class NumericFilter:
    """Drops tokens made only of digits."""

    _DIGITS = re.compile(r"\d+")

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if not self._DIGITS.fullmatch(token.text):
                yield token


STOP_WORDS: frozenset[str] = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "for", "from",
        "has", "he", "in", "is", "it", "its", "of", "on", "that", "the",
        "to", "was", "will", "with", "this", "but", "they", "have",
        "had", "what", "said", "each", "which", "she", "do", "how", "their",
        "if", "up", "out", "many", "then", "them", "these", "so", "some",
        "her", "would", "make", "like", "into", "him", "time", "two", "more",
        "go", "no", "way", "could", "my", "than", "first", "been", "call",
        "who", "now", "find", "long", "down", "day", "did", "get",
        "come", "made", "may", "part",
    }
)  # fmt: skip


class StopFilter:
    """Removes stopwords from the stream."""

    def __init__(self, stopwords: Iterable[str] | None = None) -> None:
        vocab = stopwords if stopwords is not None else STOP_WORDS
        self.stopwords = frozenset(word.lower() for word in vocab)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text.lower() not in self.stopwords:
                yield token


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        return list(stream)


def build_index_pipeline(stopwords: Iterable[str] | None = None) -> AnalyzerPipeline:
    """Return the pipeline used for both documents and queries."""
    return AnalyzerPipeline(
        WhitespaceTokenizer(),
        [NormalizeFilter(), MinLengthFilter(2), StopFilter(stopwords), NumericFilter()],
    )


class TextProcessor:
    """Turns raw text into index terms, frequencies, positions and phrases."""

    def __init__(self, stopwords: Iterable[str] | None = None) -> None:
        self._stopwords = frozenset(STOP_WORDS if stopwords is None else (w.lower() for w in stopwords))
        self._pipeline = build_index_pipeline(self._stopwords)
        self._word_pipeline = AnalyzerPipeline(
            lambda word: iter([Token(text=word, position=0, start_char=0, end_char=len(word))]),
            self._pipeline.filters,
        )

    def analyze(self, text: str | None) -> list[Token]:
        """Return surviving tokens with raw-stream positions."""
        if not text or not text.strip():
            return []
        return self._pipeline(text)

    def process_word(self, word: str) -> str | None:
        """Normalize a single word, or return None if it would be filtered out."""
        tokens = self._word_pipeline(word)
        return tokens[0].text if tokens else None

    def tokenize(self, text: str | None) -> list[str]:
        """Surviving terms in original order, duplicates retained."""
        return [token.text for token in self.analyze(text)]

    def term_frequencies(self, text: str | None) -> dict[str, int]:
        return dict(Counter(self.tokenize(text)))

    def term_positions(self, text: str | None) -> dict[str, list[int]]:
        """Map each term to the raw-word offsets where it occurs."""
        positions: dict[str, list[int]] = {}
        for token in self.analyze(text):
            positions.setdefault(token.text, []).append(token.position)
        return positions

    def key_phrases(self, text: str | None, phrase_length: int) -> list[str]:
        """Phrases of ``phrase_length`` consecutive raw words that all survive filtering."""
        if not text or not text.strip() or phrase_length < 2:
            return []

        surviving = {token.position: token.text for token in self.analyze(text)}
        word_count = len(text.split())
        phrases: list[str] = []
        for start in range(word_count - phrase_length + 1):
            window = [surviving.get(position) for position in range(start, start + phrase_length)]
            if all(window):
                phrases.append(" ".join(window))  # type: ignore[arg-type]
        return phrases

    def most_frequent_terms(self, text: str | None, limit: int) -> list[str]:
        """Terms by descending count; equal counts are ordered alphabetically."""
        if limit <= 0:
            return []
        ranked = sorted(self.term_frequencies(text).items(), key=lambda item: (-item[1], item[0]))
        return [term for term, _count in ranked[:limit]]

    def is_stop_word(self, term: str) -> bool:
        return term.lower() in self._stopwords

    def stop_word_count(self) -> int:
        return len(self._stopwords)

    def all_stop_words(self) -> set[str]:
        return set(self._stopwords)
