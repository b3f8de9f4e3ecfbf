"""Exceptions raised inside the search core.

Internal helpers raise these; the indexer and engine facades catch them at
the operation boundary, log them and degrade to an empty or unchanged
result.
"""


class MiniSearchError(Exception):
    """Base class for search core failures."""


class InvalidInputError(MiniSearchError, ValueError):
    """Raised for blank URLs, blank queries and other unusable input."""


class UnsupportedQueryError(MiniSearchError):
    """Raised when a query cannot be executed as requested."""


class IndexingError(MiniSearchError):
    """Raised when a page cannot be turned into an indexed document."""
