"""Post-ranking result filters."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator


if TYPE_CHECKING:
    from minisearch.search.results import SearchResult


TRUE_VALUES = frozenset({"1", "true", "yes"})


def _flag(metadata: dict[str, str], key: str) -> bool:
    return metadata.get(key, "").strip().lower() in TRUE_VALUES


def matches_language(metadata: dict[str, str], language: str) -> bool:
    """Case-insensitive comparison against ``metadata["language"]``."""
    return metadata.get("language", "").strip().lower() == language.strip().lower()


class SearchFilters(BaseModel):
    """Optional constraints applied to ranked results.

    Every unset field imposes no constraint. Archived and deleted documents
    (``metadata["archived"]`` / ``metadata["deleted"]`` truthy) are hidden
    unless the matching ``include_*`` flag is set.
    """

    model_config = ConfigDict(frozen=True)

    domains: list[str] = Field(default_factory=list, description="Allowed domains, case-insensitive")
    date_from: datetime | None = None
    date_to: datetime | None = None
    min_content_length: int | None = Field(default=None, ge=0)
    max_content_length: int | None = Field(default=None, ge=0)
    min_score: float | None = None
    language: str | None = None
    include_archived: bool = False
    include_deleted: bool = False

    @field_validator("date_from", "date_to")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def is_empty(self) -> bool:
        """True when no constraint beyond the default visibility rules is set."""
        return not (
            self.domains
            or self.date_from
            or self.date_to
            or self.min_content_length is not None
            or self.max_content_length is not None
            or self.min_score is not None
            or self.language
        )

    def allows(self, result: "SearchResult") -> bool:
        if self.domains and result.domain.lower() not in {domain.lower() for domain in self.domains}:
            return False
        if self.min_content_length is not None and result.content_length < self.min_content_length:
            return False
        if self.max_content_length is not None and result.content_length > self.max_content_length:
            return False
        if self.date_from is not None and result.indexed_at < self.date_from:
            return False
        if self.date_to is not None and result.indexed_at > self.date_to:
            return False
        if self.min_score is not None and result.relevance_score < self.min_score:
            return False
        if self.language and not matches_language(result.metadata, self.language):
            return False
        if not self.include_archived and _flag(result.metadata, "archived"):
            return False
        return self.include_deleted or not _flag(result.metadata, "deleted")
