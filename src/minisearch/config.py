"""Centralized configuration for minisearch using Pydantic Settings."""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every value can be overridden with a ``MINISEARCH_``-prefixed variable,
    e.g. ``MINISEARCH_SNIPPET_LENGTH=300``.
    """

    model_config = SettingsConfigDict(
        env_prefix="MINISEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Result assembly
    snippet_length: int = Field(default=200, ge=20, description="Maximum snippet length in characters")
    snippet_stride: int = Field(default=100, ge=1, description="Stride used when scanning content for snippet windows")
    highlight_tag: str = Field(default="strong", min_length=1, description="HTML tag wrapped around matched terms")

    # Query defaults
    default_max_results: int = Field(default=10, ge=0, description="Result cap for queries built from raw terms")
    default_page_size: int = Field(default=10, ge=1, description="Page size used when callers pass pageSize <= 0")
    suggestion_limit: int = Field(default=10, ge=1, description="Maximum number of prefix suggestions")
    fuzzy_max_distance: int = Field(default=2, ge=0, description="Default edit distance for fuzzy queries")
    phrase_matching: Literal["positional", "loose"] = Field(
        default="positional",
        description="positional verifies term adjacency for exact phrases, loose keeps the AND-search set",
    )

    # Statistics
    recent_queries_capacity: int = Field(default=100, ge=1, description="Number of recent queries remembered")
    popular_queries_limit: int = Field(default=10, ge=1, description="Default size of popular/slow query lists")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @model_validator(mode="after")
    def _check_snippet_window(self) -> "Settings":
        if "snippet_stride" not in self.model_fields_set:
            # Default stride follows a shorter snippet window
            self.snippet_stride = min(self.snippet_stride, self.snippet_length)
        elif self.snippet_stride > self.snippet_length:
            raise ValueError(
                "MINISEARCH_SNIPPET_STRIDE must not exceed MINISEARCH_SNIPPET_LENGTH, "
                "otherwise parts of the content are never considered for snippets."
            )
        return self

    def is_positional_phrase_matching(self) -> bool:
        """Check whether exact-phrase queries verify term positions."""
        return self.phrase_matching == "positional"


def get_settings() -> Settings:
    """Load settings from the environment."""
    return Settings()
