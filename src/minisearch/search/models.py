"""Input models handed to the indexer by crawlers and dataset loaders."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, computed_field


class WebPage(BaseModel):
    """A fetched or loaded page, ready to be indexed.

    The core never fetches pages itself; crawlers and dataset loaders build
    these and pass them to ``SearchIndexer.index_page``.
    """

    url: str = Field(description="Unique document identity")
    title: str = Field(default="", description="Human-readable page title")
    domain: str = Field(default="", description="Host the page belongs to")
    content: str = Field(default="", description="Plain-text page content")
    links: list[str] = Field(default_factory=list, description="Outbound links discovered on the page")
    metadata: dict[str, str] = Field(
        default_factory=dict,
        description="Free-form attributes; 'language', 'archived' and 'deleted' are understood by filters",
    )
    last_crawled: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def content_length(self) -> int:
        return len(self.content)

    def has_valid_url(self) -> bool:
        return bool(self.url and self.url.strip())
