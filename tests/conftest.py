"""Shared test fixtures and configuration."""

import os

import pytest

from minisearch.config import Settings
from minisearch.search.analyzers import TextProcessor
from minisearch.search.document import DocumentRecord
from minisearch.search.engine import SearchEngine
from minisearch.search.indexer import SearchIndexer
from minisearch.search.models import WebPage


JAVA_CONTENT = "Java is a programming language used for web development"
PYTHON_CONTENT = "Python is a programming language for data science"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep MINISEARCH_* variables from the host out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("MINISEARCH_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings():
    return Settings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def text_processor():
    return TextProcessor()


@pytest.fixture
def java_page():
    return WebPage(
        url="https://example.com/java",
        title="Java Guide",
        domain="example.com",
        content=JAVA_CONTENT,
    )


@pytest.fixture
def python_page():
    return WebPage(
        url="https://example.com/python",
        title="Python Guide",
        domain="example.com",
        content=PYTHON_CONTENT,
    )


@pytest.fixture
def indexer(settings):
    return SearchIndexer(settings)


@pytest.fixture
def populated_indexer(indexer, java_page, python_page):
    indexer.index_page(java_page)
    indexer.index_page(python_page)
    return indexer


@pytest.fixture
def engine(populated_indexer):
    return SearchEngine(populated_indexer)


def build_document(processor: TextProcessor, url: str, content: str, title: str = "", domain: str = "") -> DocumentRecord:
    """Build a fully processed record the same way the indexer does."""
    document = DocumentRecord.from_page(WebPage(url=url, title=title, domain=domain, content=content))
    positions = processor.term_positions(content)
    for term, frequency in processor.term_frequencies(content).items():
        document.add_term(term, frequency, positions[term])
    document.calculate_relevance_score()
    return document


@pytest.fixture
def make_document(text_processor):
    def _make(url: str, content: str, title: str = "", domain: str = "") -> DocumentRecord:
        return build_document(text_processor, url, content, title, domain)

    return _make
