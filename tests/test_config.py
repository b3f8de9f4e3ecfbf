"""Unit tests for the config module."""

import os
from unittest.mock import patch

from pydantic import ValidationError
import pytest

from minisearch.config import Settings, get_settings


pytestmark = pytest.mark.unit


class TestConfig:
    """Test configuration loading and validation."""

    def test_config_defaults_are_applied(self):
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.snippet_length == 200
        assert settings.snippet_stride == 100
        assert settings.highlight_tag == "strong"
        assert settings.default_max_results == 10
        assert settings.default_page_size == 10
        assert settings.fuzzy_max_distance == 2
        assert settings.is_positional_phrase_matching()

    @patch.dict(os.environ, {"MINISEARCH_SNIPPET_LENGTH": "300", "MINISEARCH_PHRASE_MATCHING": "loose"})
    def test_environment_overrides(self):
        settings = get_settings()
        assert settings.snippet_length == 300
        assert not settings.is_positional_phrase_matching()

    def test_stride_longer_than_snippet_is_rejected(self):
        with pytest.raises(ValidationError, match="MINISEARCH_SNIPPET_STRIDE"):
            Settings(_env_file=None, snippet_length=50, snippet_stride=60)  # type: ignore[call-arg]

    def test_unknown_phrase_matching_mode_is_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, phrase_matching="fuzzy")  # type: ignore[call-arg]

    @pytest.mark.parametrize("field", ["snippet_length", "default_page_size", "suggestion_limit"])
    def test_lower_bounds(self, field):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: 0})  # type: ignore[call-arg]

    def test_short_snippet_length_pulls_default_stride_down(self):
        settings = Settings(_env_file=None, snippet_length=50)  # type: ignore[call-arg]
        assert settings.snippet_length == 50
        assert settings.snippet_stride == 50

    @patch.dict(os.environ, {"MINISEARCH_SNIPPET_LENGTH": "40"})
    def test_short_snippet_length_from_environment(self):
        settings = get_settings()
        assert settings.snippet_stride == 40

    def test_explicit_stride_is_kept(self):
        settings = Settings(_env_file=None, snippet_length=50, snippet_stride=10)  # type: ignore[call-arg]
        assert settings.snippet_stride == 10
