"""Unit tests for content filter configuration and the filter factory."""

import pytest
from pydantic import ValidationError

from htmldistill.config import Settings
from htmldistill.exceptions import FilterError
from htmldistill.filters import (
    BM25Config,
    BM25ContentFilter,
    LLMContentFilter,
    LLMFilterConfig,
    PruningConfig,
    PruningContentFilter,
    create_content_filter,
    filter_config_from_settings,
    parse_filter_config,
)


class TestParseFilterConfig:
    """Test the discriminated filter config union."""

    def test_mapping_selects_variant(self) -> None:
        """The ``type`` key picks the config model."""
        config = parse_filter_config({"type": "bm25", "user_query": "rust"})

        assert isinstance(config, BM25Config)
        assert config.user_query == "rust"

    def test_json_document(self) -> None:
        """JSON strings are accepted too."""
        config = parse_filter_config('{"type": "pruning", "threshold": 0.3}')

        assert isinstance(config, PruningConfig)
        assert config.threshold == pytest.approx(0.3)

    def test_unknown_type_rejected(self) -> None:
        """An unknown filter type is a validation error."""
        with pytest.raises(ValidationError):
            parse_filter_config({"type": "magic"})

    def test_llm_overlap_bounds(self) -> None:
        """Overlap rates that would stall the window are rejected."""
        with pytest.raises(ValidationError):
            parse_filter_config({"type": "llm", "overlap_rate": 1.0})

    def test_configs_are_frozen(self) -> None:
        """Filter configs are immutable."""
        config = PruningConfig()
        with pytest.raises(ValidationError):
            config.threshold = 0.9  # type: ignore[misc]

    def test_api_token_hidden_from_repr(self) -> None:
        """The API token never shows up in reprs."""
        assert "sk-secret" not in repr(LLMFilterConfig(api_token="sk-secret"))


class TestFromSettings:
    """Test building configs from application settings."""

    def test_pruning_from_settings(self) -> None:
        """Excluded tags are parsed from the comma list."""
        settings = Settings(pruning_excluded_tags=" nav, FOOTER ,,script", pruning_threshold=0.3)

        config = filter_config_from_settings(settings)

        assert isinstance(config, PruningConfig)
        assert config.excluded_tags == frozenset({"nav", "footer", "script"})
        assert config.threshold == pytest.approx(0.3)

    def test_bm25_from_settings(self) -> None:
        """BM25 settings map onto BM25Config."""
        settings = Settings(content_filter="bm25", bm25_user_query="q", bm25_use_stemming=False)

        config = filter_config_from_settings(settings)

        assert isinstance(config, BM25Config)
        assert config.user_query == "q"
        assert config.use_stemming is False

    def test_llm_from_settings(self) -> None:
        """An empty API URL means the provider default."""
        settings = Settings(content_filter="llm", llm_api_key="sk-test", llm_api_url="")

        config = filter_config_from_settings(settings)

        assert isinstance(config, LLMFilterConfig)
        assert config.api_token == "sk-test"
        assert config.base_url is None


class TestCreateContentFilter:
    """Test the filter factory."""

    @pytest.mark.parametrize(
        ("config", "expected"),
        [
            (PruningConfig(), PruningContentFilter),
            (BM25Config(), BM25ContentFilter),
            (LLMFilterConfig(api_token="sk-test"), LLMContentFilter),
        ],
    )
    def test_variant_to_filter(self, config: object, expected: type) -> None:
        """Each config variant builds its own filter."""
        content_filter = create_content_filter(config)  # type: ignore[arg-type]

        assert isinstance(content_filter, expected)
        assert content_filter.config == config

    def test_llm_without_token_fails(self) -> None:
        """An LLM filter cannot be built without credentials."""
        with pytest.raises(FilterError):
            create_content_filter(LLMFilterConfig())
