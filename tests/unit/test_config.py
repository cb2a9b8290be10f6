"""Unit tests for configuration."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from htmldistill.config import Settings

DEFAULT_PRUNING_THRESHOLD = 0.48
DEFAULT_CHUNK_TOKENS = 4096


class TestSettings:
    """Test application settings."""

    def test_settings_default_values(self) -> None:
        """Test that default values are correctly set."""
        # Use a mock environment to avoid loading real .env
        with (
            patch.dict(os.environ, {}, clear=True),
            patch("pydantic_settings.sources.DotEnvSettingsSource.__call__", return_value={}),
        ):
            settings = Settings()
            assert settings.distill_debug is False
            assert settings.content_filter == "pruning"
            assert settings.pruning_threshold == DEFAULT_PRUNING_THRESHOLD
            assert settings.llm_chunk_token_threshold == DEFAULT_CHUNK_TOKENS
            assert settings.bm25_user_query is None

    def test_settings_override_from_env(self) -> None:
        """Test that environment variables override defaults."""
        expected_threshold = 2.5
        env_vars = {
            "DISTILL_DEBUG": "true",
            "CONTENT_FILTER": "bm25",
            "BM25_THRESHOLD": str(expected_threshold),
            "BM25_USER_QUERY": "rust async",
        }
        with patch.dict(os.environ, env_vars):
            settings = Settings()
            assert settings.distill_debug is True
            assert settings.content_filter == "bm25"
            assert settings.bm25_threshold == expected_threshold
            assert settings.bm25_user_query == "rust async"

    def test_unknown_content_filter_rejected(self) -> None:
        """Test that an unknown filter name raises ValidationError."""
        with (
            patch.dict(os.environ, {"CONTENT_FILTER": "magic"}, clear=True),
            patch("pydantic_settings.sources.DotEnvSettingsSource.__call__", return_value={}),
            pytest.raises(ValidationError),
        ):
            Settings()

    def test_llm_filter_requires_api_key(self) -> None:
        """Test that selecting the LLM filter without a key fails early."""
        with (
            patch.dict(os.environ, {"CONTENT_FILTER": "llm"}, clear=True),
            patch("pydantic_settings.sources.DotEnvSettingsSource.__call__", return_value={}),
            pytest.raises(ValidationError, match="LLM_API_KEY"),
        ):
            Settings()

    def test_llm_filter_with_api_key(self) -> None:
        """Test that the LLM filter is accepted once a key is set."""
        env_vars = {"CONTENT_FILTER": "llm", "LLM_API_KEY": "sk-test"}
        with (
            patch.dict(os.environ, env_vars, clear=True),
            patch("pydantic_settings.sources.DotEnvSettingsSource.__call__", return_value={}),
        ):
            settings = Settings()
            assert settings.llm_api_key == "sk-test"

    def test_overlap_rate_out_of_range(self) -> None:
        """Test that an overlap rate of 1.0 is rejected."""
        with (
            patch.dict(os.environ, {"LLM_OVERLAP_RATE": "1.0"}, clear=True),
            patch("pydantic_settings.sources.DotEnvSettingsSource.__call__", return_value={}),
            pytest.raises(ValidationError, match="LLM_OVERLAP_RATE"),
        ):
            Settings()
