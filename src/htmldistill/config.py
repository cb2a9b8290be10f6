"""Application configuration using Pydantic Settings.

Environment variables are automatically mapped to Settings fields.
"""

from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Distillation settings loaded from environment variables.

    Every field has a default, so the package imports cleanly without a
    ``.env`` file. Invalid combinations fail early with a clear message.
    """

    # --- Diagnostics ---
    distill_debug: bool = False

    # --- Content Filter Selection ---
    content_filter: Literal["pruning", "bm25", "llm"] = "pruning"

    # --- Pruning Filter ---
    pruning_threshold: float = 0.48
    pruning_threshold_type: str = "fixed"
    pruning_min_word_threshold: int | None = None
    pruning_excluded_tags: str = "nav,footer,header,aside,script,style,form,iframe,noscript"

    # --- BM25 Filter ---
    bm25_user_query: str | None = None
    bm25_threshold: float = 1.0
    bm25_language: str = "english"
    bm25_use_stemming: bool = True
    bm25_min_word_threshold: int | None = None

    # --- LLM Filter ---
    llm_provider: str = "gpt-4o-mini"
    llm_api_key: str = ""
    llm_api_url: str = ""
    llm_instruction: str = (
        "Convert this HTML into clean, relevant markdown, "
        "removing any noise or irrelevant content."
    )
    llm_chunk_token_threshold: int = 4096
    llm_overlap_rate: float = 0.1
    llm_word_token_rate: float = 0.75
    llm_backoff_base_delay: float = 2.0
    llm_backoff_max_attempts: int = 3
    llm_backoff_exponential_factor: float = 2.0
    llm_request_timeout: float = 60.0

    # --- Markdown Generation ---
    markdown_ignore_links: bool = False
    markdown_ignore_images: bool = True
    markdown_heading_style: str = "ATX"

    @model_validator(mode="after")
    def validate_llm_config(self) -> "Settings":
        """Validate LLM configuration when the LLM filter is selected.

        Raises:
            ValueError: If the LLM filter is enabled without an API key, or
                the chunk overlap rate would stall the sliding window.

        """
        if self.content_filter == "llm" and not self.llm_api_key:
            msg = "LLM_API_KEY must be set when CONTENT_FILTER=llm"
            raise ValueError(msg)
        if not 0.0 <= self.llm_overlap_rate < 1.0:
            msg = "LLM_OVERLAP_RATE must be in the range [0, 1)"
            raise ValueError(msg)
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance.

    Uses lru_cache to ensure the .env file is only parsed once
    and all modules share the same settings instance.

    Returns:
        Settings instance with application configuration.

    Raises:
        ValidationError: If environment variables hold invalid values.

    """
    return Settings()


settings = get_settings()
