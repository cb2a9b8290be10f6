"""Content filter configuration.

Each filter variant has its own frozen model; ``ContentFilterConfig`` is the
discriminated union of all of them, tagged by ``type``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from htmldistill.config import Settings

DEFAULT_EXCLUDED_TAGS = frozenset({
    "nav", "footer", "header", "aside", "script", "style", "form", "iframe", "noscript",
})

DEFAULT_TAG_WEIGHTS: Mapping[str, float] = {
    "div": 0.5,
    "p": 1.0,
    "article": 1.5,
    "section": 1.0,
    "span": 0.3,
    "li": 0.5,
    "ul": 0.5,
    "ol": 0.5,
    "h1": 1.2,
    "h2": 1.1,
    "h3": 1.0,
    "h4": 0.9,
    "h5": 0.8,
    "h6": 0.7,
}

DEFAULT_LLM_INSTRUCTION = (
    "Convert this HTML into clean, relevant markdown, removing any noise or irrelevant content."
)


class PruningConfig(BaseModel):
    """Settings for density-based pruning."""

    model_config = ConfigDict(frozen=True)

    type: Literal["pruning"] = "pruning"
    threshold: float = 0.48
    # "dynamic" is accepted but currently scores exactly like "fixed"
    threshold_type: Literal["fixed", "dynamic"] = "fixed"
    min_word_threshold: int | None = Field(default=None, ge=0)
    excluded_tags: frozenset[str] = DEFAULT_EXCLUDED_TAGS
    tag_weights: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_TAG_WEIGHTS))

    @classmethod
    def from_settings(cls, settings: Settings) -> PruningConfig:
        excluded = frozenset(
            tag.strip().lower() for tag in settings.pruning_excluded_tags.split(",") if tag.strip()
        )
        return cls(
            threshold=settings.pruning_threshold,
            threshold_type=settings.pruning_threshold_type,  # type: ignore[arg-type]
            min_word_threshold=settings.pruning_min_word_threshold,
            excluded_tags=excluded,
        )


class BM25Config(BaseModel):
    """Settings for query-relevance ranking."""

    model_config = ConfigDict(frozen=True)

    type: Literal["bm25"] = "bm25"
    user_query: str | None = None
    bm25_threshold: float = 1.0
    language: str = "english"
    use_stemming: bool = True
    min_word_threshold: int | None = Field(default=None, ge=0)

    @classmethod
    def from_settings(cls, settings: Settings) -> BM25Config:
        return cls(
            user_query=settings.bm25_user_query,
            bm25_threshold=settings.bm25_threshold,
            language=settings.bm25_language,
            use_stemming=settings.bm25_use_stemming,
            min_word_threshold=settings.bm25_min_word_threshold,
        )


class LLMFilterConfig(BaseModel):
    """Settings for LLM-assisted distillation."""

    model_config = ConfigDict(frozen=True)

    type: Literal["llm"] = "llm"
    provider: str = "gpt-4o-mini"
    api_token: str = Field(default="", repr=False)
    base_url: str | None = None
    instruction: str = DEFAULT_LLM_INSTRUCTION
    chunk_token_threshold: int = Field(default=4096, gt=0)
    overlap_rate: float = Field(default=0.1, ge=0.0, lt=1.0)
    word_token_rate: float = Field(default=0.75, gt=0.0)
    backoff_base_delay: float = Field(default=2.0, ge=0.0)
    backoff_max_attempts: int = Field(default=3, ge=1)
    backoff_exponential_factor: float = Field(default=2.0, gt=0.0)
    request_timeout: float = Field(default=60.0, gt=0.0)

    @classmethod
    def from_settings(cls, settings: Settings) -> LLMFilterConfig:
        return cls(
            provider=settings.llm_provider,
            api_token=settings.llm_api_key,
            base_url=settings.llm_api_url or None,
            instruction=settings.llm_instruction,
            chunk_token_threshold=settings.llm_chunk_token_threshold,
            overlap_rate=settings.llm_overlap_rate,
            word_token_rate=settings.llm_word_token_rate,
            backoff_base_delay=settings.llm_backoff_base_delay,
            backoff_max_attempts=settings.llm_backoff_max_attempts,
            backoff_exponential_factor=settings.llm_backoff_exponential_factor,
            request_timeout=settings.llm_request_timeout,
        )


ContentFilterConfig = Annotated[
    PruningConfig | BM25Config | LLMFilterConfig,
    Field(discriminator="type"),
]

_config_adapter: TypeAdapter[ContentFilterConfig] = TypeAdapter(ContentFilterConfig)


def parse_filter_config(data: Mapping[str, Any] | str) -> ContentFilterConfig:
    """Validate a filter config from a mapping or a JSON document.

    Raises:
        ValidationError: If ``type`` is unknown or a field is invalid.

    """
    if isinstance(data, str):
        return _config_adapter.validate_json(data)
    return _config_adapter.validate_python(data)


def filter_config_from_settings(settings: Settings) -> ContentFilterConfig:
    """Build the config of the filter selected by ``CONTENT_FILTER``."""
    match settings.content_filter:
        case "pruning":
            return PruningConfig.from_settings(settings)
        case "bm25":
            return BM25Config.from_settings(settings)
        case "llm":
            return LLMFilterConfig.from_settings(settings)
