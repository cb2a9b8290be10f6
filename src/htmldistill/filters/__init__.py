"""Content filters that reduce an HTML document to its relevant part."""

from typing import assert_never

from htmldistill.filters.bm25 import BM25ContentFilter
from htmldistill.filters.config import (
    BM25Config,
    ContentFilterConfig,
    LLMFilterConfig,
    PruningConfig,
    filter_config_from_settings,
    parse_filter_config,
)
from htmldistill.filters.llm import LLMContentFilter
from htmldistill.filters.protocols import AsyncContentFilter, ContentFilter
from htmldistill.filters.pruning import PruningContentFilter
from htmldistill.filters.text_blocks import TagType, TextBlockExtractor, TextChunk

AnyContentFilter = PruningContentFilter | BM25ContentFilter | LLMContentFilter


def create_content_filter(config: ContentFilterConfig) -> AnyContentFilter:
    """Build the filter matching a config variant.

    Raises:
        FilterError: If the config cannot be turned into a working filter
            (e.g. an LLM config without an API token).

    """
    match config:
        case PruningConfig():
            return PruningContentFilter(config)
        case BM25Config():
            return BM25ContentFilter(config)
        case LLMFilterConfig():
            return LLMContentFilter(config)
        case _:
            assert_never(config)


__all__ = [
    "AnyContentFilter",
    "AsyncContentFilter",
    "BM25Config",
    "BM25ContentFilter",
    "ContentFilter",
    "ContentFilterConfig",
    "LLMContentFilter",
    "LLMFilterConfig",
    "PruningConfig",
    "PruningContentFilter",
    "TagType",
    "TextBlockExtractor",
    "TextChunk",
    "create_content_filter",
    "filter_config_from_settings",
    "parse_filter_config",
]
