"""htmldistill - HTML content distillation.

Reduces raw HTML pages to their relevant content (pruning, BM25 relevance,
LLM summarization) and extracts structured records (CSS, XPath, regex).
"""

from htmldistill.config import Settings, settings
from htmldistill.extraction import (
    JsonCssExtractionStrategy,
    JsonXPathExtractionStrategy,
    PatternFamily,
    RegexExtractionStrategy,
)
from htmldistill.filters import (
    BM25ContentFilter,
    LLMContentFilter,
    PruningContentFilter,
    create_content_filter,
)
from htmldistill.logger import setup_logging
from htmldistill.markdown_generator import MarkdownGenerator, MarkdownResult
from htmldistill.pipeline import DistillResult, Distiller

__version__ = "0.1.0"

__all__ = [
    "BM25ContentFilter",
    "DistillResult",
    "Distiller",
    "JsonCssExtractionStrategy",
    "JsonXPathExtractionStrategy",
    "LLMContentFilter",
    "MarkdownGenerator",
    "MarkdownResult",
    "PatternFamily",
    "PruningContentFilter",
    "RegexExtractionStrategy",
    "Settings",
    "__version__",
    "create_content_filter",
    "settings",
    "setup_logging",
]
