"""Main pipeline module that orchestrates the distillation steps."""

import asyncio
import inspect
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass

from htmldistill.config import Settings
from htmldistill.exceptions import DistillError
from htmldistill.extraction import ExtractionStrategy, RegexExtractionStrategy
from htmldistill.filters import (
    AsyncContentFilter,
    ContentFilter,
    LLMContentFilter,
    create_content_filter,
    filter_config_from_settings,
)
from htmldistill.logger import logger
from htmldistill.markdown_generator import MarkdownGenerator, MarkdownResult
from htmldistill.timing import timeit


@dataclass(slots=True, kw_only=True)
class DistillResult:
    """Everything produced for one page."""

    url: str
    fit_html: str
    markdown: MarkdownResult
    extracted_content: str | None = None


class Distiller:
    """Coordinates content filtering, Markdown conversion and extraction.

    Pipeline: HTML -> Content filtering -> Markdown conversion -> (optional)
    structured extraction.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        content_filter: ContentFilter | AsyncContentFilter | None = None,
        extraction_strategy: ExtractionStrategy | None = None,
    ) -> None:
        """Initialize the distiller with settings.

        Args:
            settings: Application settings containing all configuration.
            content_filter: Filter to use instead of the one selected by
                ``settings.content_filter``.
            extraction_strategy: Optional structured extractor run on every page.

        Raises:
            FilterError: If the configured filter cannot be built.

        """
        self._settings = settings
        self._filter = content_filter or create_content_filter(filter_config_from_settings(settings))
        self._extraction_strategy = extraction_strategy
        self._markdown_generator = MarkdownGenerator(settings)

    async def close(self) -> None:
        """Release the LLM client, if the filter holds one."""
        if isinstance(self._filter, LLMContentFilter):
            await self._filter.close()

    @timeit("Pages distillation", logging.DEBUG)
    async def distill_pages(self, pages: Mapping[str, str]) -> dict[str, DistillResult]:
        """Distill multiple pages concurrently.

        Args:
            pages: Mapping of URL to raw HTML.

        Returns:
            Dictionary mapping URLs to their results. Pages that failed with
            a DistillError are left out.

        """
        tasks = [self.distill(html, url) for url, html in pages.items()]
        results_list = await asyncio.gather(*tasks, return_exceptions=True)

        # Skip expected distillation errors, re-raise unexpected ones
        result_dict: dict[str, DistillResult] = {}
        for item in results_list:
            if isinstance(item, DistillError):
                logger.error("Failed to distill page: %s", item)
                continue
            if isinstance(item, BaseException):
                raise item
            result_dict[item.url] = item

        return result_dict

    async def distill(self, html: str, url: str = "") -> DistillResult:
        """Run the filtering -> markdown -> extraction pipeline for one page.

        Args:
            html: Raw HTML of the page.
            url: Page URL, carried into the result and regex matches.

        Returns:
            DistillResult for the page.

        Raises:
            MarkdownGeneratorError: If the page has no content at all.

        """
        # 1. Reduce the page to its relevant content
        logger.debug("[FILTERING STARTED] for %s", url or "<document>")
        if inspect.iscoroutinefunction(self._filter.apply):
            fit_html = await self._filter.apply(html)
        else:
            fit_html = await asyncio.to_thread(self._filter.apply, html)

        # 2. Convert to Markdown; LLM output already is Markdown
        logger.debug("[MARKDOWN GENERATION STARTED] for %s", url or "<document>")
        fit_markdown = fit_html if isinstance(self._filter, LLMContentFilter) else None
        markdown = await asyncio.to_thread(
            self._markdown_generator.generate, html, fit_html, fit_markdown=fit_markdown
        )

        # 3. Structured extraction over the original document
        extracted_content = None
        if self._extraction_strategy is not None:
            records = await asyncio.to_thread(self._extract, html, url)
            extracted_content = json.dumps(records, ensure_ascii=False)

        return DistillResult(
            url=url,
            fit_html=fit_html,
            markdown=markdown,
            extracted_content=extracted_content,
        )

    def _extract(self, html: str, url: str) -> list[dict]:
        match self._extraction_strategy:
            case RegexExtractionStrategy() as strategy:
                return strategy.extract(html, url)
            case None:
                return []
            case strategy:
                return strategy.extract(html)
