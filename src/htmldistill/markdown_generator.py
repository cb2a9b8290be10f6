"""Markdown generation module using markdownify."""

import re
from dataclasses import dataclass

from markdownify import MarkdownConverter

from htmldistill.config import Settings
from htmldistill.dom import detach, parse_html
from htmldistill.exceptions import MarkdownGeneratorError

_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")
_NON_CONTENT_TAGS = ["script", "style", "noscript", "template"]


@dataclass(slots=True, kw_only=True)
class MarkdownResult:
    """Markdown renditions of one document.

    Attributes:
        raw_markdown: The whole document as Markdown
        fit_markdown: The filtered document as Markdown (empty if nothing survived)
        fit_html: The filter's output

    """

    raw_markdown: str
    fit_markdown: str
    fit_html: str


class MarkdownGenerator:
    """Converts HTML to Markdown using markdownify."""

    def __init__(self, settings: Settings) -> None:
        """Initialize the markdown generator with settings.

        Args:
            settings: Application settings containing markdown generation configuration.

        """
        stripped = []
        if settings.markdown_ignore_links:
            stripped.append("a")
        if settings.markdown_ignore_images:
            stripped.append("img")
        self._converter = MarkdownConverter(
            heading_style=settings.markdown_heading_style,
            strip=stripped or None,
        )

    def convert(self, html: str) -> str:
        """Convert HTML to Markdown.

        Script and style contents never reach the output; runs of blank lines
        are collapsed to one.
        """
        if not html.strip():
            return ""
        soup = parse_html(html)
        for tag in soup.find_all(_NON_CONTENT_TAGS):
            detach(tag)
        markdown = self._converter.convert_soup(soup)
        return _EXCESS_BLANK_LINES.sub("\n\n", markdown).strip()

    def generate(self, html: str, fit_html: str, *, fit_markdown: str | None = None) -> MarkdownResult:
        """Render the full document and its filtered version.

        Args:
            html: Original HTML document.
            fit_html: Output of the content filter.
            fit_markdown: Filter output that is already Markdown (LLM filter);
                used as-is instead of converting ``fit_html``.

        Returns:
            MarkdownResult with both renditions.

        Raises:
            MarkdownGeneratorError: If MD generation failed.

        """
        raw_markdown = self.convert(html)
        if fit_markdown is None:
            fit_markdown = self.convert(fit_html)

        if not raw_markdown and not fit_markdown:
            raise MarkdownGeneratorError("Markdown generation produced no content")

        return MarkdownResult(
            raw_markdown=raw_markdown,
            fit_markdown=fit_markdown.strip(),
            fit_html=fit_html,
        )

