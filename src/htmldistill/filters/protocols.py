"""Protocol definitions for content filters.

Contains structural typing protocols that define the interfaces every
content filter implements, so the pipeline can treat them uniformly.
"""

from typing import Protocol


class ContentFilter(Protocol):
    """Protocol for CPU-bound filters that run synchronously.

    Implementations should:
    - Build and discard their own tree on every call
    - Return the surviving HTML fragment, or an empty string when nothing
      survives
    """

    def apply(self, html: str) -> str:
        """Reduce an HTML document to its relevant fragment.

        Args:
            html: The raw HTML document to filter.

        Returns:
            The filtered HTML fragment, possibly empty.

        """
        ...


class AsyncContentFilter(Protocol):
    """Protocol for I/O-bound filters (e.g. ones that call an LLM)."""

    async def apply(self, html: str) -> str:
        """Reduce an HTML document to distilled text.

        Args:
            html: The raw HTML document to filter.

        Returns:
            The distilled output, possibly empty.

        """
        ...
