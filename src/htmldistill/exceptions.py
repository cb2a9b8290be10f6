"""htmldistill custom exceptions."""

class DistillError(Exception):
    """Base exception for all htmldistill errors."""


class FilterError(DistillError):
    """Errors while configuring or running a content filter."""


class LLMError(FilterError):
    """A completion request failed for good (terminal error or retries exhausted)."""


class ExtractionError(DistillError):
    """Errors while extracting structured records."""


class SchemaError(ExtractionError):
    """The extraction schema is malformed."""


class MarkdownGeneratorError(DistillError):
    """Errors while generating Markdown output."""
