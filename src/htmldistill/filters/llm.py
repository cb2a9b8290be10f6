"""LLM-assisted content distillation.

Splits a document into word-bounded chunks that fit a token budget, asks an
OpenAI-compatible endpoint to turn each chunk into clean markdown (at most
four requests in flight), and stitches the answers back together in chunk
order.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum, auto

from htmldistill.exceptions import FilterError, LLMError
from htmldistill.filters.config import LLMFilterConfig
from htmldistill.llm_client import LLMClient, LLMResponse
from htmldistill.logger import logger
from htmldistill.timing import timeit

MAX_CONCURRENT_REQUESTS = 4
REQUEST_TEMPERATURE = 0.1

CONTENT_OPEN_TAG = "<content>"
CONTENT_CLOSE_TAG = "</content>"

PROMPT_FILTER_CONTENT = """Your task is to filter and convert HTML content into clean, focused markdown that's optimized for use with LLMs and information retrieval systems.

TASK DETAILS:
1. Content Selection
- DO: Keep essential information, main content, key details
- DO: Preserve hierarchical structure using markdown headers
- DO: Keep code blocks, tables, key lists
- DON'T: Include navigation menus, ads, footers, cookie notices
- DON'T: Keep social media widgets, sidebars, related content

2. Content Transformation
- DO: Use proper markdown syntax (#, ##, **, `, etc)
- DO: Convert tables to markdown tables
- DO: Preserve code formatting with ```language blocks
- DO: Maintain link texts but remove tracking parameters
- DON'T: Include HTML tags in output
- DON'T: Keep class names, ids, or other HTML attributes

3. Content Organization
- DO: Maintain logical flow of information
- DO: Group related content under appropriate headers
- DO: Use consistent header levels
- DON'T: Fragment related content
- DON'T: Duplicate information

IMPORTANT: If user specific instruction is provided, ignore above guideline and prioritize those requirements over these general guidelines.

OUTPUT FORMAT:
Wrap your response in <content> tags. Use proper markdown throughout.
<content>
[Your markdown content here]
</content>

Begin filtering now.

--------------------------------------------

<|HTML_CONTENT_START|>
{HTML}
<|HTML_CONTENT_END|>

<|USER_INSTRUCTION_START|>
{REQUEST}
<|USER_INSTRUCTION_END|>
"""

Sleep = Callable[[float], Awaitable[None]]


class RetryState(Enum):
    """States of a single chunk's request loop."""

    ATTEMPTING = auto()
    BACKOFF = auto()
    SUCCEEDED = auto()
    EXHAUSTED = auto()


@dataclass(frozen=True, slots=True)
class BackoffPolicy:
    """Exponential backoff between retryable failures."""

    base_delay: float = 2.0
    max_attempts: int = 3
    exponential_factor: float = 2.0

    def delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        return self.base_delay * self.exponential_factor ** (attempt - 1)


def build_prompt(chunk: str, instruction: str) -> str:
    # str.replace, not str.format: the chunk is arbitrary HTML full of braces
    return PROMPT_FILTER_CONTENT.replace("{HTML}", chunk).replace("{REQUEST}", instruction)


def extract_tagged_content(response: str) -> str:
    """Return the text between ``<content>`` and a later ``</content>``.

    Falls back to the whole response when the tags are missing.
    """
    start = response.find(CONTENT_OPEN_TAG)
    if start != -1:
        body_start = start + len(CONTENT_OPEN_TAG)
        end = response.find(CONTENT_CLOSE_TAG, body_start)
        if end != -1:
            return response[body_start:end].strip()
    return response


class LLMContentFilter:
    """Distills HTML into markdown with an LLM, chunk by chunk.

    A chunk whose request fails for good contributes an empty string; the
    rest of the batch is unaffected.
    """

    def __init__(
        self,
        config: LLMFilterConfig,
        *,
        client: LLMClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the LLM filter.

        Args:
            config: LLM filter settings.
            client: Completion client; built from ``config`` when omitted.
            sleep: Awaitable used for backoff waits, injectable for tests.

        Raises:
            FilterError: If no client is given and the config has no API token.

        """
        if client is None and not config.api_token:
            raise FilterError("LLM filter requires an API token")

        self._config = config
        self._owns_client = client is None
        self._client = client or LLMClient(
            api_key=config.api_token,
            api_url=config.base_url,
            timeout=config.request_timeout,
        )
        self._backoff = BackoffPolicy(
            base_delay=config.backoff_base_delay,
            max_attempts=config.backoff_max_attempts,
            exponential_factor=config.backoff_exponential_factor,
        )
        self._sleep = sleep

    @property
    def config(self) -> LLMFilterConfig:
        return self._config

    def chunk_text(self, text: str) -> list[str]:
        """Split ``text`` into overlapping word windows that fit the token budget.

        Args:
            text: Input document.

        Returns:
            The whole text as one chunk when its estimated token count fits,
            otherwise the windows joined by single spaces. Empty input yields
            no chunks.

        """
        words = text.split()
        if not words:
            return []

        estimated_tokens = int(len(words) * self._config.word_token_rate)
        if estimated_tokens <= self._config.chunk_token_threshold:
            return [text]

        chunk_size = max(1, int(self._config.chunk_token_threshold / self._config.word_token_rate))
        overlap = int(chunk_size * self._config.overlap_rate)
        step = max(1, chunk_size - overlap)

        chunks: list[str] = []
        start = 0
        while start < len(words):
            end = min(start + chunk_size, len(words))
            chunks.append(" ".join(words[start:end]))
            if end == len(words):
                break
            start += step
        return chunks

    @timeit("LLM filter")
    async def apply(self, html: str) -> str:
        """Distill ``html`` into markdown.

        Args:
            html: HTML document (or any text) to distill.

        Returns:
            Per-chunk results in chunk order, separated by a blank line.

        """
        chunks = self.chunk_text(html)
        if not chunks:
            return ""
        logger.debug("[LLM FILTER STARTED] %d chunk(s)", len(chunks))

        semaphore = asyncio.Semaphore(MAX_CONCURRENT_REQUESTS)

        async def run(index: int, chunk: str) -> tuple[int, str]:
            async with semaphore:
                return index, await self._process_chunk(index, chunk)

        # Completion order is arbitrary; order is restored by index below.
        results: list[tuple[int, str]] = []
        for finished in asyncio.as_completed([run(i, c) for i, c in enumerate(chunks)]):
            results.append(await finished)

        results.sort(key=lambda item: item[0])
        return "\n\n".join(text for _, text in results)

    async def _process_chunk(self, index: int, chunk: str) -> str:
        prompt = build_prompt(chunk, self._config.instruction)
        try:
            content = await self._complete_with_backoff(prompt)
        except LLMError as e:
            logger.warning("LLM chunk %d failed: %s", index, e)
            return ""
        return extract_tagged_content(content)

    async def _complete_with_backoff(self, prompt: str) -> str:
        """Run the request loop for one prompt.

        ATTEMPTING -> SUCCEEDED on success; -> BACKOFF on a retryable failure
        with attempts left; -> EXHAUSTED otherwise. BACKOFF sleeps, then goes
        back to ATTEMPTING. Non-retryable failures raise immediately.

        Raises:
            LLMError: On a terminal failure or when attempts run out.

        """
        attempt = 1
        state = RetryState.ATTEMPTING
        response = LLMResponse(content=None, error=None)

        while True:
            match state:
                case RetryState.ATTEMPTING:
                    response = await self._client.complete(
                        model=self._config.provider,
                        user_prompt=prompt,
                        temperature=REQUEST_TEMPERATURE,
                    )
                    if response.error is None:
                        state = RetryState.SUCCEEDED
                    elif not response.retryable:
                        raise LLMError(response.error)
                    elif attempt >= self._backoff.max_attempts:
                        state = RetryState.EXHAUSTED
                    else:
                        state = RetryState.BACKOFF

                case RetryState.BACKOFF:
                    delay = self._backoff.delay(attempt)
                    logger.debug(
                        "Attempt %d failed (%s), retrying in %.2fs", attempt, response.error, delay
                    )
                    await self._sleep(delay)
                    attempt += 1
                    state = RetryState.ATTEMPTING

                case RetryState.SUCCEEDED:
                    return response.content or ""

                case RetryState.EXHAUSTED:
                    raise LLMError(f"Giving up after {attempt} attempts: {response.error}")

    async def close(self) -> None:
        """Close the completion client if this filter created it."""
        if self._owns_client:
            await self._client.close()
