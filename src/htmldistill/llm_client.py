"""OpenAI-compatible LLM client.

Wraps the async OpenAI SDK and classifies failures so callers can decide
whether a request is worth retrying.
"""

from __future__ import annotations

from dataclasses import dataclass

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, RateLimitError


@dataclass(slots=True, kw_only=True)
class LLMResponse:
    """Response from an LLM completion request.

    Attributes:
        content: The generated text content, or None if generation failed
        error: Error message if the request failed, otherwise None
        retryable: True when the failure was a rate limit (HTTP 429) or a
            transport problem, i.e. the same request may succeed later

    """

    content: str | None
    error: str | None
    retryable: bool = False


class LLMClient:
    """Generic OpenAI-compatible LLM client.

    The SDK's own retry loop is disabled; retry and backoff are decided by
    the caller from ``LLMResponse.retryable``.

    The client uses connection pooling internally (via httpx) to efficiently
    handle multiple concurrent requests with a single instance.
    """

    def __init__(
        self,
        *,
        api_key: str,
        api_url: str | None = None,
        timeout: float = 60.0,
    ) -> None:
        """Initialize the LLM client.

        Args:
            api_key: API key for authentication
            api_url: Optional custom API base URL. If not provided, uses default.
            timeout: Per-request timeout in seconds

        """
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=api_url if api_url else None,
            timeout=timeout,
            max_retries=0,
        )

    async def complete(
        self,
        *,
        model: str,
        user_prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.0,
    ) -> LLMResponse:
        """Send a completion request to the LLM.

        Args:
            model: Model identifier to use for completion
            user_prompt: User message content
            system_prompt: Optional system message content
            temperature: Sampling temperature (0.0 = deterministic, default)

        Returns:
            LLMResponse with either content or a classified error

        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=messages,  # type: ignore[arg-type]
                temperature=temperature,
            )
        except RateLimitError as e:
            return LLMResponse(content=None, error=f"Rate limited: {e!s}", retryable=True)
        except APIConnectionError as e:
            # Also covers APITimeoutError
            return LLMResponse(content=None, error=f"Transport error: {e!s}", retryable=True)
        except APIStatusError as e:
            return LLMResponse(content=None, error=f"API error {e.status_code}: {e!s}")
        except Exception as e:
            return LLMResponse(content=None, error=f"LLM request failed: {e!s}")

        if not response.choices or response.choices[0].message.content is None:
            return LLMResponse(content=None, error="Empty response from LLM")

        return LLMResponse(content=response.choices[0].message.content.strip(), error=None)

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._client.close()
