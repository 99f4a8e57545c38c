"""Claude API client with blocking and streaming generation.

Wraps the Anthropic SDK to provide a high-level interface for the
diagram pipeline, with token usage tracking. Requests are never
retried: the SDK's built-in retries are disabled and any failure is
surfaced to the caller.
"""

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Optional

import anthropic

from repodiagram.utils.config import APIConfig

logger = logging.getLogger(__name__)


@dataclass
class TokenUsage:
    """Token usage statistics for a single API call.

    Attributes:
        input_tokens: Number of tokens in the prompt.
        output_tokens: Number of tokens in the response.
    """

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        """Total tokens consumed."""
        return self.input_tokens + self.output_tokens


@dataclass
class CompletionResult:
    """Result of a blocking LLM call.

    Attributes:
        content: The generated text content.
        usage: Token usage statistics.
        model: Model that produced the result.
        stop_reason: Reason the generation stopped.
    """

    content: str
    usage: TokenUsage
    model: str
    stop_reason: Optional[str] = None


class LLMClient:
    """Client for the Anthropic Claude API.

    Sends one system instruction and one user message per call, either
    waiting for the complete response or yielding it in chunks as it is
    produced.
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        api_key: Optional[str] = None,
    ) -> None:
        """Initialize the LLM client.

        Args:
            config: API configuration. Uses defaults if not provided.
            api_key: API key. Falls back to ANTHROPIC_API_KEY.
        """
        self.config = config or APIConfig()
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY", "")
        self._client: Optional[anthropic.Anthropic] = None
        self._total_usage = TokenUsage()

    @property
    def client(self) -> anthropic.Anthropic:
        """Lazily initialize the Anthropic client.

        Returns:
            An authenticated Anthropic client instance.

        Raises:
            ValueError: If no API key is available.
        """
        if self._client is None:
            if not self._api_key:
                raise ValueError(
                    "ANTHROPIC_API_KEY environment variable is not set. "
                    "Set it or pass --api-key before making API calls."
                )
            self._client = anthropic.Anthropic(
                api_key=self._api_key,
                timeout=self.config.timeout,
                max_retries=0,
            )
        return self._client

    def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> CompletionResult:
        """Generate text and wait for the complete response.

        Args:
            prompt: The user message prompt.
            system: Optional system prompt.
            max_tokens: Maximum tokens to generate. Uses config default.
            temperature: Sampling temperature. Uses config default.

        Returns:
            A CompletionResult with the generated content and usage.

        Raises:
            ValueError: If the API key is not set.
            anthropic.APIError: If the API call fails.
        """
        kwargs = self._request_kwargs(prompt, system, max_tokens, temperature)
        response = self.client.messages.create(**kwargs)

        content = ""
        if response.content:
            content = response.content[0].text

        usage = self._record_usage(response.usage)
        return CompletionResult(
            content=content,
            usage=usage,
            model=response.model,
            stop_reason=response.stop_reason,
        )

    def stream(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> Iterator[str]:
        """Generate text, yielding chunks as they arrive.

        The returned iterator is lazy, finite and not restartable. The
        underlying HTTP stream is closed when the iterator is exhausted,
        raises, or is closed early by the caller.

        Args:
            prompt: The user message prompt.
            system: Optional system prompt.
            max_tokens: Maximum tokens to generate. Uses config default.
            temperature: Sampling temperature. Uses config default.

        Yields:
            Text fragments of the response in arrival order.

        Raises:
            ValueError: If the API key is not set.
            anthropic.APIError: If the API call fails.
        """
        kwargs = self._request_kwargs(prompt, system, max_tokens, temperature)
        with self.client.messages.stream(**kwargs) as stream:
            yield from stream.text_stream
            final = stream.get_final_message()
        self._record_usage(final.usage)

    @property
    def total_usage(self) -> TokenUsage:
        """Get the cumulative token usage across all calls.

        Returns:
            A TokenUsage with total input and output tokens.
        """
        return self._total_usage

    def _request_kwargs(
        self,
        prompt: str,
        system: Optional[str],
        max_tokens: Optional[int],
        temperature: Optional[float],
    ) -> dict:
        kwargs: dict = {
            "model": self.config.model,
            "max_tokens": max_tokens or self.config.max_tokens,
            "temperature": temperature
            if temperature is not None
            else self.config.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system
        return kwargs

    def _record_usage(self, raw_usage: Any) -> TokenUsage:
        usage = TokenUsage(
            input_tokens=raw_usage.input_tokens,
            output_tokens=raw_usage.output_tokens,
        )
        self._total_usage.input_tokens += usage.input_tokens
        self._total_usage.output_tokens += usage.output_tokens

        logger.info(
            "Generated %d tokens (input: %d, output: %d)",
            usage.total_tokens,
            usage.input_tokens,
            usage.output_tokens,
        )
        return usage
