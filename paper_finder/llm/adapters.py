"""Text-completion backends used for search terms and research summaries."""

import logging

from openai import AsyncOpenAI

from ..settings import (
    ANTHROPIC_API_KEY,
    ANTHROPIC_DEFAULT_MODEL,
    OPENROUTER_API_KEY,
    OPENROUTER_BASE_URL,
    OPENROUTER_DEFAULT_MODEL,
)
from .protocols import LLMProvider

logger = logging.getLogger(__name__)


class _SDKAdapter(LLMProvider):
    """Shared client lifecycle: the SDK client lives between enter and exit.

    SDK retries are disabled; ``TermGenerator`` and ``ResearchSummarizer``
    wrap ``complete`` in the shared ``RetryExecutor``.
    """

    backend = "llm"

    def __init__(self, api_key: str | None, model: str, timeout: float):
        if not api_key:
            raise ValueError(f"{self.backend} API key required")

        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._client = None
        logger.info(f"{self.backend} adapter ready with model: {self.model}")

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    @property
    def client(self):
        if self._client is None:
            raise RuntimeError(f"{self.backend} client not open; use 'async with'")
        return self._client

    def _log_request(self, prompt: str, temperature: float, max_tokens: int | None) -> None:
        logger.info(f"Completing prompt ({len(prompt)} chars) with {self.model}")
        logger.debug(f"Temperature: {temperature}, max_tokens: {max_tokens}")


class OpenRouterAdapter(_SDKAdapter):
    """
    Completions through OpenRouter's OpenAI-compatible endpoint.

    Usage:
        async with OpenRouterAdapter(api_key=key) as llm:
            terms = await llm.complete(SEARCH_TERMS_PROMPT.format(query=query), max_tokens=200)
    """

    backend = "OpenRouter"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float = 60.0,
    ):
        super().__init__(
            api_key or OPENROUTER_API_KEY,
            model or OPENROUTER_DEFAULT_MODEL,
            timeout,
        )
        self.base_url = base_url or OPENROUTER_BASE_URL

    async def __aenter__(self) -> "OpenRouterAdapter":
        self._client = AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            max_retries=0,
            timeout=self.timeout,
        )
        return self

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        messages: list[dict] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        self._log_request(prompt, temperature, max_tokens)
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        result = response.choices[0].message.content or ""
        logger.debug(f"Completion: {len(result)} chars, usage {response.usage}")
        return result


class AnthropicAdapter(_SDKAdapter):
    """Completions through the Anthropic Messages API.

    The ``anthropic`` SDK is imported when the adapter is entered.
    """

    backend = "Anthropic"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float = 60.0,
    ):
        super().__init__(
            api_key or ANTHROPIC_API_KEY,
            model or ANTHROPIC_DEFAULT_MODEL,
            timeout,
        )

    async def __aenter__(self) -> "AnthropicAdapter":
        import anthropic

        self._client = anthropic.AsyncAnthropic(
            api_key=self.api_key,
            max_retries=0,
            timeout=self.timeout,
        )
        return self

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        request = {
            "model": self.model,
            "max_tokens": max_tokens or 1024,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if system_prompt:
            request["system"] = system_prompt

        self._log_request(prompt, temperature, max_tokens)
        message = await self.client.messages.create(**request)

        # responses may interleave text with other block types
        result = "".join(block.text for block in message.content if block.type == "text")
        logger.debug(
            f"Completion: {len(result)} chars, "
            f"tokens in={message.usage.input_tokens} out={message.usage.output_tokens}"
        )
        return result
