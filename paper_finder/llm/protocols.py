"""Protocol definitions for LLM providers."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class LLMProvider(Protocol):
    """Protocol for LLM providers.

    Implement this protocol to add support for new LLM APIs. Errors propagate
    to the caller, which owns retry and fallback.
    """

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        """
        Generate a completion for a simple prompt.

        Args:
            prompt: The user prompt
            system_prompt: Optional system prompt
            temperature: Sampling temperature (0-2)
            max_tokens: Maximum tokens to generate

        Returns:
            The generated text
        """
        ...

    async def __aenter__(self) -> "LLMProvider":
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        ...
