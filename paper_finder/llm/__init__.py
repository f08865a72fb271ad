"""Text-completion backends for search-term generation and summaries."""

from .protocols import LLMProvider
from .adapters import AnthropicAdapter, OpenRouterAdapter

__all__ = [
    # Protocols
    "LLMProvider",
    # Adapters
    "OpenRouterAdapter",
    "AnthropicAdapter",
]
