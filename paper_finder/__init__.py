"""Research paper finder: search terms, multi-provider search and ranking."""

from .agent import ChatResponse, ResearchAgent, SearchResponse
from .cache import TTLCache
from .errors import AIError, PaperFinderError, ProviderError, RetryExhausted
from .paper_sources import HealthReport, Paper, ResultProcessor, SearchOrchestrator
from .retry import RetryExecutor, with_retry
from .summarize import ResearchSummarizer
from .terms import TermGenerator

__all__ = [
    "ResearchAgent",
    "SearchResponse",
    "ChatResponse",
    "TermGenerator",
    "ResearchSummarizer",
    "SearchOrchestrator",
    "ResultProcessor",
    "HealthReport",
    "Paper",
    "TTLCache",
    "RetryExecutor",
    "with_retry",
    "PaperFinderError",
    "ProviderError",
    "AIError",
    "RetryExhausted",
]
