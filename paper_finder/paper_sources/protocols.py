"""Protocol definitions for paper providers."""

from typing import Protocol, runtime_checkable

from .models import Paper


@runtime_checkable
class PaperSearchProvider(Protocol):
    """Protocol for paper search providers.

    Implement this protocol to add support for new paper search APIs.
    Implementations must not raise from ``search``: failures are logged and
    reported as an empty list so one provider cannot abort an aggregate search.
    """

    name: str

    async def search(self, term: str) -> list[Paper]:
        """
        Search for papers matching a single term.

        Args:
            term: Search term

        Returns:
            List of canonical Paper records (empty on any failure)
        """
        ...

    async def __aenter__(self) -> "PaperSearchProvider":
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        ...


@runtime_checkable
class HealthCheckable(Protocol):
    """Protocol for providers that can check their upstream directly."""

    async def health_check(self) -> bool:
        """Return True if the upstream answered with a well-formed result."""
        ...
