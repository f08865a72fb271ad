"""Exception types shared across the search pipeline.

Paper records that fail validation raise ``pydantic.ValidationError`` and are
dropped by the result processor, so they have no dedicated type here.
"""


class PaperFinderError(Exception):
    """Base class for paper finder errors."""


class ProviderError(PaperFinderError):
    """A paper provider failed (network, status code or payload)."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class AIError(PaperFinderError):
    """The text-completion collaborator failed or returned nothing usable."""


class RetryExhausted(PaperFinderError):
    """Every attempt of a retried operation failed.

    Attributes:
        attempts: Number of attempts made
        last_error: Exception raised by the final attempt
    """

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Operation failed after {attempts} attempts: {last_error}")
