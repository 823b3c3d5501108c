"""
Exceptions
==========

Error taxonomy for the query agent.
"""


class AgentError(Exception):
    """Base class for all agent errors."""

    #: Agent logs recorded up to the failure, when the caller attaches them.
    agent_logs: tuple = ()


class ConfigurationError(AgentError):
    """Invalid or unsupported configuration (e.g. unknown provider)."""


class CompletionError(AgentError):
    """A completion call failed after its retry budget."""


class ProviderError(CompletionError):
    """The remote model API returned an error or an unreadable response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CompletionTimeoutError(CompletionError):
    """A completion call exceeded its configured timeout."""


class ExtractionError(AgentError):
    """Intent extraction failed. Fatal for the request."""


class SynthesisError(AgentError):
    """Query synthesis failed for one perspective."""
