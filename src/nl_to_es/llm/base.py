"""
Base Completion Interface
=========================

Abstract interface for text completion services.
"""

from abc import ABC, abstractmethod

from nl_to_es.models import LLMConfig


class CompletionService(ABC):
    """Abstract interface for text completion services."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        config: LLMConfig | None = None,
    ) -> str:
        """
        Execute a prompt against the configured model.

        Args:
            prompt: The user prompt
            system_prompt: Optional system prompt for context
            config: Model settings for this call

        Returns:
            The generated text

        Raises:
            CompletionError: On provider, network or timeout failures
        """
        pass

    async def test_connection(self, config: LLMConfig | None = None) -> bool:
        """Send a trivial prompt and check the model answers "OK"."""
        try:
            reply = await self.complete("Test connection", 'Respond with "OK"', config)
        except Exception:
            return False
        return reply.strip() == "OK"
