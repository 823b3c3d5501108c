"""
Mock LLM
========

Mock completion service for testing and demonstration.
"""

import asyncio

from nl_to_es.exceptions import ProviderError
from nl_to_es.llm.base import CompletionService
from nl_to_es.models import LLMConfig


class MockLLM(CompletionService):
    """
    Mock completion service for demonstration and testing purposes.

    In production, use HTTPCompletionService with a configured provider.
    """

    def __init__(
        self,
        responses: dict[str, list[str | Exception]] | None = None,
        default: str = "{}",
        delay: float = 0.0,
    ) -> None:
        """
        Initialize with canned responses.

        Args:
            responses: Dict mapping prompt substrings to a list of replies.
                       Replies are returned in sequence; the last one repeats.
                       An Exception instance in the list is raised instead.
            default: Reply used when no key matches
            delay: Seconds to sleep before answering (for timeout tests)
        """
        self.responses = responses or {}
        self.default = default
        self.delay = delay
        self.call_counts: dict[str, int] = {}
        self.prompts: list[str] = []

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        config: LLMConfig | None = None,
    ) -> str:
        """
        Return the next canned reply for the first key found in the prompt.
        """
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)

        for key, replies in self.responses.items():
            if key.lower() in prompt.lower():
                count = self.call_counts.get(key, 0)
                self.call_counts[key] = count + 1

                reply = replies[min(count, len(replies) - 1)]
                if isinstance(reply, Exception):
                    raise reply
                return reply

        return self.default

    def reset(self) -> None:
        """Reset call counts for fresh test runs."""
        self.call_counts = {}
        self.prompts = []


class FailingLLM(CompletionService):
    """Completion service that always fails."""

    def __init__(self, message: str = "provider unavailable") -> None:
        self.message = message
        self.calls = 0

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        config: LLMConfig | None = None,
    ) -> str:
        self.calls += 1
        raise ProviderError(self.message, status_code=503)
