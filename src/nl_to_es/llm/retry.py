"""
Retrying Completion Service
===========================

Bounds every completion call by the configured timeout and re-issues it
until the retry budget is spent.
"""

import asyncio
import logging

from nl_to_es.exceptions import CompletionError, CompletionTimeoutError
from nl_to_es.llm.base import CompletionService
from nl_to_es.models import LLMConfig

logger = logging.getLogger(__name__)


class RetryingCompletionService(CompletionService):
    """Wraps another service with per-call timeout and retries."""

    def __init__(self, inner: CompletionService, default_config: LLMConfig | None = None) -> None:
        self.inner = inner
        self.default_config = default_config or LLMConfig()

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        config: LLMConfig | None = None,
    ) -> str:
        config = config or self.default_config
        attempts = max(0, config.retry_attempts) + 1
        last_error: CompletionError | None = None

        for attempt in range(1, attempts + 1):
            try:
                return await asyncio.wait_for(
                    self.inner.complete(prompt, system_prompt, config),
                    timeout=config.timeout,
                )
            except asyncio.TimeoutError:
                last_error = CompletionTimeoutError(
                    f"Completion timed out after {config.timeout}s"
                )
            except CompletionError as e:
                last_error = e

            logger.warning(
                "Completion attempt %d/%d failed: %s", attempt, attempts, last_error
            )

        raise last_error
