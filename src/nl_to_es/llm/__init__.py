"""
LLM Module
==========

Pluggable completion services for intent extraction and query synthesis.
"""

from nl_to_es.llm.base import CompletionService
from nl_to_es.llm.mock import FailingLLM, MockLLM
from nl_to_es.llm.providers import (
    PROVIDERS,
    HTTPCompletionService,
    get_provider,
    list_providers,
)
from nl_to_es.llm.retry import RetryingCompletionService

__all__ = [
    "CompletionService",
    "MockLLM",
    "FailingLLM",
    "HTTPCompletionService",
    "RetryingCompletionService",
    "PROVIDERS",
    "get_provider",
    "list_providers",
]
