"""
Environment Configuration
=========================

Builds model settings and collaborators from environment variables.
"""

import os

import httpx

from nl_to_es.llm.base import CompletionService
from nl_to_es.llm.providers import HTTPCompletionService, get_provider
from nl_to_es.models import LLMConfig
from nl_to_es.settings import InMemorySettingsStore, JsonFileSettingsStore, SettingsStore


def load_llm_config(environ: dict[str, str] | None = None) -> LLMConfig:
    """
    Read model settings from the environment.

    Recognized variables: LLM_PROVIDER, LLM_MODEL, LLM_API_KEY, LLM_BASE_URL,
    LLM_TEMPERATURE, LLM_MAX_TOKENS, LLM_TIMEOUT, LLM_RETRY_ATTEMPTS.
    """
    env = os.environ if environ is None else environ
    defaults = LLMConfig()
    config = LLMConfig(
        provider=env.get("LLM_PROVIDER", defaults.provider),
        model=env.get("LLM_MODEL", defaults.model),
        temperature=float(env.get("LLM_TEMPERATURE", defaults.temperature)),
        max_tokens=int(env.get("LLM_MAX_TOKENS", defaults.max_tokens)),
        timeout=float(env.get("LLM_TIMEOUT", defaults.timeout)),
        retry_attempts=int(env.get("LLM_RETRY_ATTEMPTS", defaults.retry_attempts)),
        api_key=env.get("LLM_API_KEY") or None,
        base_url=env.get("LLM_BASE_URL") or None,
    )
    get_provider(config.provider)
    return config


def create_settings_store(environ: dict[str, str] | None = None) -> SettingsStore:
    """JSON file store when NL_TO_ES_SETTINGS_FILE is set, else in-memory."""
    env = os.environ if environ is None else environ
    path = env.get("NL_TO_ES_SETTINGS_FILE")
    if path:
        return JsonFileSettingsStore(path)
    return InMemorySettingsStore()


def create_completion_service(
    config: LLMConfig, http_client: httpx.AsyncClient | None = None
) -> CompletionService:
    """HTTP completion service; share http_client across calls where possible."""
    return HTTPCompletionService(default_config=config, http_client=http_client)


def use_mock_llm(environ: dict[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return env.get("NL_TO_ES_USE_MOCK_LLM", "").lower() in ("1", "true", "yes")
