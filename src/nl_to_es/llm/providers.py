"""
HTTP Completion Providers
=========================

Provider-agnostic completion service backed by httpx.

Each supported provider is an entry in ``PROVIDERS`` mapping its id to a
request builder and a response parser. Selecting a provider is a
configuration value, not a subclass.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from nl_to_es.exceptions import ConfigurationError, ProviderError
from nl_to_es.llm.base import CompletionService
from nl_to_es.models import LLMConfig, LLMResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderRequest:
    """A fully shaped HTTP request for one provider call."""

    url: str
    headers: dict[str, str]
    payload: dict[str, Any]


@dataclass(frozen=True)
class ProviderSpec:
    """Static description of a provider plus its request/response shaping."""

    id: str
    name: str
    api_endpoint: str
    models: tuple[str, ...]
    build_request: Callable[["ProviderSpec", LLMConfig, str, str | None], ProviderRequest]
    parse_response: Callable[[dict, LLMConfig], LLMResponse]


def _inline_system(prompt: str, system_prompt: str | None) -> str:
    return f"{system_prompt}\n\nUser: {prompt}" if system_prompt else prompt


def _gemini_request(
    spec: ProviderSpec, config: LLMConfig, prompt: str, system_prompt: str | None
) -> ProviderRequest:
    base = (config.base_url or spec.api_endpoint).rstrip("/")
    return ProviderRequest(
        url=f"{base}/models/{config.model}:generateContent",
        headers={
            "Content-Type": "application/json",
            "x-goog-api-key": config.api_key or "",
        },
        payload={
            "contents": [{"parts": [{"text": _inline_system(prompt, system_prompt)}]}],
            "generationConfig": {
                "temperature": config.temperature,
                "maxOutputTokens": config.max_tokens,
            },
        },
    )


def _gemini_response(data: dict, config: LLMConfig) -> LLMResponse:
    candidates = data.get("candidates") or []
    if not candidates or not candidates[0].get("content"):
        raise ProviderError("Invalid response format from Gemini API")
    first = candidates[0]
    return LLMResponse(
        content=first["content"]["parts"][0]["text"],
        model=config.model,
        finish_reason=first.get("finishReason") or "stop",
    )


def _openai_request(
    spec: ProviderSpec, config: LLMConfig, prompt: str, system_prompt: str | None
) -> ProviderRequest:
    base = (config.base_url or spec.api_endpoint).rstrip("/")
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})
    return ProviderRequest(
        url=f"{base}/chat/completions",
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {config.api_key or ''}",
        },
        payload={
            "model": config.model,
            "messages": messages,
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
        },
    )


def _openai_response(data: dict, config: LLMConfig) -> LLMResponse:
    try:
        choice = data["choices"][0]
        content = choice["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise ProviderError(f"Invalid response format from OpenAI API: {e}") from e
    usage = data.get("usage") or {}
    return LLMResponse(
        content=content or "",
        model=data.get("model", config.model),
        finish_reason=choice.get("finish_reason") or "stop",
        tokens_used=usage.get("total_tokens", 0),
    )


def _anthropic_request(
    spec: ProviderSpec, config: LLMConfig, prompt: str, system_prompt: str | None
) -> ProviderRequest:
    base = (config.base_url or spec.api_endpoint).rstrip("/")
    payload: dict[str, Any] = {
        "model": config.model,
        "max_tokens": config.max_tokens,
        "temperature": config.temperature,
        "messages": [{"role": "user", "content": prompt}],
    }
    if system_prompt:
        payload["system"] = system_prompt
    return ProviderRequest(
        url=f"{base}/messages",
        headers={
            "Content-Type": "application/json",
            "x-api-key": config.api_key or "",
            "anthropic-version": "2023-06-01",
        },
        payload=payload,
    )


def _anthropic_response(data: dict, config: LLMConfig) -> LLMResponse:
    blocks = data.get("content") or []
    text = "".join(b.get("text", "") for b in blocks if b.get("type", "text") == "text")
    if not blocks:
        raise ProviderError("Invalid response format from Anthropic API")
    usage = data.get("usage") or {}
    return LLMResponse(
        content=text,
        model=data.get("model", config.model),
        finish_reason=data.get("stop_reason") or "stop",
        tokens_used=usage.get("input_tokens", 0) + usage.get("output_tokens", 0),
    )


def _ollama_request(
    spec: ProviderSpec, config: LLMConfig, prompt: str, system_prompt: str | None
) -> ProviderRequest:
    base = (config.base_url or spec.api_endpoint).rstrip("/")
    return ProviderRequest(
        url=f"{base}/api/generate",
        headers={"Content-Type": "application/json"},
        payload={
            "model": config.model,
            "prompt": _inline_system(prompt, system_prompt),
            "stream": False,
            "options": {
                "temperature": config.temperature,
                "num_predict": config.max_tokens,
            },
        },
    )


def _ollama_response(data: dict, config: LLMConfig) -> LLMResponse:
    if "response" not in data:
        raise ProviderError("Invalid response format from Ollama API")
    return LLMResponse(
        content=data["response"],
        model=data.get("model", config.model),
        finish_reason="stop" if data.get("done") else "length",
    )


PROVIDERS: dict[str, ProviderSpec] = {
    "gemini": ProviderSpec(
        id="gemini",
        name="Google Gemini",
        api_endpoint="https://generativelanguage.googleapis.com/v1beta",
        models=("gemini-1.5-pro-latest", "gemini-1.5-flash-latest"),
        build_request=_gemini_request,
        parse_response=_gemini_response,
    ),
    "openai": ProviderSpec(
        id="openai",
        name="OpenAI",
        api_endpoint="https://api.openai.com/v1",
        models=("gpt-4", "gpt-3.5-turbo"),
        build_request=_openai_request,
        parse_response=_openai_response,
    ),
    "anthropic": ProviderSpec(
        id="anthropic",
        name="Anthropic Claude",
        api_endpoint="https://api.anthropic.com/v1",
        models=("claude-3-opus-20240229", "claude-3-sonnet-20240229"),
        build_request=_anthropic_request,
        parse_response=_anthropic_response,
    ),
    "ollama": ProviderSpec(
        id="ollama",
        name="Ollama (Local)",
        api_endpoint="http://localhost:11434",
        models=(),
        build_request=_ollama_request,
        parse_response=_ollama_response,
    ),
}


def get_provider(provider_id: str) -> ProviderSpec:
    """Look up a provider by id."""
    try:
        return PROVIDERS[provider_id]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported LLM provider: '{provider_id}'. "
            f"Supported: {', '.join(list_providers())}"
        ) from None


def list_providers() -> list[str]:
    return list(PROVIDERS)


class HTTPCompletionService(CompletionService):
    """
    Completion service that talks to remote model APIs over HTTP.

    Pass a long-lived ``http_client`` to reuse connections; without one each
    call opens and closes its own client.
    """

    def __init__(
        self,
        default_config: LLMConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.default_config = default_config or LLMConfig()
        self._http_client = http_client

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        config: LLMConfig | None = None,
    ) -> str:
        config = config or self.default_config
        spec = get_provider(config.provider)
        request = spec.build_request(spec, config, prompt, system_prompt)

        client = self._http_client or httpx.AsyncClient()
        should_close = self._http_client is None

        try:
            response = await client.post(
                request.url,
                headers=request.headers,
                json=request.payload,
                timeout=config.timeout,
            )
        except httpx.HTTPError as e:
            raise ProviderError(f"{spec.name} request failed: {e}") from e
        finally:
            if should_close:
                await client.aclose()

        if response.status_code >= 400:
            raise ProviderError(
                f"{spec.name} API error: {response.status_code} - {response.text[:500]}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(f"{spec.name} returned non-JSON body") from e

        try:
            result = spec.parse_response(data, config)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise ProviderError(f"Invalid response format from {spec.name} API: {e!r}") from e

        if not isinstance(result.content, str):
            raise ProviderError(f"Invalid response format from {spec.name} API: non-text content")

        logger.debug(
            "Completion from %s/%s finished (%s)", spec.id, result.model, result.finish_reason
        )
        return result.content
