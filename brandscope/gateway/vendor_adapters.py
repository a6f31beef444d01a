"""Vendor-Specific Adapters: protocol-level handling for each LLM provider.

Each adapter translates a ProviderConfig + prompt into the provider's HTTP
protocol, sends it, and unwraps the answer text from the response envelope.

Provider shapes:
  - OpenAI and OpenAI-compatible chat completions (Groq, Mistral, xAI,
    DeepSeek, OpenRouter, Perplexity): bearer token, choices[0].message.content
  - Anthropic messages: x-api-key + anthropic-version headers, content[0].text
  - Google generateContent: ?key= query string, candidates[0].content.parts[0].text
  - Ollama local generate: no auth, stream disabled, response

Adapters never retry; timeouts and non-2xx statuses surface as ProviderError.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from brandscope.core.config import settings
from brandscope.core.exceptions import ConfigurationError, ProviderError
from brandscope.core.metrics import PROVIDER_CALLS, PROVIDER_LATENCY
from brandscope.gateway.types import (
    AuthScheme,
    ProviderConfig,
    ProviderTestResult,
    RawProviderResponse,
)

logger = logging.getLogger(__name__)

_ERROR_BODY_LIMIT = 2000


class BaseProviderAdapter(ABC):
    """Base class for all provider adapters."""

    provider: str
    auth_scheme: AuthScheme = AuthScheme.BEARER
    api_url: str = ""

    # --- Credential handling ---

    def validate_credential(self, config: ProviderConfig) -> str:
        """Return the trimmed credential or raise ConfigurationError."""
        api_key = (config.api_key or "").strip()
        if not api_key:
            raise ConfigurationError(f"API key is missing for provider '{config.name}'")
        return api_key

    def authenticate(self, api_key: str) -> tuple[dict[str, str], dict[str, str]]:
        """Build (headers, query params) carrying the credential."""
        if self.auth_scheme == AuthScheme.BEARER:
            return {"Authorization": f"Bearer {api_key}"}, {}
        if self.auth_scheme == AuthScheme.QUERY:
            return {}, {"key": api_key}
        return {}, {}

    # --- Protocol shape ---

    def endpoint(self, config: ProviderConfig, model: str) -> str:
        return self.api_url

    @abstractmethod
    def build_payload(self, config: ProviderConfig, model: str, prompt: str) -> dict[str, Any]:
        """Build the JSON request body."""
        ...

    @abstractmethod
    def _answer_path(self, data: dict[str, Any]) -> Any:
        """Walk the response envelope down to the answer text."""
        ...

    def extract_text(self, data: dict[str, Any]) -> str:
        """Unwrap the answer text; a missing path yields an empty string."""
        try:
            text = self._answer_path(data)
        except (KeyError, IndexError, TypeError):
            logger.warning("%s response has no answer text at the expected path", self.provider)
            return ""
        return text or ""

    # --- Invocation ---

    async def invoke(
        self,
        config: ProviderConfig,
        prompt: str,
        timeout: float | None = None,
    ) -> RawProviderResponse:
        """Send one prompt and return the raw answer text."""
        api_key = self.validate_credential(config)
        model = config.resolved_model
        timeout = timeout or settings.provider_timeout_seconds

        url = self.endpoint(config, model)
        auth_headers, params = self.authenticate(api_key)
        headers = {**auth_headers, "Content-Type": "application/json"}
        payload = self.build_payload(config, model, prompt)

        start = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                resp = await client.post(url, json=payload, headers=headers, params=params)
        except httpx.TimeoutException as e:
            PROVIDER_CALLS.labels(provider=self.provider, status="timeout").inc()
            logger.error("%s timeout after %ss", self.provider, timeout)
            raise ProviderError(
                f"{self.provider} timeout after {timeout}s",
                provider=self.provider,
            ) from e
        except httpx.HTTPError as e:
            PROVIDER_CALLS.labels(provider=self.provider, status="transport_error").inc()
            logger.error("%s request failed: %s", self.provider, e)
            raise ProviderError(
                f"{self.provider} request failed: {e}",
                provider=self.provider,
            ) from e

        elapsed = time.monotonic() - start
        PROVIDER_LATENCY.labels(provider=self.provider).observe(elapsed)

        if not resp.is_success:
            PROVIDER_CALLS.labels(provider=self.provider, status="http_error").inc()
            body = resp.text[:_ERROR_BODY_LIMIT]
            logger.error(
                "%s API request failed: status=%d body=%s",
                self.provider,
                resp.status_code,
                body[:500],
            )
            raise ProviderError(
                f"{self.provider} API request failed with status {resp.status_code}",
                provider=self.provider,
                status_code=resp.status_code,
                body=body,
            )

        try:
            data = resp.json()
        except ValueError as e:
            PROVIDER_CALLS.labels(provider=self.provider, status="http_error").inc()
            raise ProviderError(
                f"{self.provider} returned a non-JSON body",
                provider=self.provider,
                status_code=resp.status_code,
                body=resp.text[:_ERROR_BODY_LIMIT],
            ) from e

        PROVIDER_CALLS.labels(provider=self.provider, status="success").inc()
        return RawProviderResponse(
            text=self.extract_text(data),
            provider=self.provider,
            model=model,
            status_code=resp.status_code,
            latency_ms=int(elapsed * 1000),
        )


# ---------------------------------------------------------------------------
# OpenAI chat completions and compatible providers
# ---------------------------------------------------------------------------


class OpenAICompatibleAdapter(BaseProviderAdapter):
    """Generic chat-completions adapter.

    Used directly for unknown provider names; honours ``config.base_url``.
    """

    provider = "openai-compatible"
    api_url = "https://api.openai.com/v1/chat/completions"

    def endpoint(self, config: ProviderConfig, model: str) -> str:
        if config.base_url:
            return config.base_url.rstrip("/") + "/chat/completions"
        return self.api_url

    def build_payload(self, config: ProviderConfig, model: str, prompt: str) -> dict[str, Any]:
        return {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
        }

    def _answer_path(self, data: dict[str, Any]) -> Any:
        return data["choices"][0]["message"]["content"]


class OpenAIAdapter(OpenAICompatibleAdapter):
    provider = "openai"

    def validate_credential(self, config: ProviderConfig) -> str:
        api_key = super().validate_credential(config)
        if not api_key.startswith("sk-"):
            raise ConfigurationError("Invalid OpenAI API key format: expected a key starting with 'sk-'")
        return api_key


class PerplexityAdapter(OpenAICompatibleAdapter):
    provider = "perplexity"
    api_url = "https://api.perplexity.ai/chat/completions"


class GroqAdapter(OpenAICompatibleAdapter):
    provider = "groq"
    api_url = "https://api.groq.com/openai/v1/chat/completions"


class MistralAdapter(OpenAICompatibleAdapter):
    provider = "mistral"
    api_url = "https://api.mistral.ai/v1/chat/completions"


class XAIAdapter(OpenAICompatibleAdapter):
    provider = "xai"
    api_url = "https://api.x.ai/v1/chat/completions"


class DeepSeekAdapter(OpenAICompatibleAdapter):
    provider = "deepseek"
    api_url = "https://api.deepseek.com/v1/chat/completions"


class OpenRouterAdapter(OpenAICompatibleAdapter):
    provider = "openrouter"
    api_url = "https://openrouter.ai/api/v1/chat/completions"


# ---------------------------------------------------------------------------
# Anthropic messages
# ---------------------------------------------------------------------------


class AnthropicAdapter(BaseProviderAdapter):
    """Anthropic Messages API adapter."""

    provider = "anthropic"
    auth_scheme = AuthScheme.HEADER
    api_url = "https://api.anthropic.com/v1/messages"
    api_version = "2023-06-01"

    def authenticate(self, api_key: str) -> tuple[dict[str, str], dict[str, str]]:
        return {"x-api-key": api_key, "anthropic-version": self.api_version}, {}

    def build_payload(self, config: ProviderConfig, model: str, prompt: str) -> dict[str, Any]:
        return {
            "model": model,
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }

    def _answer_path(self, data: dict[str, Any]) -> Any:
        return data["content"][0]["text"]


# ---------------------------------------------------------------------------
# Google generative content
# ---------------------------------------------------------------------------


class GeminiAdapter(BaseProviderAdapter):
    """Google Gemini generateContent adapter with SAFETY filter detection."""

    provider = "gemini"
    auth_scheme = AuthScheme.QUERY
    api_url_template = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

    def endpoint(self, config: ProviderConfig, model: str) -> str:
        return self.api_url_template.format(model=model)

    def build_payload(self, config: ProviderConfig, model: str, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": config.temperature,
                "maxOutputTokens": config.max_tokens,
            },
        }

    def _answer_path(self, data: dict[str, Any]) -> Any:
        return data["candidates"][0]["content"]["parts"][0]["text"]

    def extract_text(self, data: dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason", "")
            logger.warning("Gemini returned no candidates (blockReason=%s)", block_reason or "none")
            return ""
        if candidates[0].get("finishReason") == "SAFETY":
            logger.warning("Gemini safety filter triggered, answer withheld")
            return ""
        return super().extract_text(data)


# ---------------------------------------------------------------------------
# Ollama local generate endpoint
# ---------------------------------------------------------------------------


class OllamaAdapter(BaseProviderAdapter):
    """Local Ollama server. No auth, no streaming."""

    provider = "ollama"
    auth_scheme = AuthScheme.NONE
    default_base_url = "http://localhost:11434"

    def endpoint(self, config: ProviderConfig, model: str) -> str:
        base_url = (config.base_url or self.default_base_url).rstrip("/")
        return f"{base_url}/api/generate"

    def build_payload(self, config: ProviderConfig, model: str, prompt: str) -> dict[str, Any]:
        return {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": config.temperature,
                "num_predict": config.max_tokens,
            },
        }

    def _answer_path(self, data: dict[str, Any]) -> Any:
        return data["response"]


# ---------------------------------------------------------------------------
# Adapter registry
# ---------------------------------------------------------------------------

ADAPTER_REGISTRY: dict[str, type[BaseProviderAdapter]] = {
    "openai": OpenAIAdapter,
    "gemini": GeminiAdapter,
    "google": GeminiAdapter,
    "google-ai": GeminiAdapter,
    "google-ai-review": GeminiAdapter,
    "anthropic": AnthropicAdapter,
    "claude": AnthropicAdapter,
    "perplexity": PerplexityAdapter,
    "groq": GroqAdapter,
    "mistral": MistralAdapter,
    "xai": XAIAdapter,
    "x-ai": XAIAdapter,
    "grok": XAIAdapter,
    "deepseek": DeepSeekAdapter,
    "openrouter": OpenRouterAdapter,
    "ollama": OllamaAdapter,
}


def get_adapter(provider: str) -> BaseProviderAdapter:
    """Factory: get the adapter for a provider name.

    Unknown names are allowed and routed through the generic
    OpenAI-compatible adapter.
    """
    name = provider.strip().lower()
    cls = ADAPTER_REGISTRY.get(name)
    if cls is None:
        logger.warning("Unknown provider '%s', using OpenAI-compatible fallback", provider)
        return OpenAICompatibleAdapter()
    return cls()


async def invoke_provider(
    config: ProviderConfig,
    prompt: str,
    timeout: float | None = None,
) -> RawProviderResponse:
    """Invoke the adapter matching ``config.name``."""
    return await get_adapter(config.name).invoke(config, prompt, timeout=timeout)


async def check_provider(config: ProviderConfig, prompt: str | None = None) -> ProviderTestResult:
    """Send a short diagnostic prompt. Always returns a descriptor, never raises."""
    prompt = prompt or settings.provider_check_prompt
    try:
        raw = await invoke_provider(config, prompt)
    except (ConfigurationError, ProviderError) as e:
        logger.warning("Provider check failed for %s: %s", config.name, e)
        return ProviderTestResult(
            success=False,
            provider=config.name,
            message=f"AI model test failed: {e}",
            error=str(e),
        )
    except Exception as e:
        logger.exception("Unexpected error while checking provider %s", config.name)
        return ProviderTestResult(
            success=False,
            provider=config.name,
            message=f"AI model test failed: {e}",
            error=str(e),
        )

    return ProviderTestResult(
        success=True,
        provider=config.name,
        message="AI model is working correctly",
        response=raw.text,
    )
