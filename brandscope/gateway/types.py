"""Core types and DTOs for the provider gateway."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class AuthScheme(str, Enum):
    """How a provider expects its credential."""

    BEARER = "bearer"  # Authorization: Bearer <key>
    HEADER = "header"  # vendor-specific header, e.g. x-api-key
    QUERY = "query"  # ?key=<key>
    NONE = "none"  # local endpoints


# ---------------------------------------------------------------------------
# Default model per provider (used when a config has no explicit model)
# ---------------------------------------------------------------------------

FALLBACK_MODEL = "gpt-4o-mini"

DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "gemini": "gemini-2.0-flash",
    "google": "gemini-2.0-flash",
    "google-ai": "gemini-2.0-flash",
    "google-ai-review": "gemini-2.0-flash",
    "anthropic": "claude-3-haiku-20240307",
    "claude": "claude-3-haiku-20240307",
    "perplexity": "sonar",
    "groq": "llama-3.1-70b-versatile",
    "mistral": "mistral-small-latest",
    "xai": "grok-beta",
    "x-ai": "grok-beta",
    "grok": "grok-beta",
    "deepseek": "deepseek-chat",
    "openrouter": "meta-llama/llama-3.1-8b-instruct:free",
    "ollama": "llama3.1",
}

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000


def default_model_for(provider: str) -> str:
    """Look up the default model id for a provider name."""
    return DEFAULT_MODELS.get(provider.strip().lower(), FALLBACK_MODEL)


# ---------------------------------------------------------------------------
# Provider configuration (gateway input)
# ---------------------------------------------------------------------------


@dataclass
class ProviderConfig:
    """A configured external provider, as handed over by the configuration source."""

    name: str
    api_key: str = ""
    model: str = ""  # empty → DEFAULT_MODELS
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    base_url: str | None = None
    is_enabled: bool = True
    display_name: str = ""

    @property
    def resolved_model(self) -> str:
        return self.model or default_model_for(self.name)


# ---------------------------------------------------------------------------
# Provider output
# ---------------------------------------------------------------------------


@dataclass
class RawProviderResponse:
    """Unparsed provider output."""

    text: str
    provider: str = ""
    model: str = ""
    status_code: int = 200
    latency_ms: int = 0


@dataclass
class ProviderTestResult:
    """Outcome of a provider diagnostic call. Never an exception."""

    success: bool
    provider: str
    message: str
    response: str = ""
    error: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "provider": self.provider,
            "message": self.message,
        }
        if self.success:
            data["response"] = self.response
        else:
            data["error"] = self.error
        return data


# ---------------------------------------------------------------------------
# Placeholder configurations shown to admins when adding a provider
# ---------------------------------------------------------------------------

_SAMPLE_KEYS: dict[str, str] = {
    "openai": "sk-your-openai-api-key-here",
    "gemini": "your-google-ai-api-key-here",
    "google": "your-google-ai-api-key-here",
    "google-ai": "your-google-ai-api-key-here",
    "google-ai-review": "your-google-ai-review-api-key-here",
    "perplexity": "pplx-your-perplexity-api-key-here",
    "anthropic": "sk-ant-REDACTED",
    "claude": "sk-ant-REDACTED",
    "grok": "xai-your-x-ai-api-key-here",
    "x-ai": "xai-your-x-ai-api-key-here",
    "xai": "xai-your-x-ai-api-key-here",
    "groq": "gsk_your-groq-api-key-here",
    "mistral": "your-mistral-api-key-here",
    "ollama": "not-required-for-local-ollama",
    "deepseek": "sk-your-deepseek-api-key-here",
    "openrouter": "sk-or-your-openrouter-api-key-here",
}


def sample_api_config(provider: str) -> dict[str, Any]:
    """Placeholder api_config for a provider name."""
    name = provider.strip().lower()
    config: dict[str, Any] = {
        "api_key": _SAMPLE_KEYS.get(name, "your-api-key-here"),
        "model": DEFAULT_MODELS.get(name, "default-model"),
        "temperature": DEFAULT_TEMPERATURE,
        "max_tokens": DEFAULT_MAX_TOKENS,
    }
    if name == "ollama":
        config["base_url"] = "http://localhost:11434"
    return config
