"""Provider configuration source: stored AiProvider rows → ProviderConfig."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from brandscope.core.encryption import decrypt_credential
from brandscope.gateway.types import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, ProviderConfig
from brandscope.models.ai_provider import AiProvider

logger = logging.getLogger(__name__)


def provider_config_from_model(provider: AiProvider) -> ProviderConfig:
    """Build a ProviderConfig from a stored provider, decrypting its key.

    Raises:
        ConfigurationError: the stored key cannot be decrypted.
    """
    api_config = provider.api_config or {}
    try:
        temperature = float(api_config.get("temperature", DEFAULT_TEMPERATURE))
    except (TypeError, ValueError):
        temperature = DEFAULT_TEMPERATURE
    try:
        max_tokens = int(api_config.get("max_tokens", DEFAULT_MAX_TOKENS))
    except (TypeError, ValueError):
        max_tokens = DEFAULT_MAX_TOKENS

    return ProviderConfig(
        name=provider.name,
        api_key=decrypt_credential(provider.api_key, provider.name),
        model=api_config.get("model") or "",
        temperature=temperature,
        max_tokens=max_tokens,
        base_url=api_config.get("base_url") or None,
        is_enabled=bool(provider.is_enabled),
        display_name=provider.display_name or provider.name,
    )


async def load_provider_configs(db: AsyncSession, enabled_only: bool = True) -> list[ProviderConfig]:
    """Load provider configurations in id order."""
    stmt = select(AiProvider).order_by(AiProvider.id)
    if enabled_only:
        stmt = stmt.where(AiProvider.is_enabled.is_(True))
    result = await db.execute(stmt)
    configs = [provider_config_from_model(p) for p in result.scalars().all()]
    logger.debug("Loaded %d provider configs", len(configs))
    return configs
