"""Provider selection: first enabled provider in preference order."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from brandscope.core.config import settings
from brandscope.core.exceptions import ConfigurationError
from brandscope.gateway.types import ProviderConfig

logger = logging.getLogger(__name__)


def select_provider(
    configs: Iterable[ProviderConfig],
    preference: Sequence[str] | None = None,
) -> ProviderConfig:
    """Pick the provider to use for one request.

    Scans ``preference`` in order and returns the first enabled config whose
    name matches (case-insensitive). If no preferred name matches, the first
    enabled config in input order is returned. Deterministic for identical
    input.

    Raises:
        ConfigurationError: no config is enabled.
    """
    if preference is None:
        preference = settings.provider_preference_list

    enabled = [c for c in configs if c.is_enabled]
    if not enabled:
        raise ConfigurationError("no enabled provider")

    by_name: dict[str, ProviderConfig] = {}
    for config in enabled:
        by_name.setdefault(config.name.strip().lower(), config)

    for name in preference:
        config = by_name.get(name.strip().lower())
        if config is not None:
            logger.debug("Selected preferred provider %s", config.name)
            return config

    logger.info("No preferred provider enabled, falling back to %s", enabled[0].name)
    return enabled[0]
