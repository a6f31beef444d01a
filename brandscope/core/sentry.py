"""Sentry reporting for the API process and the analysis workers.

No-op unless ``SENTRY_DSN`` is set. Events carry the package release and a
``component`` tag (``api`` or ``worker``) so provider failures raised inside
Celery retries can be told apart from request-time failures.
"""

import logging

from brandscope import __version__
from brandscope.core.config import settings

logger = logging.getLogger(__name__)


def init_sentry(component: str = "api") -> bool:
    """Initialize Sentry for ``component``. Returns False when disabled."""
    if not settings.sentry_dsn:
        logger.debug("Sentry DSN not configured, %s runs without error reporting", component)
        return False

    import sentry_sdk
    from sentry_sdk.integrations.celery import CeleryIntegration
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    integrations = [SqlalchemyIntegration()]
    if component == "worker":
        integrations.append(CeleryIntegration())
    else:
        integrations.append(FastApiIntegration(transaction_style="endpoint"))

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.app_env,
        release=f"brandscope@{__version__}",
        traces_sample_rate=0.1 if settings.app_env == "production" else 1.0,
        send_default_pii=False,
        integrations=integrations,
    )
    sentry_sdk.set_tag("component", component)
    logger.info("Sentry initialized (component=%s, env=%s)", component, settings.app_env)
    return True
