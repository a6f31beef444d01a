"""Celery tasks for brand prompt analysis.

One task per brand prompt. Provider failures are retried by Celery with
exponential backoff; configuration errors and missing prompts are final.
"""

import asyncio
import logging

from brandscope.core.config import settings
from brandscope.core.exceptions import ProviderError
from brandscope.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


def _run_async(coro):
    """Run an async coroutine from sync Celery task context.

    Creates a fresh event loop each time to avoid conflicts with
    the module-level SQLAlchemy engine (which may be bound to a
    different loop created by uvicorn).
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _make_session_factory():
    """Create a fresh async engine + session factory for Celery worker context.

    The module-level engine from brandscope.db.postgres is bound to uvicorn's
    event loop and cannot be reused in a new event loop created by _run_async().
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

    engine = create_async_engine(
        settings.postgres_url,
        echo=False,
        pool_size=2,
        max_overflow=2,
        pool_pre_ping=True,
    )
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False), engine


async def _analyze_brand_prompt_async(brand_prompt_id: int, session_id: str) -> dict:
    from brandscope.services.analysis_service import analyze_brand_prompt

    session_factory, engine = _make_session_factory()
    try:
        async with session_factory() as db:
            outcome = await analyze_brand_prompt(db, brand_prompt_id, session_id=session_id)
    finally:
        await engine.dispose()

    return {
        "brand_prompt_id": brand_prompt_id,
        "provider": outcome.provider,
        "sentiment": outcome.analysis.sentiment.value,
        "position": outcome.analysis.position,
        "visibility": outcome.analysis.visibility,
        "resources": len(outcome.resources),
        "competitor_resources": outcome.competitor_resource_count,
        "persistence_warning": outcome.persistence_warning,
    }


@celery_app.task(
    bind=True,
    name="analyze_brand_prompt",
    autoretry_for=(ProviderError,),
    retry_backoff=True,
    retry_backoff_max=settings.analysis_retry_backoff_max,
    retry_jitter=True,
    max_retries=settings.analysis_max_retries,
)
def analyze_brand_prompt_task(self, brand_prompt_id: int, session_id: str = ""):
    """Celery task: run the analysis pipeline for one brand prompt."""
    logger.info(
        "Starting analysis for brand prompt %d (attempt %d)",
        brand_prompt_id,
        self.request.retries + 1,
        extra={"brand_prompt_id": brand_prompt_id, "session_id": session_id},
    )
    try:
        result = _run_async(_analyze_brand_prompt_async(brand_prompt_id, session_id))
    except ProviderError as exc:
        logger.warning(
            "Provider failed for brand prompt %d (status=%d): %s",
            brand_prompt_id,
            exc.status_code,
            exc,
            extra={"brand_prompt_id": brand_prompt_id, "provider": exc.provider},
        )
        raise
    except Exception as exc:
        logger.error("Analysis failed for brand prompt %d: %s", brand_prompt_id, exc)
        return {"error": str(exc), "brand_prompt_id": brand_prompt_id}

    logger.info("Analysis done for brand prompt %d: %s", brand_prompt_id, result)
    return result
