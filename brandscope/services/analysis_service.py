"""Brand prompt analysis service.

Glue between stored brand prompts and the analysis pipeline:
  - analyze one stored prompt and record its metrics
  - fan a batch of prompts out to the job queue
  - look up analysed prompts citing a competitor domain
  - run the diagnostic call against a stored provider
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from brandscope.analysis.pipeline import analyze_request
from brandscope.analysis.types import AnalysisOutcome, AnalysisRequest
from brandscope.core.config import settings
from brandscope.core.exceptions import ConfigurationError, NotFoundError
from brandscope.gateway.types import ProviderTestResult
from brandscope.gateway.vendor_adapters import check_provider
from brandscope.models.ai_provider import AiProvider
from brandscope.models.brand import Brand
from brandscope.models.brand_prompt import BrandPrompt
from brandscope.models.brand_prompt_resource import BrandPromptResource
from brandscope.services.providers import load_provider_configs, provider_config_from_model

logger = logging.getLogger(__name__)


async def _load_prompt(db: AsyncSession, brand_prompt_id: int) -> BrandPrompt:
    result = await db.execute(
        select(BrandPrompt)
        .where(BrandPrompt.id == brand_prompt_id)
        .options(selectinload(BrandPrompt.brand).selectinload(Brand.competitors))
    )
    prompt = result.scalar_one_or_none()
    if prompt is None:
        raise NotFoundError(f"Brand prompt {brand_prompt_id} not found")
    return prompt


async def analyze_brand_prompt(
    db: AsyncSession,
    brand_prompt_id: int,
    session_id: str = "",
) -> AnalysisOutcome:
    """Analyze a stored brand prompt and record the results on it.

    Provider and configuration errors propagate to the caller, which owns
    the retry policy.
    """
    prompt = await _load_prompt(db, brand_prompt_id)
    brand = prompt.brand
    competitor_names = tuple(c.name for c in brand.competitors if c.name)

    request = AnalysisRequest(
        request_id=prompt.id,
        brand_name=brand.name,
        phrase=prompt.prompt,
        competitor_names=competitor_names,
        session_id=session_id,
    )
    providers = await load_provider_configs(db)
    outcome = await analyze_request(request, providers, db=db)

    prompt.ai_response = outcome.narrative
    prompt.sentiment = outcome.analysis.sentiment.value
    prompt.position = outcome.analysis.position
    prompt.visibility = outcome.analysis.visibility
    prompt.competitor_mentions = outcome.analysis.competitor_mentions
    prompt.ai_provider = outcome.provider
    if session_id:
        prompt.session_id = session_id
    prompt.analysis_completed_at = datetime.now(timezone.utc)
    await db.commit()

    return outcome


async def batch_analyze_prompts(
    db: AsyncSession,
    brand_prompt_ids: list[int],
    session_id: str = "",
) -> list[int]:
    """Enqueue one analysis task per existing prompt id; does not wait.

    Unknown ids are skipped. Returns the ids that were dispatched.
    """
    from brandscope.tasks.analysis_tasks import analyze_brand_prompt_task

    if not brand_prompt_ids:
        return []

    result = await db.execute(select(BrandPrompt.id).where(BrandPrompt.id.in_(brand_prompt_ids)))
    existing = set(result.scalars().all())

    dispatched: list[int] = []
    for prompt_id in brand_prompt_ids:
        if prompt_id not in existing:
            logger.warning("Brand prompt %d not found, skipping", prompt_id)
            continue
        if prompt_id in dispatched:
            continue
        analyze_brand_prompt_task.apply_async(args=[prompt_id, session_id], queue=settings.analysis_queue)
        dispatched.append(prompt_id)

    logger.info(
        "Dispatched %d/%d brand prompt analyses (session=%s)",
        len(dispatched),
        len(brand_prompt_ids),
        session_id or "-",
    )
    return dispatched


async def find_prompts_with_competitor_urls(
    db: AsyncSession,
    brand_id: int,
    competitor_domain: str,
) -> list[dict[str, Any]]:
    """Analysed prompts of a brand citing URLs on a competitor domain."""
    domain = competitor_domain.strip().lower()
    if not domain:
        return []
    pattern = f"%{domain}%"
    matches_domain = or_(BrandPromptResource.domain.ilike(pattern), BrandPromptResource.url.ilike(pattern))

    result = await db.execute(
        select(BrandPrompt)
        .where(
            BrandPrompt.brand_id == brand_id,
            BrandPrompt.analysis_completed_at.is_not(None),
            BrandPrompt.resources.any(matches_domain),
        )
        .options(selectinload(BrandPrompt.resources))
        .order_by(BrandPrompt.analysis_completed_at.desc())
    )
    prompts = result.scalars().all()

    items: list[dict[str, Any]] = []
    for prompt in prompts:
        competitor_resources = [
            {
                "url": r.url,
                "type": r.type,
                "title": r.title,
                "description": r.description,
                "domain": r.domain,
            }
            for r in prompt.resources
            if domain in (r.domain or "").lower() or domain in r.url.lower()
        ]
        items.append(
            {
                "id": prompt.id,
                "prompt": prompt.prompt,
                "ai_response": prompt.ai_response,
                "sentiment": prompt.sentiment,
                "position": prompt.position,
                "visibility": prompt.visibility,
                "analysis_completed_at": prompt.analysis_completed_at,
                "competitor_resources": competitor_resources,
            }
        )
    return items


async def check_ai_provider(db: AsyncSession, provider_id: int) -> ProviderTestResult:
    """Run the diagnostic call against a stored provider."""
    provider = await db.get(AiProvider, provider_id)
    if provider is None:
        raise NotFoundError(f"AI provider {provider_id} not found")
    try:
        config = provider_config_from_model(provider)
    except ConfigurationError as e:
        logger.warning("Provider check failed for %s: %s", provider.name, e, extra={"provider": provider.name})
        return ProviderTestResult(
            success=False,
            provider=provider.name,
            message=f"AI model test failed: {e}",
            error=str(e),
        )
    return await check_provider(config)
