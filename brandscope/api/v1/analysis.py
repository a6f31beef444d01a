"""Brand prompt analysis endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from brandscope.db.postgres import get_db
from brandscope.gateway.types import sample_api_config
from brandscope.schemas.analysis import (
    AnalysisOutcomeResponse,
    AnalyzeRequest,
    BatchAnalyzeRequest,
    BatchAnalyzeResponse,
    PromptWithCompetitorResources,
    ProviderTestResponse,
)
from brandscope.services.analysis_service import (
    analyze_brand_prompt,
    batch_analyze_prompts,
    check_ai_provider,
    find_prompts_with_competitor_urls,
)

router = APIRouter(tags=["analysis"])


# ── Brand prompts ────────────────────────────────────────────────


@router.post("/brand-prompts/batch-analyze", status_code=status.HTTP_202_ACCEPTED)
async def batch_analyze(
    body: BatchAnalyzeRequest,
    db: AsyncSession = Depends(get_db),
) -> BatchAnalyzeResponse:
    dispatched = await batch_analyze_prompts(db, body.brand_prompt_ids, session_id=body.session_id)
    return BatchAnalyzeResponse(dispatched=len(dispatched), brand_prompt_ids=dispatched)


@router.post("/brand-prompts/{brand_prompt_id}/analyze")
async def analyze_prompt(
    brand_prompt_id: int,
    body: AnalyzeRequest | None = None,
    db: AsyncSession = Depends(get_db),
) -> AnalysisOutcomeResponse:
    session_id = body.session_id if body else ""
    outcome = await analyze_brand_prompt(db, brand_prompt_id, session_id=session_id)
    return AnalysisOutcomeResponse.model_validate(outcome.to_dict())


# ── Brands ───────────────────────────────────────────────────────


@router.get("/brands/{brand_id}/competitor-resources")
async def competitor_resources(
    brand_id: int,
    domain: str = Query(min_length=1, max_length=255),
    db: AsyncSession = Depends(get_db),
) -> list[PromptWithCompetitorResources]:
    items = await find_prompts_with_competitor_urls(db, brand_id, domain)
    return [PromptWithCompetitorResources.model_validate(item) for item in items]


# ── AI providers ─────────────────────────────────────────────────


@router.post("/ai-providers/{provider_id}/test")
async def run_provider_check(
    provider_id: int,
    db: AsyncSession = Depends(get_db),
) -> ProviderTestResponse:
    result = await check_ai_provider(db, provider_id)
    return ProviderTestResponse.model_validate(result.to_dict())


@router.get("/ai-providers/sample-config/{provider}")
async def provider_sample_config(provider: str) -> dict[str, Any]:
    return sample_api_config(provider)
