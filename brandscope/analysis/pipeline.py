"""Analysis Pipeline: orchestrates one brand-prompt analysis.

    AnalysisRequest
        → build_analysis_prompt
        → select_provider + invoke_provider      (ConfigurationError / ProviderError propagate)
        → decompose_response
        → parse_analysis, extract_resources     (never raise)
        → replace_resources                      (failure → persistence_warning)
        → AnalysisOutcome
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from brandscope.analysis.decomposer import decompose_response
from brandscope.analysis.metrics_parser import parse_analysis
from brandscope.analysis.prompt_builder import build_analysis_prompt
from brandscope.analysis.resource_extractor import extract_resources
from brandscope.analysis.types import AnalysisOutcome, AnalysisRequest
from brandscope.core.exceptions import PersistenceError
from brandscope.core.metrics import PERSISTENCE_FAILURES, RESOURCES_EXTRACTED
from brandscope.gateway.selector import select_provider
from brandscope.gateway.types import ProviderConfig
from brandscope.gateway.vendor_adapters import invoke_provider
from brandscope.services.resource_store import replace_resources

logger = logging.getLogger(__name__)


async def analyze_request(
    request: AnalysisRequest,
    providers: Iterable[ProviderConfig],
    db: AsyncSession | None = None,
    preference: Sequence[str] | None = None,
) -> AnalysisOutcome:
    """Run the full pipeline for one request.

    Args:
        request: Brand, competitors and phrase to analyze.
        providers: Candidate provider configurations.
        db: Session used to persist the resource set; persistence is
            skipped when None.
        preference: Provider preference order (settings default when None).

    Raises:
        ConfigurationError: no usable provider or credential.
        ProviderError: the provider call failed or timed out.
    """
    log_ctx = {"brand_prompt_id": request.request_id, "session_id": request.session_id}

    config = select_provider(providers, preference)
    prompt = build_analysis_prompt(request.brand_name, request.competitor_names, request.phrase)

    logger.info(
        "Analyzing brand prompt %d with provider %s",
        request.request_id,
        config.name,
        extra={**log_ctx, "provider": config.name},
    )
    raw = await invoke_provider(config, prompt)

    decomposed = decompose_response(raw.text)
    analysis = parse_analysis(decomposed.analysis_segment)
    resources = extract_resources(
        decomposed.analysis_segment,
        decomposed.narrative,
        request.competitor_names,
    )
    for resource in resources:
        RESOURCES_EXTRACTED.labels(type=resource.type.value).inc()

    outcome = AnalysisOutcome(
        request_id=request.request_id,
        narrative=decomposed.narrative,
        analysis=analysis,
        resources=resources,
        provider=config.name,
        model=raw.model,
    )

    if db is not None:
        try:
            await replace_resources(db, request.request_id, resources)
        except PersistenceError as e:
            PERSISTENCE_FAILURES.inc()
            logger.warning(
                "Resources for brand prompt %d not persisted: %s",
                request.request_id,
                e,
                extra=log_ctx,
            )
            outcome.persistence_warning = str(e)

    logger.info(
        "Brand prompt %d analyzed: sentiment=%s position=%d visibility=%d resources=%d (competitor=%d)",
        request.request_id,
        analysis.sentiment.value,
        analysis.position,
        analysis.visibility,
        len(resources),
        outcome.competitor_resource_count,
        extra=log_ctx,
    )
    return outcome
