"""Replace-set persistence of extracted resources.

All rows of a brand prompt are deleted and the new set inserted in one
transaction, so readers only ever see the previous set or the new one.
"""

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from brandscope.analysis.types import ExtractedResource
from brandscope.core.exceptions import PersistenceError
from brandscope.models.brand_prompt_resource import DOMAIN_MAX_LENGTH, TITLE_MAX_LENGTH, BrandPromptResource

logger = logging.getLogger(__name__)


def _to_row(request_id: int, resource: ExtractedResource, now: datetime) -> BrandPromptResource:
    # Over-long model output is cut to the column width, never rejected
    return BrandPromptResource(
        brand_prompt_id=request_id,
        url=resource.url,
        type=resource.type.value,
        domain=resource.domain[:DOMAIN_MAX_LENGTH] or None,
        title=resource.title[:TITLE_MAX_LENGTH] or None,
        description=resource.description or None,
        is_competitor_url=resource.is_competitor,
        created_at=now,
        updated_at=now,
    )


async def replace_resources(
    db: AsyncSession,
    request_id: int,
    resources: Sequence[ExtractedResource],
) -> int:
    """Replace the stored resource set of ``request_id`` with ``resources``.

    Returns the number of rows written.

    Raises:
        PersistenceError: the transaction failed and was rolled back.
    """
    now = datetime.now(timezone.utc)
    try:
        await db.execute(delete(BrandPromptResource).where(BrandPromptResource.brand_prompt_id == request_id))
        db.add_all([_to_row(request_id, r, now) for r in resources])
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            "Failed to save resources for brand prompt %d: %s",
            request_id,
            e,
            extra={"brand_prompt_id": request_id},
        )
        raise PersistenceError(f"Failed to save resources: {e}", request_id=request_id) from e

    competitor_count = sum(1 for r in resources if r.is_competitor)
    logger.info(
        "Saved %d resources for brand prompt %d (%d competitor URLs)",
        len(resources),
        request_id,
        competitor_count,
        extra={"brand_prompt_id": request_id},
    )
    return len(resources)
