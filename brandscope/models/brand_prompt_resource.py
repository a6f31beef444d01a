from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from brandscope.analysis.types import MAX_URL_LENGTH
from brandscope.db.base import Base

DOMAIN_MAX_LENGTH = 255
TITLE_MAX_LENGTH = 500


class BrandPromptResource(Base):
    """A resource cited in the analysis of one brand prompt.

    Rows for a brand_prompt_id are always replaced as a whole set.
    """

    __tablename__ = "brand_prompt_resources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    brand_prompt_id: Mapped[int] = mapped_column(
        ForeignKey("brand_prompts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    url: Mapped[str] = mapped_column(String(MAX_URL_LENGTH), nullable=False)
    type: Mapped[str] = mapped_column(
        String(30), nullable=False, default="other"
    )  # competitor | industry_report | news | documentation | blog | research | social | marketplace | reviews | other
    domain: Mapped[str | None] = mapped_column(String(DOMAIN_MAX_LENGTH), nullable=True, index=True)
    title: Mapped[str | None] = mapped_column(String(TITLE_MAX_LENGTH), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_competitor_url: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    brand_prompt: Mapped["BrandPrompt"] = relationship("BrandPrompt", back_populates="resources")  # noqa: F821
