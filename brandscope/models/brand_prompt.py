from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from brandscope.db.base import Base, JSONType


class BrandPrompt(Base):
    """A phrase to ask about a brand; holds the latest analysis result."""

    __tablename__ = "brand_prompts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    brand_id: Mapped[int] = mapped_column(ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True)
    prompt: Mapped[str] = mapped_column(String(2000), nullable=False)

    # Latest analysis
    ai_response: Mapped[str | None] = mapped_column(Text, nullable=True)  # narrative (HTML)
    sentiment: Mapped[str | None] = mapped_column(String(20), nullable=True)  # positive | neutral | negative
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)  # 0-100 (%)
    visibility: Mapped[int | None] = mapped_column(Integer, nullable=True)
    competitor_mentions: Mapped[dict | None] = mapped_column(JSONType, nullable=True)  # {"Widgetco": 2}
    ai_provider: Mapped[str | None] = mapped_column(String(50), nullable=True)
    session_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    analysis_completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Relationships
    brand: Mapped["Brand"] = relationship("Brand", back_populates="prompts")  # noqa: F821
    resources: Mapped[list["BrandPromptResource"]] = relationship(  # noqa: F821
        "BrandPromptResource", back_populates="brand_prompt", cascade="all, delete-orphan"
    )
