from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from brandscope.db.base import Base, JSONType


class AiProvider(Base):
    """A configured external LLM provider (managed by admins, read-only to the pipeline)."""

    __tablename__ = "ai_providers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, index=True)  # openai | anthropic | gemini | ollama ...
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=False)

    # Fernet-encrypted API key
    api_key: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    # {"model": "...", "temperature": 0.7, "max_tokens": 2000, "base_url": "..."}
    api_config: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
