"""
AI settings model - a user's chosen AI provider and tuning overrides.

One row per (user, provider); exactly one of a user's rows is active and
serves their AI requests. The API key is encrypted at rest when
AI_ENCRYPTION_KEY is set and is only ever returned masked.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, String, Text, DateTime, ForeignKey, Float, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class UserAISettings(Base):
    """ORM model for the 'user_ai_settings' table (one row per user and provider)."""

    __tablename__ = "user_ai_settings"
    __table_args__ = (
        UniqueConstraint("user_id", "provider", name="uq_user_ai_settings_user_provider"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )

    # ---------------------------------------------------------------------------
    # PROVIDER CONFIG
    # ---------------------------------------------------------------------------
    # provider: openai | anthropic | gemini | openai-compatible
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    # api_key: "enc:iv:tag:ciphertext" when encrypted, else the key as given
    api_key: Mapped[str] = mapped_column(Text, nullable=False)
    model: Mapped[str] = mapped_column(String(255), nullable=False)

    # endpoint_url: caller-supplied base URL; subject to the egress guard
    endpoint_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    # ---------------------------------------------------------------------------
    # PROMPT OVERRIDES
    # ---------------------------------------------------------------------------
    # Replace the default rule preamble; the action schema is always appended
    command_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    query_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    structure_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)

    # ---------------------------------------------------------------------------
    # SAMPLING OVERRIDES (None = task default from settings)
    # ---------------------------------------------------------------------------
    temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_tokens: Mapped[int | None] = mapped_column(Integer, nullable=True)
    top_p: Mapped[float | None] = mapped_column(Float, nullable=True)

    # request_timeout: seconds
    request_timeout: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # is_active: the row used for AI requests; PUT /ai/settings activates one
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
