"""
Activity log model - the per-location audit trail.

One row per mutating action. Rapid item add/remove bursts on the same bin
are merged into an existing row instead of inserting a new one, see
app.services.activity_log.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class ActivityLogEntry(Base):
    """ORM model for the 'activity_log' table."""

    __tablename__ = "activity_log"
    __table_args__ = (
        Index("ix_activity_log_location_created", "location_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    location_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False
    )

    # user_id is kept nullable so history survives user deletion;
    # user_name is the name at the time of the action
    user_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    user_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)

    # action: create | update | delete | restore
    action: Mapped[str] = mapped_column(String(50), nullable=False)

    # entity_type: bin | area
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    entity_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # changes: {"field": {"old": ..., "new": ...}}
    changes: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    # auth_method: "jwt" or "api_key"
    auth_method: Mapped[str | None] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "location_id": self.location_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "entity_name": self.entity_name,
            "changes": self.changes,
            "auth_method": self.auth_method,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
