"""
Location models - a location is one physical place being catalogued
(a house, a garage, a storage unit). Bins, areas and activity entries all
hang off a location, and users reach them through membership.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.config import settings
from app.db.base import Base


class Location(Base):
    """ORM model for the 'locations' table."""

    __tablename__ = "locations"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # activity_retention_days: activity entries older than this are pruned
    # opportunistically after every activity write
    activity_retention_days: Mapped[int] = mapped_column(
        Integer, default=lambda: settings.DEFAULT_ACTIVITY_RETENTION_DAYS, nullable=False
    )

    created_by: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    members: Mapped[list["LocationMember"]] = relationship(
        "LocationMember", back_populates="location", cascade="all, delete-orphan"
    )


class LocationMember(Base):
    """
    ORM model for the 'location_members' table.

    Membership is what authorizes a user to run commands and batches
    against a location's bins.
    """

    __tablename__ = "location_members"
    __table_args__ = (UniqueConstraint("location_id", "user_id"),)

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    location_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # role: "admin" or "member"
    role: Mapped[str] = mapped_column(String(20), default="member", nullable=False)

    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    location: Mapped["Location"] = relationship("Location", back_populates="members")
    user: Mapped["User"] = relationship("User", back_populates="memberships")
