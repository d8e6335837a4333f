"""
Bin models - a bin is one physical storage container, identified by the
short code printed on its QR label. Its contents are an ordered list of
BinItem rows; tags live inline as a JSON list.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, ForeignKey, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Bin(Base):
    """
    ORM model for the 'bins' table.

    Deleting a bin only sets deleted_at (the bin moves to the trash);
    restore_bin clears it again.
    """

    __tablename__ = "bins"

    # ---------------------------------------------------------------------------
    # IDENTITY
    # ---------------------------------------------------------------------------
    # id: 6-character short code (see app.services.short_code), doubles as the
    # QR label payload
    id: Mapped[str] = mapped_column(String(8), primary_key=True)

    location_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # ---------------------------------------------------------------------------
    # DESCRIPTIVE FIELDS
    # ---------------------------------------------------------------------------
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    area_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("areas.id", ondelete="SET NULL"), nullable=True
    )
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)

    # tags: JSON list of strings, order preserved
    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # icon: PascalCase icon name, color: palette key (empty string = default)
    icon: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    color: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    card_style: Mapped[str] = mapped_column(String(500), default="", nullable=False)

    # visibility: "location" (all members) or "private" (creator only)
    visibility: Mapped[str] = mapped_column(String(20), default="location", nullable=False)

    # ---------------------------------------------------------------------------
    # OWNERSHIP & LIFECYCLE
    # ---------------------------------------------------------------------------
    created_by: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    items: Mapped[list["BinItem"]] = relationship(
        "BinItem",
        back_populates="bin",
        order_by="BinItem.position",
        cascade="all, delete-orphan",
    )

    @property
    def item_names(self) -> list[str]:
        return [item.name for item in self.items]


class BinItem(Base):
    """ORM model for the 'bin_items' table (one row per item, ordered by position)."""

    __tablename__ = "bin_items"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    bin_id: Mapped[str] = mapped_column(
        String(8), ForeignKey("bins.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    bin: Mapped["Bin"] = relationship("Bin", back_populates="items")
