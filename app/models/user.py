"""
User model - represents a registered user of the inventory catalog.
Users belong to one or more locations through location_members.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class User(Base):
    """
    SQLAlchemy ORM model for the 'users' table.

    A user can:
    - Register and log in with email/password
    - Be a member of several locations (home, garage, storage unit...)
    - Issue AI commands and batch operations against those locations
    """

    __tablename__ = "users"

    # ---------------------------------------------------------------------------
    # PRIMARY KEY
    # ---------------------------------------------------------------------------
    # id: UUID stored as a 36-char string so it can be echoed verbatim into
    # activity log rows and JSON payloads
    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # ---------------------------------------------------------------------------
    # USER CREDENTIALS
    # ---------------------------------------------------------------------------
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)

    # hashed_password: bcrypt hash, never the plain text
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # ---------------------------------------------------------------------------
    # PROFILE INFORMATION
    # ---------------------------------------------------------------------------
    # display_name: shown in the activity feed ("Alex added 3 items")
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # is_active: deactivated users keep their history but cannot authenticate
    is_active: Mapped[bool] = mapped_column(default=True)

    # ---------------------------------------------------------------------------
    # TIMESTAMPS
    # ---------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ---------------------------------------------------------------------------
    # RELATIONSHIPS
    # ---------------------------------------------------------------------------
    memberships: Mapped[list["LocationMember"]] = relationship(
        "LocationMember", back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def username(self) -> str:
        """Name recorded in activity entries: display name, else the email's local part."""
        return self.display_name or self.email.split("@")[0]
