"""
Declarative base for all ORM models.

Every model module inherits from Base so that Base.metadata knows about
all tables (used by Alembic autogenerate and by the test fixtures).
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 declarative base class."""
    pass


# Import models so their tables register on Base.metadata
from app.models import user, location, area, bin, activity_log, ai_settings  # noqa: E402,F401
