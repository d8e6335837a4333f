"""
Database session management - SQLAlchemy engine and session factory.
This module provides the database connection and session dependency for FastAPI.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings

# ---------------------------------------------------------------------------
# DATABASE ENGINE
# ---------------------------------------------------------------------------
# pool_pre_ping=True: check pooled connections with "SELECT 1" before use so
# a database restart does not surface as errors on the next request.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# ---------------------------------------------------------------------------
# SESSION FACTORY
# ---------------------------------------------------------------------------
# autocommit=False: callers decide when to commit. The batch executor relies
# on this to commit after every action instead of once per batch.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    FastAPI dependency that provides a database session.

    One session per request; always closed in the finally block, even if
    the route raises.

    Usage in a route:
        @router.post("/batch")
        def run_batch(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
