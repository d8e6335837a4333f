"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Test database (SQLite in-memory for speed)
- Test client (FastAPI TestClient)
- Authentication helpers
- A location with a member and a few bins
"""

import pytest
from datetime import datetime, timezone
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.db.session import get_db
from app.models.area import Area
from app.models.bin import Bin, BinItem
from app.models.location import Location, LocationMember
from app.models.user import User
from app.core.security import hash_password, create_access_token


# ---------------------------------------------------------------------------
# TEST DATABASE SETUP
# ---------------------------------------------------------------------------
# SQLite in-memory; StaticPool keeps the same connection across operations

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ---------------------------------------------------------------------------
# DATABASE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Fresh schema per test function, dropped afterwards."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Test client whose get_db dependency yields the test session."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# USER FIXTURES
# ---------------------------------------------------------------------------

def make_user(db: Session, email: str, display_name: str | None = None) -> User:
    user = User(
        email=email,
        hashed_password=hash_password("testpassword"),
        display_name=display_name,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user(db: Session) -> User:
    """User "test@example.com" / "testpassword", display name "Test User"."""
    return make_user(db, "test@example.com", "Test User")


@pytest.fixture
def other_user(db: Session) -> User:
    """A second user who is not a member of any location."""
    return make_user(db, "other@example.com", "Other User")


@pytest.fixture
def test_user_token(test_user: User) -> str:
    return create_access_token(subject=str(test_user.id))


@pytest.fixture
def auth_headers(test_user_token: str) -> dict:
    return {"Authorization": f"Bearer {test_user_token}"}


@pytest.fixture
def other_auth_headers(other_user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(subject=str(other_user.id))}"}


# ---------------------------------------------------------------------------
# INVENTORY FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def location(db: Session, test_user: User) -> Location:
    """Location "Home" with test_user as admin member."""
    location = Location(name="Home", created_by=test_user.id, activity_retention_days=90)
    db.add(location)
    db.flush()
    db.add(LocationMember(location_id=location.id, user_id=test_user.id, role="admin"))
    db.commit()
    db.refresh(location)
    return location


@pytest.fixture
def garage_area(db: Session, location: Location, test_user: User) -> Area:
    area = Area(location_id=location.id, name="Garage", created_by=test_user.id)
    db.add(area)
    db.commit()
    db.refresh(area)
    return area


def make_bin(
    db: Session,
    location: Location,
    bin_id: str,
    name: str,
    items=(),
    tags=None,
    created_by: str | None = None,
    **fields,
) -> Bin:
    bin_ = Bin(
        id=bin_id,
        location_id=location.id,
        name=name,
        tags=list(tags or []),
        created_by=created_by,
        **fields,
    )
    bin_.items = [BinItem(name=item, position=i) for i, item in enumerate(items)]
    db.add(bin_)
    db.commit()
    db.refresh(bin_)
    return bin_


@pytest.fixture
def bin_factory(db: Session, location: Location):
    """make_bin bound to the test session and the "Home" location."""
    def factory(bin_id: str, name: str, **kwargs) -> Bin:
        return make_bin(db, kwargs.pop("location", location), bin_id, name, **kwargs)
    return factory


@pytest.fixture
def tools_bin(db: Session, location: Location, test_user: User) -> Bin:
    """Bin T1 "Tools" holding a Hammer."""
    return make_bin(db, location, "T1", "Tools", items=["Hammer"], tags=["hand tools"],
                    created_by=test_user.id)


@pytest.fixture
def garage_bin(db: Session, location: Location, test_user: User, garage_area: Area) -> Bin:
    """Bin G1 "Garage Shelf" in the Garage area."""
    return make_bin(db, location, "G1", "Garage Shelf", items=["Tape", "Rope"],
                    created_by=test_user.id, area_id=garage_area.id, notes="Top shelf")


@pytest.fixture
def trashed_bin(db: Session, location: Location, test_user: User) -> Bin:
    """Bin X1 "Old Cables", soft-deleted."""
    return make_bin(db, location, "X1", "Old Cables", items=["HDMI"], created_by=test_user.id,
                    deleted_at=datetime.now(timezone.utc))
