"""
Dependencies module - reusable FastAPI dependencies for route handlers.

get_current_user validates the bearer JWT; require_location_member checks
that the user may act on a location's bins.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_db
from app.models.location import Location, LocationMember
from app.models.user import User

# ---------------------------------------------------------------------------
# SECURITY SCHEME
# ---------------------------------------------------------------------------
# HTTPBearer: reads "Authorization: Bearer <token>", 401 if missing
security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Validate the JWT and return the authenticated user.

    Raises:
        401 Unauthorized: token missing, invalid, expired, or user not found
        403 Forbidden: user account is deactivated
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            credentials.credentials, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        user_id: str | None = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    user = db.get(User, user_id)
    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return user


def require_location_member(db: Session, location_id: str, user: User) -> LocationMember:
    """
    Return the caller's membership in a location.

    Called from route bodies, because the location id arrives in the JSON
    body for the AI and batch routes rather than in the path.

    Raises:
        404 Not Found: location does not exist
        403 Forbidden: user is not a member
    """
    location = db.get(Location, location_id)
    if location is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Location not found",
        )

    membership = (
        db.query(LocationMember)
        .filter(
            LocationMember.location_id == location_id,
            LocationMember.user_id == user.id,
        )
        .first()
    )
    if membership is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a member of this location",
        )
    return membership
