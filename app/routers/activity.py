"""
Activity router - read a location's audit trail.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user, require_location_member
from app.models.user import User
from app.schemas.activity import ActivityEntryOut, ActivityPage
from app.services.activity_log import MAX_PAGE_SIZE, list_activity

router = APIRouter(prefix="/locations", tags=["activity"])


@router.get("/{location_id}/activity", response_model=ActivityPage)
def read_activity(
    location_id: str,
    limit: int = Query(50, ge=1),
    offset: int = Query(0, ge=0),
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Newest-first page of activity entries.

    limit above MAX_PAGE_SIZE is clamped rather than rejected.
    """
    require_location_member(db, location_id, current_user)
    entries, total = list_activity(
        db,
        location_id,
        limit=min(limit, MAX_PAGE_SIZE),
        offset=offset,
        entity_type=entity_type,
        entity_id=entity_id,
    )
    return ActivityPage(
        results=[ActivityEntryOut.model_validate(e) for e in entries],
        count=total,
    )
