"""
Activity schemas - entries returned by GET /locations/{id}/activity.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ActivityEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    location_id: str
    user_id: Optional[str] = None
    user_name: str
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    entity_name: Optional[str] = None

    # changes: {"field": {"old": ..., "new": ...}}
    changes: Optional[Dict[str, Dict[str, Any]]] = None
    auth_method: Optional[str] = None
    created_at: datetime


class ActivityPage(BaseModel):
    results: List[ActivityEntryOut]

    # count: total matching entries, ignoring limit/offset
    count: int
