"""
Activity log service - best-effort audit trail for inventory mutations.

log_activity() is called after a mutation has been committed. It:
1. Merges the entry into a recent matching one when both only carry
   items_added/items_removed changes (bursts of small item edits collapse
   into one row), otherwise inserts a new row
2. Prunes the location's entries older than its activity_retention_days

Neither step ever raises to the caller. Failures are logged and rolled
back on the session so the caller's next statement starts clean.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.activity_log import ActivityLogEntry
from app.models.location import Location

logger = logging.getLogger("openbin.activity")

# Change keys that may be merged into an earlier entry
MERGEABLE_KEYS = frozenset({"items_added", "items_removed"})

MAX_PAGE_SIZE = 100

Changes = Dict[str, Dict[str, Any]]


def _only_mergeable(changes: Optional[Changes]) -> bool:
    return bool(changes) and set(changes).issubset(MERGEABLE_KEYS)


def _union(first: Optional[List[Any]], second: Optional[List[Any]]) -> List[Any]:
    """Order-preserving union: first's entries, then second's new ones."""
    result = list(first or [])
    for value in second or []:
        if value not in result:
            result.append(value)
    return result


def merge_changes(existing: Changes, incoming: Changes) -> Changes:
    """
    Fold incoming item changes into an existing changes map.

    items_added lists live under "new", items_removed lists under "old".
    """
    merged = {key: dict(value) for key, value in existing.items()}
    for key, change in incoming.items():
        side = "new" if key == "items_added" else "old"
        if key in merged:
            merged[key][side] = _union(merged[key].get(side), change.get(side))
        else:
            merged[key] = dict(change)
    return merged


def _column_equals(column, value):
    return column.is_(None) if value is None else column == value


def _find_merge_target(
    db: Session,
    location_id: str,
    user_id: Optional[str],
    action: str,
    entity_type: str,
    entity_id: Optional[str],
    auth_method: Optional[str],
    now: datetime,
) -> Optional[ActivityLogEntry]:
    cutoff = now - timedelta(seconds=settings.ACTIVITY_MERGE_WINDOW_SECONDS)
    candidates = (
        db.query(ActivityLogEntry)
        .filter(
            ActivityLogEntry.location_id == location_id,
            _column_equals(ActivityLogEntry.user_id, user_id),
            ActivityLogEntry.action == action,
            ActivityLogEntry.entity_type == entity_type,
            _column_equals(ActivityLogEntry.entity_id, entity_id),
            _column_equals(ActivityLogEntry.auth_method, auth_method),
            ActivityLogEntry.created_at >= cutoff,
        )
        .order_by(ActivityLogEntry.created_at.desc())
        .all()
    )
    for candidate in candidates:
        if _only_mergeable(candidate.changes):
            return candidate
    return None


def log_activity(
    db: Session,
    location_id: str,
    user_id: Optional[str],
    user_name: str,
    action: str,
    entity_type: str,
    entity_id: Optional[str] = None,
    entity_name: Optional[str] = None,
    changes: Optional[Changes] = None,
    auth_method: Optional[str] = None,
) -> None:
    """
    Record one activity entry (fire-and-forget).

    Args:
        db: Session; the entry is committed on it
        location_id: Owning location (also scopes the retention sweep)
        user_id, user_name: Actor; user_name is stored as given
        action: create | update | delete | restore
        entity_type: bin | area
        entity_id, entity_name: The affected entity
        changes: {"field": {"old": ..., "new": ...}}
        auth_method: "jwt" or "api_key"
    """
    now = datetime.now(timezone.utc)
    try:
        target = None
        if _only_mergeable(changes):
            target = _find_merge_target(
                db, location_id, user_id, action, entity_type, entity_id, auth_method, now
            )

        if target is not None:
            # Reassign (not mutate) so the JSON column is flagged dirty
            target.changes = merge_changes(target.changes, changes)
            target.created_at = now
            if entity_name:
                target.entity_name = entity_name
        else:
            db.add(ActivityLogEntry(
                location_id=location_id,
                user_id=user_id,
                user_name=user_name,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                entity_name=entity_name,
                changes=changes,
                auth_method=auth_method,
                created_at=now,
            ))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(
            f"Failed to log activity {action} {entity_type}:{entity_id} "
            f"changes={json.dumps(changes, default=str)[:200]}"
        )
        return

    prune_activity(db, location_id)


def prune_activity(db: Session, location_id: str) -> int:
    """
    Delete a location's entries older than its retention setting.

    Best-effort: returns the number of rows deleted, 0 on failure.
    """
    try:
        location = db.get(Location, location_id)
        if location is None:
            return 0
        cutoff = datetime.now(timezone.utc) - timedelta(days=location.activity_retention_days)
        deleted = (
            db.query(ActivityLogEntry)
            .filter(
                ActivityLogEntry.location_id == location_id,
                ActivityLogEntry.created_at < cutoff,
            )
            .delete(synchronize_session=False)
        )
        db.commit()
        if deleted:
            logger.info(f"Pruned {deleted} activity entries for location {location_id}")
        return deleted
    except Exception:
        db.rollback()
        logger.warning(f"Activity prune failed for location {location_id}", exc_info=True)
        return 0


def compute_changes(
    old: Dict[str, Any],
    new: Dict[str, Any],
    fields: Iterable[str],
) -> Optional[Changes]:
    """
    Diff two field maps into a changes dict.

    Fields missing from (or None in) `new` are skipped. Values are compared
    by their JSON form, so list order matters. Returns None when nothing
    changed.
    """
    changes: Changes = {}
    for field in fields:
        new_value = new.get(field)
        if new_value is None:
            continue
        old_value = old.get(field)
        if json.dumps(old_value, sort_keys=True, default=str) != json.dumps(new_value, sort_keys=True, default=str):
            changes[field] = {"old": old_value, "new": new_value}
    return changes or None


def list_activity(
    db: Session,
    location_id: str,
    limit: int = 50,
    offset: int = 0,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
) -> Tuple[List[ActivityLogEntry], int]:
    """
    Page through a location's activity, newest first.

    Returns:
        (entries, total) where total ignores limit/offset
    """
    query = db.query(ActivityLogEntry).filter(ActivityLogEntry.location_id == location_id)
    if entity_type:
        query = query.filter(ActivityLogEntry.entity_type == entity_type)
    if entity_id:
        query = query.filter(ActivityLogEntry.entity_id == entity_id)

    total = query.count()
    entries = (
        query.order_by(ActivityLogEntry.created_at.desc())
        .offset(max(offset, 0))
        .limit(min(max(limit, 1), MAX_PAGE_SIZE))
        .all()
    )
    return entries, total
