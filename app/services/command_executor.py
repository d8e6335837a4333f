"""
Command executor - applies validated actions to a location's bins.

Actions run strictly in order, one at a time: later actions may depend on
what earlier ones created (a new bin, a new area). Each action is its own
unit of work:

1. Look up and mutate the rows it touches
2. Commit
3. Hand its activity entries to the activity log (best-effort)

A failing action is rolled back and reported as {success: False, error}
and the sequence continues with the next one. The executor never aborts a
started sequence.

Usage:
======
```python
from app.services.command_executor import execute_actions

result = execute_actions(db, actions, location_id, user.id, user.username)
for r in result.executed:
    print(r.type, r.success, r.details)
```
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.ai.schemas.actions import (
    ActionResult,
    AddItemsAction,
    AddTagsAction,
    CreateBinAction,
    DeleteBinAction,
    ExecuteResult,
    ModifyItemAction,
    ModifyTagAction,
    RemoveItemsAction,
    RemoveTagsAction,
    RestoreBinAction,
    SetAreaAction,
    SetColorAction,
    SetIconAction,
    SetNotesAction,
    UpdateBinAction,
)
from app.core.config import settings
from app.models.area import Area
from app.models.bin import Bin, BinItem
from app.services.activity_log import compute_changes, log_activity
from app.services.short_code import generate_unique_bin_id

logger = logging.getLogger("openbin.executor")


class TooManyActionsError(ValueError):
    """The sequence is longer than MAX_BATCH_OPERATIONS; nothing was executed."""


class ActionExecutionError(Exception):
    """One action could not be applied (stale bin reference, item cap...)."""


# ---------------------------------------------------------------------------
# EXECUTION STATE
# ---------------------------------------------------------------------------

@dataclass
class PendingActivity:
    """An activity entry waiting for its action's commit."""
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    entity_name: Optional[str] = None
    changes: Optional[Dict[str, Dict[str, Any]]] = None


@dataclass
class ExecutionContext:
    """Who is acting, where. Shared by every action of one sequence."""
    db: Session
    location_id: str
    user_id: str
    user_name: str
    auth_method: Optional[str] = "jwt"


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# LOOKUP HELPERS
# ---------------------------------------------------------------------------

def _get_active_bin(ctx: ExecutionContext, bin_id: str, bin_name: str) -> Bin:
    bin_ = (
        ctx.db.query(Bin)
        .filter(Bin.id == bin_id, Bin.location_id == ctx.location_id, Bin.deleted_at.is_(None))
        .first()
    )
    if bin_ is None:
        raise ActionExecutionError(f"Bin not found: {bin_name or bin_id}")
    return bin_


def _get_trashed_bin(ctx: ExecutionContext, bin_id: str, bin_name: str) -> Bin:
    bin_ = (
        ctx.db.query(Bin)
        .filter(Bin.id == bin_id, Bin.location_id == ctx.location_id, Bin.deleted_at.is_not(None))
        .first()
    )
    if bin_ is None:
        raise ActionExecutionError(f"Bin not found in trash: {bin_name or bin_id}")
    return bin_


def _find_or_create_area(
    ctx: ExecutionContext,
    area_name: str,
    pending: List[PendingActivity],
) -> Area:
    """Case-insensitive lookup by name; a missing area is created and logged."""
    area = (
        ctx.db.query(Area)
        .filter(Area.location_id == ctx.location_id, func.lower(Area.name) == area_name.lower())
        .first()
    )
    if area is not None:
        return area

    area = Area(location_id=ctx.location_id, name=area_name, created_by=ctx.user_id)
    ctx.db.add(area)
    ctx.db.flush()
    pending.append(PendingActivity("create", "area", area.id, area_name))
    return area


def _get_area(ctx: ExecutionContext, area_id: str) -> Optional[Area]:
    """Area by id, only if it belongs to the acting location."""
    return (
        ctx.db.query(Area)
        .filter(Area.id == area_id, Area.location_id == ctx.location_id)
        .first()
    )


def _area_name(ctx: ExecutionContext, area_id: Optional[str]) -> Optional[str]:
    if not area_id:
        return None
    area = ctx.db.get(Area, area_id)
    return area.name if area is not None and area.name else None


def _check_item_count(items: List[str]) -> None:
    if len(items) > settings.MAX_ITEMS_PER_ACTION:
        raise ActionExecutionError(
            f"Too many items per action (max {settings.MAX_ITEMS_PER_ACTION})"
        )


def _label(action: Any, bin_: Bin) -> str:
    return action.bin_name or bin_.name


def _bin_update(action: Any, bin_: Bin, changes: Dict[str, Dict[str, Any]]) -> PendingActivity:
    return PendingActivity("update", "bin", bin_.id, _label(action, bin_), changes)


# ---------------------------------------------------------------------------
# ITEM HANDLERS
# ---------------------------------------------------------------------------

def _add_items(ctx, action: AddItemsAction, pending) -> ActionResult:
    _check_item_count(action.items)
    bin_ = _get_active_bin(ctx, action.bin_id, action.bin_name)

    max_pos = ctx.db.query(func.max(BinItem.position)).filter(BinItem.bin_id == bin_.id).scalar()
    next_pos = -1 if max_pos is None else max_pos
    for name in action.items:
        next_pos += 1
        bin_.items.append(BinItem(name=name, position=next_pos))
    bin_.updated_at = _now()

    label = _label(action, bin_)
    pending.append(_bin_update(action, bin_, {"items_added": {"old": None, "new": action.items}}))
    return ActionResult(
        type=action.type, success=True,
        details=f"Added {len(action.items)} item(s) to {label}",
        bin_id=bin_.id, bin_name=label,
    )


def _remove_items(ctx, action: RemoveItemsAction, pending) -> ActionResult:
    bin_ = _get_active_bin(ctx, action.bin_id, action.bin_name)

    lowered = {name.lower() for name in action.items}
    for item in list(bin_.items):
        if item.name.lower() in lowered:
            bin_.items.remove(item)
    bin_.updated_at = _now()

    label = _label(action, bin_)
    pending.append(_bin_update(action, bin_, {"items_removed": {"old": action.items, "new": None}}))
    return ActionResult(
        type=action.type, success=True,
        details=f"Removed {len(action.items)} item(s) from {label}",
        bin_id=bin_.id, bin_name=label,
    )


def _modify_item(ctx, action: ModifyItemAction, pending) -> ActionResult:
    bin_ = _get_active_bin(ctx, action.bin_id, action.bin_name)

    for item in bin_.items:
        if item.name.lower() == action.old_item.lower():
            item.name = action.new_item
    bin_.updated_at = _now()

    label = _label(action, bin_)
    pending.append(_bin_update(
        action, bin_, {"items_renamed": {"old": action.old_item, "new": action.new_item}}
    ))
    return ActionResult(
        type=action.type, success=True,
        details=f'Renamed "{action.old_item}" to "{action.new_item}" in {label}',
        bin_id=bin_.id, bin_name=label,
    )


# ---------------------------------------------------------------------------
# BIN LIFECYCLE HANDLERS
# ---------------------------------------------------------------------------

def _create_bin(ctx, action: CreateBinAction, pending) -> ActionResult:
    items = action.items or []
    _check_item_count(items)

    area_id = None
    if action.area_name:
        area_id = _find_or_create_area(ctx, action.area_name, pending).id

    bin_ = Bin(
        id=generate_unique_bin_id(ctx.db),
        location_id=ctx.location_id,
        name=action.name,
        area_id=area_id,
        notes=action.notes or "",
        tags=list(action.tags or []),
        icon=action.icon or "",
        color=action.color or "",
        card_style=action.card_style or "",
        created_by=ctx.user_id,
    )
    bin_.items = [BinItem(name=name, position=i) for i, name in enumerate(items)]
    ctx.db.add(bin_)

    pending.append(PendingActivity("create", "bin", bin_.id, action.name))
    return ActionResult(
        type=action.type, success=True,
        details=f'Created bin "{action.name}"',
        bin_id=bin_.id, bin_name=action.name,
    )


def _delete_bin(ctx, action: DeleteBinAction, pending) -> ActionResult:
    bin_ = _get_active_bin(ctx, action.bin_id, action.bin_name)
    bin_.deleted_at = _now()

    label = _label(action, bin_)
    pending.append(PendingActivity("delete", "bin", bin_.id, label))
    return ActionResult(
        type=action.type, success=True,
        details=f'Deleted bin "{label}"',
        bin_id=bin_.id, bin_name=label,
    )


def _restore_bin(ctx, action: RestoreBinAction, pending) -> ActionResult:
    bin_ = _get_trashed_bin(ctx, action.bin_id, action.bin_name)
    bin_.deleted_at = None
    bin_.updated_at = _now()

    label = _label(action, bin_)
    pending.append(PendingActivity("restore", "bin", bin_.id, label))
    return ActionResult(
        type=action.type, success=True,
        details=f'Restored bin "{label}" from trash',
        bin_id=bin_.id, bin_name=label,
    )


# ---------------------------------------------------------------------------
# TAG HANDLERS
# ---------------------------------------------------------------------------

def _set_tags(
    ctx, action, pending, transform: Callable[[List[str]], List[str]], details: str
) -> ActionResult:
    bin_ = _get_active_bin(ctx, action.bin_id, action.bin_name)
    current = list(bin_.tags or [])
    tags = transform(current)
    bin_.tags = tags
    bin_.updated_at = _now()

    label = _label(action, bin_)
    pending.append(_bin_update(action, bin_, {"tags": {"old": current, "new": tags}}))
    return ActionResult(
        type=action.type, success=True,
        details=details.format(bin=label),
        bin_id=bin_.id, bin_name=label,
    )


def _add_tags(ctx, action: AddTagsAction, pending) -> ActionResult:
    def merge(current: List[str]) -> List[str]:
        return list(dict.fromkeys(current + action.tags))

    return _set_tags(
        ctx, action, pending, merge,
        f"Added tags [{', '.join(action.tags)}] to {{bin}}",
    )


def _remove_tags(ctx, action: RemoveTagsAction, pending) -> ActionResult:
    remove = {t.lower() for t in action.tags}

    def filtered(current: List[str]) -> List[str]:
        return [t for t in current if t.lower() not in remove]

    return _set_tags(
        ctx, action, pending, filtered,
        f"Removed tags [{', '.join(action.tags)}] from {{bin}}",
    )


def _modify_tag(ctx, action: ModifyTagAction, pending) -> ActionResult:
    old_tag = action.old_tag.lower()

    def renamed(current: List[str]) -> List[str]:
        return [action.new_tag if t.lower() == old_tag else t for t in current]

    return _set_tags(
        ctx, action, pending, renamed,
        f'Renamed tag "{action.old_tag}" to "{action.new_tag}" in {{bin}}',
    )


# ---------------------------------------------------------------------------
# ATTRIBUTE HANDLERS
# ---------------------------------------------------------------------------

def _set_area(ctx, action: SetAreaAction, pending) -> ActionResult:
    bin_ = _get_active_bin(ctx, action.bin_id, action.bin_name)
    old_area = _area_name(ctx, bin_.area_id)

    area_id = None
    if action.area_id:
        area = _get_area(ctx, action.area_id)
        area_id = area.id if area is not None else None
    if area_id is None and action.area_name:
        area_id = _find_or_create_area(ctx, action.area_name, pending).id
    if area_id is None and action.area_id:
        raise ActionExecutionError(f"Area not found: {action.area_id}")
    bin_.area_id = area_id
    bin_.updated_at = _now()

    label = _label(action, bin_)
    pending.append(_bin_update(
        action, bin_, {"area": {"old": old_area, "new": action.area_name or None}}
    ))
    return ActionResult(
        type=action.type, success=True,
        details=f'Set area of {label} to "{action.area_name}"',
        bin_id=bin_.id, bin_name=label,
    )


def _set_notes(ctx, action: SetNotesAction, pending) -> ActionResult:
    bin_ = _get_active_bin(ctx, action.bin_id, action.bin_name)
    old_notes = bin_.notes or ""

    if action.mode == "append":
        new_notes = f"{old_notes}\n{action.notes}" if old_notes else action.notes
    elif action.mode == "clear":
        new_notes = ""
    else:
        new_notes = action.notes
    bin_.notes = new_notes
    bin_.updated_at = _now()

    label = _label(action, bin_)
    pending.append(_bin_update(action, bin_, {"notes": {"old": old_notes, "new": new_notes}}))
    verb = "Cleared" if action.mode == "clear" else "Updated"
    return ActionResult(
        type=action.type, success=True,
        details=f"{verb} notes on {label}",
        bin_id=bin_.id, bin_name=label,
    )


def _set_attribute(ctx, action, pending, field: str) -> ActionResult:
    bin_ = _get_active_bin(ctx, action.bin_id, action.bin_name)
    old_value = getattr(bin_, field)
    new_value = getattr(action, field)
    setattr(bin_, field, new_value)
    bin_.updated_at = _now()

    label = _label(action, bin_)
    pending.append(_bin_update(action, bin_, {field: {"old": old_value, "new": new_value}}))
    return ActionResult(
        type=action.type, success=True,
        details=f"Set {field} of {label} to {new_value}",
        bin_id=bin_.id, bin_name=label,
    )


def _set_icon(ctx, action: SetIconAction, pending) -> ActionResult:
    return _set_attribute(ctx, action, pending, "icon")


def _set_color(ctx, action: SetColorAction, pending) -> ActionResult:
    return _set_attribute(ctx, action, pending, "color")


UPDATABLE_FIELDS = ("name", "notes", "tags", "icon", "color", "card_style", "visibility")


def _update_bin(ctx, action: UpdateBinAction, pending) -> ActionResult:
    bin_ = _get_active_bin(ctx, action.bin_id, action.bin_name)

    old = {field: getattr(bin_, field) for field in UPDATABLE_FIELDS}
    new = {field: getattr(action, field) for field in UPDATABLE_FIELDS}
    changes = compute_changes(old, new, UPDATABLE_FIELDS) or {}
    for field, change in changes.items():
        setattr(bin_, field, change["new"])

    if action.area_name is not None:
        area_id = None
        if action.area_name:
            area_id = _find_or_create_area(ctx, action.area_name, pending).id
        if area_id != bin_.area_id:
            changes["area"] = {"old": _area_name(ctx, bin_.area_id), "new": action.area_name or None}
            bin_.area_id = area_id

    label = action.bin_name or old["name"]
    if changes:
        bin_.updated_at = _now()
        pending.append(PendingActivity("update", "bin", bin_.id, action.name or label, changes))
        details = f"Updated {label}: {', '.join(changes)}"
    else:
        details = f"No changes to {label}"

    return ActionResult(
        type=action.type, success=True, details=details,
        bin_id=bin_.id, bin_name=label,
    )


# ---------------------------------------------------------------------------
# DISPATCH TABLE
# ---------------------------------------------------------------------------

Handler = Callable[[ExecutionContext, Any, List[PendingActivity]], ActionResult]

HANDLERS: Dict[str, Handler] = {
    "add_items": _add_items,
    "remove_items": _remove_items,
    "modify_item": _modify_item,
    "create_bin": _create_bin,
    "delete_bin": _delete_bin,
    "restore_bin": _restore_bin,
    "add_tags": _add_tags,
    "remove_tags": _remove_tags,
    "modify_tag": _modify_tag,
    "set_area": _set_area,
    "set_notes": _set_notes,
    "set_icon": _set_icon,
    "set_color": _set_color,
    "update_bin": _update_bin,
}


def _run_one(ctx: ExecutionContext, action: Any) -> Tuple[ActionResult, List[PendingActivity]]:
    handler = HANDLERS.get(action.type)
    if handler is None:
        raise ActionExecutionError(f"Unsupported action type: {action.type}")

    pending: List[PendingActivity] = []
    result = handler(ctx, action, pending)
    ctx.db.commit()
    return result, pending


def execute_actions(
    db: Session,
    actions: List[Any],
    location_id: str,
    user_id: str,
    user_name: str,
    auth_method: Optional[str] = "jwt",
) -> ExecuteResult:
    """
    Apply actions in order, reporting one ActionResult per action.

    Args:
        db: Session; each successful action is committed on it
        actions: Validated action models (any mix of the 14 types)
        location_id: Location every bin must belong to
        user_id, user_name: Actor recorded in the activity log
        auth_method: "jwt" or "api_key", recorded in the activity log

    Raises:
        TooManyActionsError: more than MAX_BATCH_OPERATIONS actions
            (raised before anything is applied)
    """
    max_actions = settings.MAX_BATCH_OPERATIONS
    if len(actions) > max_actions:
        raise TooManyActionsError(f"Too many actions ({len(actions)}). Maximum is {max_actions}.")

    ctx = ExecutionContext(db, location_id, user_id, user_name, auth_method)
    result = ExecuteResult()

    for action in actions:
        try:
            action_result, pending = _run_one(ctx, action)
        except Exception as e:
            db.rollback()
            message = str(e) or "Unknown error"
            if not isinstance(e, ActionExecutionError):
                logger.exception(f"Action {action.type} failed in location {location_id}")
            result.errors.append(f"{action.type}: {message}")
            result.executed.append(ActionResult(
                type=action.type, success=False, details=message, error=message,
            ))
            continue

        result.executed.append(action_result)
        for activity in pending:
            log_activity(
                db,
                location_id=location_id,
                user_id=user_id,
                user_name=user_name,
                action=activity.action,
                entity_type=activity.entity_type,
                entity_id=activity.entity_id,
                entity_name=activity.entity_name,
                changes=activity.changes,
                auth_method=auth_method,
            )

    succeeded = sum(1 for r in result.executed if r.success)
    logger.info(f"Executed {succeeded}/{len(actions)} action(s) in location {location_id}")
    return result
