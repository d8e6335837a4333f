"""
Batch router - apply a list of structured operations to a location's bins.

Same grammar and executor as POST /ai/execute, without the model: the
operations are checked with the strict validator, so one malformed
operation rejects the whole request before anything runs.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.ai.actions.validation import ActionValidationError, validate_batch_operations
from app.ai.context import build_command_context
from app.core.config import settings
from app.db.session import get_db
from app.deps import get_current_user, require_location_member
from app.models.user import User
from app.schemas.batch import BatchRequest, BatchResponse
from app.services.command_executor import execute_actions

logger = logging.getLogger("openbin.routers.batch")

router = APIRouter(prefix="/batch", tags=["batch"])


@router.post("", response_model=BatchResponse)
def run_batch(
    payload: BatchRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Validate then execute 1..MAX_BATCH_OPERATIONS operations in order.

    Returns:
        {"results": [...one per operation...], "errors": ["<type>: <message>", ...]}

    Raises:
        422 VALIDATION_ERROR: bad operations array (nothing executed)
        403/404: not a member / unknown location
    """
    require_location_member(db, payload.location_id, current_user)

    # Bins the caller can see, trash included so restore_bin validates
    known_bin_ids = build_command_context(db, payload.location_id, current_user.id).known_bin_ids()

    try:
        actions = validate_batch_operations(
            payload.operations, known_bin_ids, settings.MAX_BATCH_OPERATIONS
        )
    except ActionValidationError as e:
        logger.info(f"Rejected batch for location {payload.location_id}: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": "VALIDATION_ERROR", "message": e.message},
        )

    result = execute_actions(
        db,
        actions,
        payload.location_id,
        current_user.id,
        current_user.username,
        auth_method="jwt",
    )
    return BatchResponse(results=result.executed, errors=result.errors)
