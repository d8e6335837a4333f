"""
Action Validation - one grammar, two policies.

Both entry points parse raw JSON objects into typed actions with the same
per-type rules (parse_action). They differ only in what happens when an
object is bad:

    validate_command_result()    lenient: model output is untrusted free
                                 text, so bad actions are dropped and the
                                 rest are kept
    validate_batch_operations()  strict: API clients get a hard contract
                                 violation naming the operation index and
                                 field, and nothing runs

Referential checks use only the bin ids passed in (the snapshot taken for
this request); there is no database access here.
"""

import logging
from typing import Any, Iterable, List, Optional, Set

from pydantic import BaseModel, ValidationError

from app.ai.actions.registry import action_registry
from app.ai.schemas.actions import ACTION_MODELS, CommandResult

logger = logging.getLogger("openbin.ai.actions.validation")

DEFAULT_INTERPRETATION = "Could not parse command"


class ActionValidationError(Exception):
    """
    A batch operation violated the action grammar.

    Attributes:
        message: Full message, prefixed with "operations[i]: " when indexed
        index: Position of the offending operation, if any
        field: Offending field name, if known
    """

    def __init__(self, message: str, index: Optional[int] = None, field: Optional[str] = None):
        self.index = index
        self.field = field
        self.message = f"operations[{index}]: {message}" if index is not None else message
        super().__init__(self.message)


class ActionFieldError(ValueError):
    """Raised by parse_action; carries the offending field."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


def _describe_error(action_type: str, error: ValidationError) -> ActionFieldError:
    """Turn the first pydantic error into a short, field-specific message."""
    first = error.errors()[0]
    field = str(first["loc"][0]) if first.get("loc") else None

    if first["type"] == "missing":
        return ActionFieldError(f'{action_type} requires "{field}"', field)

    ctx_error = (first.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return ActionFieldError(f"{action_type} {ctx_error}", field)

    return ActionFieldError(f'{action_type}: invalid "{field}" ({first["msg"]})', field)


def parse_action(
    raw: Any,
    known_bin_ids: Set[str],
    allow_action_alias: bool = False,
) -> BaseModel:
    """
    Parse one raw JSON object into a typed action.

    Args:
        raw: Decoded JSON value for one action
        known_bin_ids: Bins visible to the caller (active and trashed)
        allow_action_alias: Accept "action" as the discriminator when "type"
            is absent (models sometimes use it)

    Raises:
        ActionFieldError: on the first rule the object breaks
    """
    if not isinstance(raw, dict):
        raise ActionFieldError("must be an object")

    action_type = raw.get("type")
    if not action_type and allow_action_alias:
        action_type = raw.get("action")

    definition = action_registry.get_action(action_type)
    if definition is None:
        raise ActionFieldError(f'unknown type "{action_type}"', "type")

    if definition.targets_bin:
        bin_id = raw.get("bin_id")
        if not isinstance(bin_id, str) or not bin_id.strip():
            raise ActionFieldError(f'{action_type} requires "bin_id"', "bin_id")
        if bin_id.strip() not in known_bin_ids:
            raise ActionFieldError(f'bin "{bin_id}" not found', "bin_id")

    payload = dict(raw)
    payload["type"] = action_type
    try:
        return ACTION_MODELS[action_type].model_validate(payload)
    except ValidationError as e:
        raise _describe_error(action_type, e)


def validate_command_result(raw: Any, known_bin_ids: Iterable[str]) -> CommandResult:
    """
    Lenient policy for model output.

    Never raises on bad content: unknown types, malformed fields and
    dangling bin references are dropped. The interpretation is always
    present so the user learns why fewer (or no) actions came back.
    """
    bin_ids = set(known_bin_ids)
    obj = raw if isinstance(raw, dict) else {}

    interpretation = obj.get("interpretation")
    if not isinstance(interpretation, str):
        interpretation = ""

    raw_actions = obj.get("actions")
    if not isinstance(raw_actions, list):
        return CommandResult(actions=[], interpretation=interpretation or DEFAULT_INTERPRETATION)

    actions: List[BaseModel] = []
    for i, raw_action in enumerate(raw_actions):
        try:
            actions.append(parse_action(raw_action, bin_ids, allow_action_alias=True))
        except ActionFieldError as e:
            logger.info(f"Dropped model action {i}: {e.message}")

    if not actions and not interpretation:
        interpretation = DEFAULT_INTERPRETATION

    return CommandResult(actions=actions, interpretation=interpretation)


def validate_batch_operations(
    operations: Any,
    known_bin_ids: Iterable[str],
    max_operations: int,
) -> List[BaseModel]:
    """
    Strict policy for the batch API.

    Raises:
        ActionValidationError: not a non-empty list, more than
            max_operations entries, or the first operation that breaks
            the grammar (message names its index and field)
    """
    if not isinstance(operations, list) or not operations:
        raise ActionValidationError("operations must be a non-empty array")

    if len(operations) > max_operations:
        raise ActionValidationError(f"operations array exceeds maximum of {max_operations}")

    bin_ids = set(known_bin_ids)
    actions: List[BaseModel] = []
    for i, op in enumerate(operations):
        try:
            actions.append(parse_action(op, bin_ids))
        except ActionFieldError as e:
            raise ActionValidationError(e.message, index=i, field=e.field)

    return actions
