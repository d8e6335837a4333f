"""AI Schemas package - typed inventory actions and execution results."""

from app.ai.schemas.actions import (
    ACTION_MODELS,
    Action,
    ActionResult,
    CommandResult,
    ExecuteResult,
)

__all__ = [
    "ACTION_MODELS",
    "Action",
    "ActionResult",
    "CommandResult",
    "ExecuteResult",
]
