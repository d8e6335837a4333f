"""
AI Actions Module - action grammar and validation.

This module provides:
- ActionRegistry: the closed set of inventory action types
- validate_command_result: lenient policy for model output
- validate_batch_operations: strict policy for the batch API
"""

from app.ai.actions.registry import (
    action_registry,
    ActionRegistry,
    ActionDefinition,
    ActionCategory,
)

__all__ = [
    "action_registry",
    "ActionRegistry",
    "ActionDefinition",
    "ActionCategory",
]
