"""
Prompts Module - prompt templates for the command, query and text structuring paths.

Prompt builders are pure functions of (request text, inventory snapshot,
optional custom preamble).
"""

from app.ai.prompts.command_prompts import (
    DEFAULT_COMMAND_PROMPT,
    build_command_system_prompt,
    build_command_user_message,
)
from app.ai.prompts.query_prompts import (
    DEFAULT_QUERY_PROMPT,
    build_query_system_prompt,
    build_query_user_message,
)
from app.ai.prompts.structure_prompts import (
    DEFAULT_STRUCTURE_PROMPT,
    build_structure_system_prompt,
)

__all__ = [
    "DEFAULT_COMMAND_PROMPT",
    "build_command_system_prompt",
    "build_command_user_message",
    "DEFAULT_QUERY_PROMPT",
    "build_query_system_prompt",
    "build_query_user_message",
    "DEFAULT_STRUCTURE_PROMPT",
    "build_structure_system_prompt",
]
