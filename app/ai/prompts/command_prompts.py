"""
Command Prompts - turn a natural-language inventory command into actions.

The system prompt has two parts:
1. A rule preamble (DEFAULT_COMMAND_PROMPT, or the user's own override)
2. The action schema, generated from the action registry, plus the
   available colors/icons and the response format. This part is always
   appended so an override can never change the grammar.

The user message carries the command and a JSON snapshot of the location.
"""

import json
from typing import Optional

from app.ai.actions.registry import action_registry
from app.ai.context import CommandContext


DEFAULT_COMMAND_PROMPT = """You are an inventory management assistant. The user will give you a natural language command about their storage bins. Parse it into one or more structured actions.

Rules:
- Use EXACT bin_id values from the provided inventory context. Never invent bin IDs.
- For item removal, use the exact item string from the bin's items list when possible.
- Fuzzy match bin names: "garden bin" should match a bin named "Garden Tools" or "Garden".
- Compound commands: "move X from A to B" = remove_items from A + add_items to B.
- "Rename item X to Y in bin Z" = modify_item with old_item=X, new_item=Y.
- For set_area, use the existing area_id if the area exists. Set area_id to null if a new area needs to be created.
- For set_color, use one of the available color keys.
- For set_icon, use one of the available icon names (PascalCase).
- For create_bin, only include fields that the user explicitly mentioned.
- For restore_bin, use bin IDs from the trash_bins list (not the bins list). Trash bins can ONLY be used with restore_bin.
- Capitalize item names properly.
- If the command is ambiguous or references a bin that doesn't exist, return an empty actions array with an interpretation explaining the issue."""


RESPONSE_FORMAT = """IMPORTANT: Each action object MUST have a "type" field as a top-level property. All other fields are also top-level properties of the action object (NOT nested). The "interpretation" field is REQUIRED and must always be present.

Respond with ONLY valid JSON, no markdown fences, no extra text. Example response format:
{"actions":[{"type":"remove_items","bin_id":"abc","bin_name":"Tools","items":["Hammer"]},{"type":"add_items","bin_id":"def","bin_name":"Garage","items":["Hammer"]}],"interpretation":"Move hammer from Tools to Garage"}"""


def build_command_system_prompt(context: CommandContext, custom_prompt: Optional[str] = None) -> str:
    """
    Build the system prompt for command parsing.

    Args:
        context: Snapshot providing the color and icon vocabularies
        custom_prompt: Replaces the rule preamble when non-empty

    Returns:
        Preamble + action schema + vocabularies + response format
    """
    base_prompt = custom_prompt or DEFAULT_COMMAND_PROMPT
    action_lines = "\n".join(action_registry.describe_actions())

    return f"""{base_prompt}

Available action types:
{action_lines}

Available colors: {', '.join(context.available_colors)}
Available icons: {', '.join(context.available_icons)}

{RESPONSE_FORMAT}"""


def build_command_user_message(text: str, context: CommandContext) -> str:
    return f"""Command: {text}

Current inventory:
{json.dumps(context.to_prompt_dict())}"""
