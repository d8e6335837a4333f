"""
Structure Prompts - turn dictated or typed text into a clean item list.

The user turn is the raw text; bin name and existing items, when known,
are appended to the system prompt so the model skips what is already there.
"""

import json
from typing import List, Optional


DEFAULT_STRUCTURE_PROMPT = """You are an inventory item extractor. The user will dictate or type a description of items in a storage bin. Your job is to parse this into a clean, structured list of individual items.

Rules:
- Each entry should be one distinct item type
- List each item once without quantities
- Normalize spoken numbers: "three pairs of socks" -> "Socks"
- Be specific: "Phillips screwdriver" not just "screwdriver"
- Capitalize the first letter of each item
- Remove filler words (um, uh, like, basically, etc.)
- Remove conversational phrases ("I think there's", "and also", "let me see")
- Deduplicate items: if the same item is mentioned multiple times, list it once
- Order from first mentioned to last mentioned
- Do NOT include the bin or container itself"""


STRUCTURE_RESPONSE_FORMAT = """Respond with ONLY valid JSON, no markdown fences, no extra text. Return an object with a single "items" field containing an array of strings. Example:
{"items":["Winter jacket","Socks","Old t-shirts","Scarf","Wool gloves"]}"""


def build_structure_system_prompt(
    custom_prompt: Optional[str] = None,
    bin_name: Optional[str] = None,
    existing_items: Optional[List[str]] = None,
) -> str:
    prompt = f"{custom_prompt or DEFAULT_STRUCTURE_PROMPT}\n\n{STRUCTURE_RESPONSE_FORMAT}"

    if bin_name:
        prompt += (
            f'\n\nBin name: "{bin_name}". Use this for context about what type '
            "of items to expect."
        )

    if existing_items:
        prompt += (
            f"\n\nExisting items already in this bin: {json.dumps(existing_items)}. "
            "Do NOT include these in your response; only return NEW items from the dictation."
        )

    return prompt
