"""
Query Prompts - answer questions about what is stored where.

Read-only: the model answers in prose and lists matching bins; nothing it
returns is executed.
"""

import json
from typing import Optional

from app.ai.context import InventoryContext


DEFAULT_QUERY_PROMPT = """You are an inventory search assistant. The user asks questions about what they have stored and where things are. Search through the provided inventory context and answer their question.

Rules:
- Answer in natural language, conversationally
- Reference specific bin names and areas when answering
- If items match partially, include them and note the partial match
- If nothing matches, say so clearly
- Always include the "matches" array with relevant bins, even if empty
- The "relevance" field should briefly explain why each bin matched (e.g., "contains batteries", "tagged as electronics")
- Sort matches by relevance (most relevant first)
- Trash bins are listed separately; mention them only when the user asks about deleted bins"""


QUERY_RESPONSE_FORMAT = """Respond with ONLY valid JSON, no markdown fences, no extra text. Format:
{"answer":"Your natural language answer here","matches":[{"bin_id":"ABC123","name":"Bin Name","area_name":"Area","items":["relevant items"],"tags":["relevant tags"],"relevance":"why this matched"}]}

IMPORTANT: The "answer" and "matches" fields are both REQUIRED. If no bins match, return an empty matches array."""


def build_query_system_prompt(custom_prompt: Optional[str] = None) -> str:
    return f"{custom_prompt or DEFAULT_QUERY_PROMPT}\n\n{QUERY_RESPONSE_FORMAT}"


def build_query_user_message(question: str, context: InventoryContext) -> str:
    return f"""Question: {question}

Inventory:
{json.dumps(context.to_prompt_dict())}"""
