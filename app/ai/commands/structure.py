"""
Text Structurer - dictated or typed text -> list of item names.

Same provider client as the command and query paths. The answer is
validated leniently: non-string and blank entries are dropped and the list
is capped at MAX_ITEMS_PER_ACTION, so an odd answer yields fewer items
rather than an error.
"""

import logging
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from app.ai.prompts.structure_prompts import build_structure_system_prompt
from app.ai.providers.base import ProviderConfig
from app.ai.providers.client import call_provider
from app.ai.schemas.actions import clean_string_list
from app.core.config import settings

logger = logging.getLogger("openbin.ai.structure")


class StructureTextResult(BaseModel):
    items: List[str] = Field(default_factory=list)


def validate_items(raw: Any) -> StructureTextResult:
    obj = raw if isinstance(raw, dict) else {}
    items = clean_string_list(obj.get("items"))
    return StructureTextResult(items=items[: settings.MAX_ITEMS_PER_ACTION])


class TextStructurer:
    """
    Extracts item names from free text.

    Usage:
        result = await text_structurer.structure(
            config, "a hammer and um three screwdrivers", bin_name="Tools"
        )
        print(result.items)  # ["Hammer", "Screwdriver"]
    """

    async def structure(
        self,
        config: ProviderConfig,
        text: str,
        bin_name: Optional[str] = None,
        existing_items: Optional[List[str]] = None,
        custom_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        top_p: Optional[float] = None,
        timeout_ms: Optional[int] = None,
    ) -> StructureTextResult:
        result = await call_provider(
            config,
            build_structure_system_prompt(custom_prompt, bin_name, existing_items),
            text,
            temperature if temperature is not None else settings.AI_STRUCTURE_TEMPERATURE,
            max_tokens if max_tokens is not None else settings.AI_STRUCTURE_MAX_TOKENS,
            timeout_ms,
            validate_items,
            top_p=top_p,
        )
        logger.info(f"Structured text into {len(result.items)} item(s)")
        return result


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
text_structurer = TextStructurer()
