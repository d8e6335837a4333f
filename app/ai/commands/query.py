"""
Inventory Query - answers "where is X?" style questions.

Read-only counterpart of the command parser: the model returns an answer
and a list of matching bins. Matches that reference bins outside the
snapshot are dropped.
"""

import logging
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, Field

from app.ai.context import InventoryContext
from app.ai.prompts.query_prompts import build_query_system_prompt, build_query_user_message
from app.ai.providers.base import ProviderConfig
from app.ai.providers.client import call_provider
from app.ai.schemas.actions import clean_string_list
from app.core.config import settings

logger = logging.getLogger("openbin.ai.query")

DEFAULT_ANSWER = "Unable to process query"


class QueryMatch(BaseModel):
    bin_id: str
    name: str = ""
    area_name: str = ""
    items: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    relevance: str = ""


class QueryResult(BaseModel):
    answer: str
    matches: List[QueryMatch] = Field(default_factory=list)


def _str_or_empty(value: Any) -> str:
    return value if isinstance(value, str) else ""


def validate_query_result(raw: Any, valid_bin_ids: Iterable[str]) -> QueryResult:
    """Shape model output into a QueryResult, dropping unusable matches."""
    bin_ids = set(valid_bin_ids)
    obj = raw if isinstance(raw, dict) else {}

    answer = obj.get("answer")
    if not isinstance(answer, str):
        answer = DEFAULT_ANSWER

    matches: List[QueryMatch] = []
    raw_matches = obj.get("matches")
    if isinstance(raw_matches, list):
        for m in raw_matches:
            if not isinstance(m, dict):
                continue
            bin_id = m.get("bin_id")
            if not isinstance(bin_id, str) or bin_id not in bin_ids:
                continue
            matches.append(QueryMatch(
                bin_id=bin_id,
                name=_str_or_empty(m.get("name")),
                area_name=_str_or_empty(m.get("area_name")),
                items=clean_string_list(m.get("items")),
                tags=clean_string_list(m.get("tags")),
                relevance=_str_or_empty(m.get("relevance")),
            ))

    return QueryResult(answer=answer, matches=matches)


class InventoryQuery:
    """
    Answers questions about a location's inventory.

    Usage:
        result = await inventory_query.ask(config, "where are the batteries?", context)
        print(result.answer)
    """

    async def ask(
        self,
        config: ProviderConfig,
        question: str,
        context: InventoryContext,
        custom_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        top_p: Optional[float] = None,
        timeout_ms: Optional[int] = None,
    ) -> QueryResult:
        valid_bin_ids = context.bin_ids()

        result = await call_provider(
            config,
            build_query_system_prompt(custom_prompt),
            build_query_user_message(question, context),
            temperature if temperature is not None else settings.AI_QUERY_TEMPERATURE,
            max_tokens if max_tokens is not None else settings.AI_QUERY_MAX_TOKENS,
            timeout_ms,
            lambda raw: validate_query_result(raw, valid_bin_ids),
            top_p=top_p,
        )
        logger.info(f"Answered inventory query with {len(result.matches)} match(es)")
        return result


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
inventory_query = InventoryQuery()
