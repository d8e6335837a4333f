"""
AI Router - natural-language commands, inventory questions and AI settings.

This router only does HTTP handling: membership checks, settings
resolution and error mapping. Parsing lives in app.ai.commands, execution
in app.services.command_executor.

Flow for POST /ai/execute:
=========================
```
text ──► snapshot (app.ai.context)
     ──► command_parser (prompt + provider + lenient validation)
     ──► execute_actions (sequential, per-action results)
     ──► {executed, interpretation, errors}
```

Every failure is returned as {"detail": {"error": <CODE>, "message": ...}}.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.ai.commands import command_parser, inventory_query, text_structurer
from app.ai.context import build_command_context, build_inventory_context
from app.ai.prompts import DEFAULT_COMMAND_PROMPT, DEFAULT_QUERY_PROMPT, DEFAULT_STRUCTURE_PROMPT
from app.ai.providers import AIProviderError, ProviderConfig
from app.ai.providers import client as provider_client
from app.ai.schemas.actions import CommandResult
from app.db.session import get_db
from app.deps import get_current_user, require_location_member
from app.models.user import User
from app.schemas.ai import (
    AISettingsIn,
    AISettingsOut,
    CommandRequest,
    ConnectionTestRequest,
    DefaultPromptsResponse,
    ExecuteResponse,
    QueryRequest,
    QueryResponse,
    StructureTextRequest,
    StructureTextResponse,
)
from app.services.ai_settings import (
    MaskedKeyError,
    NoAISettingsError,
    ResolvedAISettings,
    ai_error_to_status,
    delete_ai_settings,
    env_settings_out,
    get_user_ai_settings,
    list_stored_settings,
    resolve_masked_key,
    settings_to_out,
    upsert_ai_settings,
    user_settings_out,
)
from app.services.command_executor import TooManyActionsError, execute_actions


# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger("openbin.routers.ai")


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/ai", tags=["ai"])


def _error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"error": code, "message": message})


def _provider_error(e: AIProviderError) -> HTTPException:
    return _error(ai_error_to_status(e.code), e.code.value, e.message)


def _resolve_settings(db: Session, user: User) -> ResolvedAISettings:
    try:
        return get_user_ai_settings(db, user.id)
    except NoAISettingsError as e:
        raise _error(status.HTTP_422_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR", e.message)


async def _parse(db: Session, user: User, payload: CommandRequest) -> CommandResult:
    ai_settings = _resolve_settings(db, user)
    context = build_command_context(db, payload.location_id, user.id)
    try:
        return await command_parser.parse(
            ai_settings.config,
            payload.text,
            context,
            custom_prompt=ai_settings.command_prompt,
            **ai_settings.sampling(),
        )
    except AIProviderError as e:
        raise _provider_error(e)
    except ValueError as e:
        # unknown provider name in the env fallback
        raise _error(status.HTTP_422_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR", str(e))


# ---------------------------------------------------------------------------
# POST /ai/command - Parse a command into actions (nothing is executed)
# ---------------------------------------------------------------------------
@router.post("/command", response_model=CommandResult)
async def parse_command(
    payload: CommandRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Parse a natural-language command against the location's bins.

    Invalid or dangling actions from the model are dropped; the
    interpretation is always returned.

    Raises:
        403/404: not a member / unknown location
        422: no AI settings, bad credentials or model
        429: provider rate limit
        502: provider unreachable or unusable response
    """
    require_location_member(db, payload.location_id, current_user)
    return await _parse(db, current_user, payload)


# ---------------------------------------------------------------------------
# POST /ai/execute - Parse a command and apply the resulting actions
# ---------------------------------------------------------------------------
@router.post("/execute", response_model=ExecuteResponse)
async def execute_command(
    payload: CommandRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Parse then execute in one call.

    A command that yields no actions returns an empty executed list with
    the model's interpretation.
    """
    require_location_member(db, payload.location_id, current_user)
    parsed = await _parse(db, current_user, payload)

    if not parsed.actions:
        return ExecuteResponse(executed=[], interpretation=parsed.interpretation, errors=[])

    try:
        result = execute_actions(
            db,
            parsed.actions,
            payload.location_id,
            current_user.id,
            current_user.username,
            auth_method="jwt",
        )
    except TooManyActionsError as e:
        raise _error(status.HTTP_422_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR", str(e))

    return ExecuteResponse(
        executed=result.executed,
        interpretation=parsed.interpretation,
        errors=result.errors,
    )


# ---------------------------------------------------------------------------
# POST /ai/query - Read-only question about the inventory
# ---------------------------------------------------------------------------
@router.post("/query", response_model=QueryResponse)
async def query_inventory(
    payload: QueryRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_location_member(db, payload.location_id, current_user)
    ai_settings = _resolve_settings(db, current_user)
    context = build_inventory_context(db, payload.location_id, current_user.id)

    try:
        result = await inventory_query.ask(
            ai_settings.config,
            payload.question,
            context,
            custom_prompt=ai_settings.query_prompt,
            **ai_settings.sampling(),
        )
    except AIProviderError as e:
        raise _provider_error(e)
    except ValueError as e:
        raise _error(status.HTTP_422_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR", str(e))

    return QueryResponse(answer=result.answer, matches=result.matches)


# ---------------------------------------------------------------------------
# POST /ai/structure-text - Dictated text into item names
# ---------------------------------------------------------------------------
@router.post("/structure-text", response_model=StructureTextResponse)
async def structure_text(
    payload: StructureTextRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Extract a clean item list from free text.

    No location is involved: the optional context only tells the model the
    bin's name and which items it already holds.
    """
    ai_settings = _resolve_settings(db, current_user)
    context = payload.context

    try:
        result = await text_structurer.structure(
            ai_settings.config,
            payload.text,
            bin_name=context.bin_name if context else None,
            existing_items=context.existing_items if context else None,
            custom_prompt=ai_settings.structure_prompt,
            **ai_settings.sampling(),
        )
    except AIProviderError as e:
        raise _provider_error(e)
    except ValueError as e:
        raise _error(status.HTTP_422_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR", str(e))

    return StructureTextResponse(items=result.items)


# ---------------------------------------------------------------------------
# GET /ai/default-prompts - Built-in prompts (public)
# ---------------------------------------------------------------------------
@router.get("/default-prompts", response_model=DefaultPromptsResponse)
def read_default_prompts():
    """The rule preambles a custom prompt in AI settings replaces."""
    return DefaultPromptsResponse(
        command=DEFAULT_COMMAND_PROMPT,
        query=DEFAULT_QUERY_PROMPT,
        structure=DEFAULT_STRUCTURE_PROMPT,
    )


# ---------------------------------------------------------------------------
# POST /ai/test - Verify provider credentials
# ---------------------------------------------------------------------------
@router.post("/test")
async def check_provider_connection(
    payload: ConnectionTestRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Send a tiny request with the given credentials; {"success": true} on 2xx."""
    try:
        api_key = resolve_masked_key(db, current_user.id, payload.api_key, payload.provider)
    except MaskedKeyError as e:
        raise _error(status.HTTP_422_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR", str(e))

    config = ProviderConfig(
        provider=payload.provider,
        api_key=api_key,
        model=payload.model,
        endpoint_url=payload.endpoint_url or None,
    )
    try:
        await provider_client.test_connection(config)
    except AIProviderError as e:
        raise _provider_error(e)

    return {"success": True}


# ---------------------------------------------------------------------------
# /ai/settings - Per-user provider configuration
# ---------------------------------------------------------------------------
@router.get("/settings", response_model=Optional[AISettingsOut])
def read_ai_settings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Active stored settings plus every saved provider (keys masked), else
    the env fallback, else null.
    """
    stored = user_settings_out(db, current_user.id)
    if stored is not None:
        return stored
    return env_settings_out()


@router.put("/settings", response_model=AISettingsOut)
def save_ai_settings(
    payload: AISettingsIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        row = upsert_ai_settings(db, current_user.id, payload)
    except MaskedKeyError as e:
        raise _error(status.HTTP_422_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR", str(e))
    return settings_to_out(row, list_stored_settings(db, current_user.id))


@router.delete("/settings")
def remove_ai_settings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    delete_ai_settings(db, current_user.id)
    return {"deleted": True}
