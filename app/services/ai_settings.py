"""
AI settings service - resolves which provider a user's AI requests go to.

Resolution order:
1. The user's active UserAISettings row (one row per saved provider)
2. The server's env fallback (AI_PROVIDER + AI_API_KEY + AI_MODEL)
3. NoAISettingsError

Usage:
======
```python
resolved = get_user_ai_settings(db, user.id)
result = await command_parser.parse(
    resolved.config, text, context,
    custom_prompt=resolved.command_prompt,
    **resolved.sampling(),
)
```
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.ai.providers.base import AIErrorCode, ProviderConfig
from app.core.config import settings
from app.core.security import decrypt_api_key, encrypt_api_key, mask_api_key
from app.models.ai_settings import UserAISettings
from app.schemas.ai import AISettingsIn, AISettingsOut, ProviderConfigOut

logger = logging.getLogger("openbin.ai.settings")

MASK_PREFIX = "****"


class NoAISettingsError(Exception):
    """Neither stored settings nor an env fallback exist for the user."""

    def __init__(self, message: str = "AI is not configured. Add a provider in AI settings."):
        super().__init__(message)
        self.message = message


class MaskedKeyError(ValueError):
    """A masked API key was sent but there is no stored key to stand in for it."""


@dataclass
class ResolvedAISettings:
    """Provider config plus the user's optional overrides (None = default)."""
    config: ProviderConfig
    command_prompt: Optional[str] = None
    query_prompt: Optional[str] = None
    structure_prompt: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    request_timeout: Optional[int] = None
    source: str = "user"

    @property
    def timeout_ms(self) -> int:
        return (self.request_timeout or settings.AI_REQUEST_TIMEOUT) * 1000

    def sampling(self) -> Dict[str, Any]:
        """Keyword overrides accepted by the parse / ask / structure calls."""
        return {
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "timeout_ms": self.timeout_ms,
        }


def get_env_ai_config() -> Optional[ProviderConfig]:
    if not (settings.AI_PROVIDER and settings.AI_API_KEY and settings.AI_MODEL):
        return None
    return ProviderConfig(
        provider=settings.AI_PROVIDER,
        api_key=settings.AI_API_KEY,
        model=settings.AI_MODEL,
        endpoint_url=settings.AI_ENDPOINT_URL or None,
    )


# ---------------------------------------------------------------------------
# STORED ROWS
# ---------------------------------------------------------------------------

def list_stored_settings(db: Session, user_id: str) -> List[UserAISettings]:
    """Every saved provider row of a user, oldest first."""
    return (
        db.query(UserAISettings)
        .filter(UserAISettings.user_id == user_id)
        .order_by(UserAISettings.created_at)
        .all()
    )


def get_active_settings(db: Session, user_id: str) -> Optional[UserAISettings]:
    """The row that serves the user's AI requests, if any."""
    return (
        db.query(UserAISettings)
        .filter(UserAISettings.user_id == user_id, UserAISettings.is_active.is_(True))
        .first()
    )


def get_provider_settings(db: Session, user_id: str, provider: str) -> Optional[UserAISettings]:
    return (
        db.query(UserAISettings)
        .filter(UserAISettings.user_id == user_id, UserAISettings.provider == provider)
        .first()
    )


def get_user_ai_settings(db: Session, user_id: str) -> ResolvedAISettings:
    """
    Resolve the provider config for a user.

    Only the active row is considered; the stored key is decrypted here.

    Raises:
        NoAISettingsError: no active row and no complete env fallback
    """
    row = get_active_settings(db, user_id)
    if row is not None:
        return ResolvedAISettings(
            config=ProviderConfig(
                provider=row.provider,
                api_key=decrypt_api_key(row.api_key),
                model=row.model,
                endpoint_url=row.endpoint_url or None,
            ),
            command_prompt=row.command_prompt or None,
            query_prompt=row.query_prompt or None,
            structure_prompt=row.structure_prompt or None,
            temperature=row.temperature,
            max_tokens=row.max_tokens,
            top_p=row.top_p,
            request_timeout=row.request_timeout,
        )

    env_config = get_env_ai_config()
    if env_config is not None:
        return ResolvedAISettings(config=env_config, source="env")

    raise NoAISettingsError()


def resolve_masked_key(db: Session, user_id: str, api_key: str, provider: str) -> str:
    """
    Swap a masked key ("****abcd", as returned by GET) for the stored one.

    The key saved for the same provider is used.

    Raises:
        MaskedKeyError: the key is masked and nothing is stored for provider
    """
    if not api_key.startswith(MASK_PREFIX):
        return api_key
    row = get_provider_settings(db, user_id, provider)
    if row is None:
        raise MaskedKeyError("No saved key found. Please enter your API key.")
    return decrypt_api_key(row.api_key)


def upsert_ai_settings(db: Session, user_id: str, data: AISettingsIn) -> UserAISettings:
    """
    Create or replace the user's row for data.provider and make it active.

    The user's other provider rows are kept but deactivated. Range checks
    live on AISettingsIn; every field is written, so a field left out of
    the request resets to the task default.
    """
    api_key = resolve_masked_key(db, user_id, data.api_key, data.provider)

    for other in list_stored_settings(db, user_id):
        other.is_active = False

    row = get_provider_settings(db, user_id, data.provider)
    if row is None:
        row = UserAISettings(user_id=user_id, provider=data.provider)
        db.add(row)

    row.api_key = encrypt_api_key(api_key)
    row.model = data.model
    row.endpoint_url = data.endpoint_url
    row.command_prompt = data.command_prompt
    row.query_prompt = data.query_prompt
    row.structure_prompt = data.structure_prompt
    row.temperature = data.temperature
    row.max_tokens = data.max_tokens
    row.top_p = data.top_p
    row.request_timeout = data.request_timeout
    row.is_active = True

    db.commit()
    db.refresh(row)
    logger.info(f"Saved AI settings for user {user_id} (provider={row.provider})")
    return row


def delete_ai_settings(db: Session, user_id: str) -> int:
    """Remove every provider row of the user; returns how many were deleted."""
    deleted = (
        db.query(UserAISettings)
        .filter(UserAISettings.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


# ---------------------------------------------------------------------------
# OUTPUT SHAPES
# ---------------------------------------------------------------------------

def _masked(stored_key: str) -> str:
    return mask_api_key(decrypt_api_key(stored_key))


def settings_to_out(row: UserAISettings, all_rows: List[UserAISettings]) -> AISettingsOut:
    return AISettingsOut(
        id=row.id,
        provider=row.provider,
        api_key=_masked(row.api_key),
        model=row.model,
        endpoint_url=row.endpoint_url,
        command_prompt=row.command_prompt,
        query_prompt=row.query_prompt,
        structure_prompt=row.structure_prompt,
        temperature=row.temperature,
        max_tokens=row.max_tokens,
        top_p=row.top_p,
        request_timeout=row.request_timeout,
        provider_configs={
            r.provider: ProviderConfigOut(
                api_key=_masked(r.api_key),
                model=r.model,
                endpoint_url=r.endpoint_url or None,
            )
            for r in all_rows
        },
        source="user",
    )


def user_settings_out(db: Session, user_id: str) -> Optional[AISettingsOut]:
    """Active row (else the oldest saved row) with every provider's config."""
    rows = list_stored_settings(db, user_id)
    if not rows:
        return None
    active = next((r for r in rows if r.is_active), rows[0])
    return settings_to_out(active, rows)


def env_settings_out() -> Optional[AISettingsOut]:
    env_config = get_env_ai_config()
    if env_config is None:
        return None
    return AISettingsOut(
        provider=env_config.provider,
        api_key=mask_api_key(env_config.api_key),
        model=env_config.model,
        endpoint_url=env_config.endpoint_url,
        source="env",
    )


# ---------------------------------------------------------------------------
# ERROR MAPPING
# ---------------------------------------------------------------------------
# Credentials/model problems are the caller's to fix (422); a throttled
# caller gets 429; anything else is an upstream failure (502).

_STATUS_BY_CODE = {
    AIErrorCode.INVALID_KEY: 422,
    AIErrorCode.MODEL_NOT_FOUND: 422,
    AIErrorCode.RATE_LIMITED: 429,
}


def ai_error_to_status(code: AIErrorCode) -> int:
    return _STATUS_BY_CODE.get(code, 502)
