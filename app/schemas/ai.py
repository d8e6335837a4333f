"""
AI schemas - request/response bodies for the /ai endpoints.

Request bodies use camelCase keys on the wire (locationId, apiKey...), the
same as the web client sends them; populate_by_name lets tests and Python
callers use the snake_case names too.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.ai.commands.query import QueryMatch
from app.ai.schemas.actions import ActionResult

ProviderName = Literal["openai", "anthropic", "gemini", "openai-compatible"]

MAX_TEXT_LENGTH = 5000
MAX_PROMPT_LENGTH = 10000


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


def _required_text(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
    return value


# ---------------------------------------------------------------------------
# COMMAND / QUERY
# ---------------------------------------------------------------------------

class CommandRequest(CamelModel):
    """
    Body of POST /ai/command and POST /ai/execute.

    Example request body:
    {
        "locationId": "6f1c...",
        "text": "remove hammer from Tools bin"
    }
    """
    location_id: str = Field(..., alias="locationId")
    text: str = Field(..., max_length=MAX_TEXT_LENGTH)

    check_text = field_validator("text", mode="before")(_required_text)


class QueryRequest(CamelModel):
    """Body of POST /ai/query."""
    location_id: str = Field(..., alias="locationId")
    question: str = Field(..., max_length=MAX_TEXT_LENGTH)

    check_question = field_validator("question", mode="before")(_required_text)


class ExecuteResponse(BaseModel):
    executed: List[ActionResult]
    interpretation: str
    errors: List[str]


class QueryResponse(BaseModel):
    answer: str
    matches: List[QueryMatch]


# ---------------------------------------------------------------------------
# TEXT STRUCTURING
# ---------------------------------------------------------------------------

class StructureTextContext(CamelModel):
    bin_name: Optional[str] = Field(None, alias="binName")
    existing_items: Optional[List[str]] = Field(None, alias="existingItems")


class StructureTextRequest(CamelModel):
    """
    Body of POST /ai/structure-text.

    Example request body:
    {
        "text": "um there's a hammer and like three screwdrivers",
        "mode": "items",
        "context": {"binName": "Tools", "existingItems": ["Hammer"]}
    }
    """
    text: str = Field(..., max_length=MAX_TEXT_LENGTH)
    # "items" is the only mode; anything else is treated as "items"
    mode: Optional[str] = "items"
    context: Optional[StructureTextContext] = None

    check_text = field_validator("text", mode="before")(_required_text)


class StructureTextResponse(BaseModel):
    items: List[str]


class DefaultPromptsResponse(BaseModel):
    command: str
    query: str
    structure: str


# ---------------------------------------------------------------------------
# CONNECTION TEST
# ---------------------------------------------------------------------------

class ConnectionTestRequest(CamelModel):
    """
    Body of POST /ai/test.

    apiKey may be the masked key returned by GET /ai/settings; the stored
    key is then used.
    """
    provider: ProviderName
    api_key: str = Field(..., alias="apiKey", min_length=1)
    model: str = Field(..., min_length=1)
    endpoint_url: Optional[str] = Field(None, alias="endpointUrl")


# ---------------------------------------------------------------------------
# SETTINGS
# ---------------------------------------------------------------------------

class AISettingsIn(CamelModel):
    """
    Body of PUT /ai/settings.

    Example request body:
    {
        "provider": "anthropic",
        "apiKey": "sk-ant-...",
        "model": "claude-3-5-haiku-latest",
        "temperature": 0.2,
        "requestTimeout": 30
    }
    """
    provider: ProviderName
    api_key: str = Field(..., alias="apiKey", min_length=1)
    model: str = Field(..., min_length=1)
    endpoint_url: Optional[str] = Field(None, alias="endpointUrl")

    # Prompt overrides replace the default rules, never the action schema
    command_prompt: Optional[str] = Field(None, alias="commandPrompt", max_length=MAX_PROMPT_LENGTH)
    query_prompt: Optional[str] = Field(None, alias="queryPrompt", max_length=MAX_PROMPT_LENGTH)
    structure_prompt: Optional[str] = Field(None, alias="structurePrompt", max_length=MAX_PROMPT_LENGTH)

    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_tokens: Optional[int] = Field(None, alias="maxTokens", ge=100, le=16000)
    top_p: Optional[float] = Field(None, alias="topP", ge=0, le=1)
    request_timeout: Optional[int] = Field(None, alias="requestTimeout", ge=10, le=300)

    @field_validator("endpoint_url", "command_prompt", "query_prompt", "structure_prompt", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class ProviderConfigOut(BaseModel):
    """Saved credentials for one provider (key masked)."""
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(..., alias="apiKey")
    model: str
    endpoint_url: Optional[str] = Field(None, alias="endpointUrl")


class AISettingsOut(BaseModel):
    """
    Stored (or env fallback) AI settings as returned to the client.

    api_key is always masked ("****" + last four characters), in
    provider_configs too.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    provider: str
    api_key: str = Field(..., alias="apiKey")
    model: str
    endpoint_url: Optional[str] = Field(None, alias="endpointUrl")
    command_prompt: Optional[str] = Field(None, alias="commandPrompt")
    query_prompt: Optional[str] = Field(None, alias="queryPrompt")
    structure_prompt: Optional[str] = Field(None, alias="structurePrompt")
    temperature: Optional[float] = None
    max_tokens: Optional[int] = Field(None, alias="maxTokens")
    top_p: Optional[float] = Field(None, alias="topP")
    request_timeout: Optional[int] = Field(None, alias="requestTimeout")

    # provider_configs: every provider the user has saved, keyed by provider name
    provider_configs: Optional[Dict[str, ProviderConfigOut]] = Field(None, alias="providerConfigs")

    # source: "user" (stored row) or "env" (server fallback)
    source: Literal["user", "env"] = "user"
