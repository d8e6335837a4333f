"""
Provider Client - one chat-style completion call against any supported vendor.

Flow for call_provider():
========================
1. Look up the vendor strategy for config.provider
2. If config.endpoint_url is set, run the egress guard (scheme + DNS check)
3. Build body, URL and auth headers via the strategy; a checked custom
   endpoint is contacted at the address the guard approved
4. POST once with an optional hard timeout (no retries)
5. Map transport failures and non-2xx statuses to AIErrorCode
6. Extract the answer text, strip ``` fences, json.loads it
7. Hand the parsed value to the caller's validate() and return its result

Every failure leaves this module as an AIProviderError.
"""

import asyncio
import json
import logging
import time
import uuid
from typing import Any, Callable, Dict, Optional, TypeVar, Union

import httpx

from app.ai.monitoring.logger import ai_logger
from app.ai.providers.anthropic_provider import AnthropicProvider
from app.ai.providers.base import (
    AIErrorCode,
    AIProvider,
    AIProviderError,
    ProviderConfig,
    ProviderRequest,
    ProviderType,
)
from app.ai.providers.egress import ensure_safe_endpoint, pin_to_address
from app.ai.providers.gemini import GeminiProvider
from app.ai.providers.openai_provider import OpenAICompatibleProvider, OpenAIProvider

logger = logging.getLogger("openbin.ai.client")

T = TypeVar("T")

# ---------------------------------------------------------------------------
# STRATEGY TABLE
# ---------------------------------------------------------------------------
PROVIDERS: Dict[ProviderType, AIProvider] = {
    ProviderType.OPENAI: OpenAIProvider(),
    ProviderType.ANTHROPIC: AnthropicProvider(),
    ProviderType.GEMINI: GeminiProvider(),
    ProviderType.OPENAI_COMPATIBLE: OpenAICompatibleProvider(),
}


def get_provider(provider: Union[ProviderType, str]) -> AIProvider:
    """
    Return the wire-format strategy for a provider name.

    Raises:
        ValueError: unknown provider
    """
    return PROVIDERS[ProviderType(provider)]


def strip_code_fences(text: str) -> str:
    """
    Remove a Markdown code fence wrapped around a model answer.

    '```json\\n{"a":1}\\n```' -> '{"a":1}'. Text without fences is only trimmed.
    """
    s = text.strip()
    if s.startswith("```json"):
        s = s[7:]
    elif s.startswith("```"):
        s = s[3:]
    if s.endswith("```"):
        s = s[:-3]
    return s.strip()


def map_http_status(status_code: int) -> AIErrorCode:
    if status_code in (401, 403):
        return AIErrorCode.INVALID_KEY
    if status_code == 429:
        return AIErrorCode.RATE_LIMITED
    if status_code == 404:
        return AIErrorCode.MODEL_NOT_FOUND
    return AIErrorCode.PROVIDER_ERROR


def _build_client(timeout: Optional[float]) -> httpx.AsyncClient:
    # Redirects are not followed: a 3xx ends the call as PROVIDER_ERROR
    return httpx.AsyncClient(timeout=timeout, follow_redirects=False)


def _pin(request: ProviderRequest, address: Optional[str]) -> ProviderRequest:
    """Point a request at the address the egress guard checked."""
    if address is None:
        return request
    url, headers, extensions = pin_to_address(request.url, address)
    return ProviderRequest(
        url=url,
        headers={**request.headers, **headers},
        body=request.body,
        extensions={**request.extensions, **extensions},
    )


async def _send(request: ProviderRequest, timeout_ms: Optional[int]) -> httpx.Response:
    """POST the request once and return a 2xx response, or raise AIProviderError."""
    timeout = timeout_ms / 1000 if timeout_ms else None

    async with _build_client(timeout) as client:
        try:
            response = await asyncio.wait_for(
                client.post(
                    request.url,
                    headers=request.headers,
                    json=request.body,
                    extensions=request.extensions or None,
                ),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            raise AIProviderError(
                AIErrorCode.NETWORK_ERROR, f"Request timed out after {timeout_ms}ms"
            )
        except httpx.HTTPError as e:
            raise AIProviderError(AIErrorCode.NETWORK_ERROR, f"Failed to connect: {e}")

    if not response.is_success:
        raise AIProviderError(
            map_http_status(response.status_code),
            f"Provider returned {response.status_code}: {response.text[:200]}",
        )

    return response


async def call_provider(
    config: ProviderConfig,
    system_prompt: str,
    user_content: str,
    temperature: float,
    max_tokens: int,
    timeout_ms: Optional[int],
    validate: Callable[[Any], T],
    top_p: Optional[float] = None,
) -> T:
    """
    Send one completion request and return the validated result.

    Args:
        config: Provider, key, model and optional endpoint URL
        system_prompt: Task rules and schema
        user_content: The user turn (command/question plus inventory JSON)
        temperature: Sampling temperature
        max_tokens: Output token cap
        timeout_ms: Hard deadline for the HTTP call, None for no deadline
        validate: Shapes the parsed JSON into the caller's type; any
            exception it raises becomes INVALID_RESPONSE
        top_p: Optional nucleus sampling value, passed through when set

    Raises:
        AIProviderError: on every failure, see AIErrorCode
    """
    request_id = str(uuid.uuid4())[:8]
    provider = get_provider(config.provider)

    address = None
    if config.endpoint_url:
        try:
            address = await ensure_safe_endpoint(config.endpoint_url)
        except AIProviderError as e:
            ai_logger.log_error(request_id, e.message, stage="egress")
            raise

    body = provider.build_body(
        config.model, system_prompt, user_content, temperature, max_tokens, top_p
    )
    request = provider.build_request(config, body)

    ai_logger.log_request(
        request_id,
        provider=provider.provider_type.value,
        model=config.model,
        prompt_length=len(system_prompt) + len(user_content),
        endpoint_host=httpx.URL(request.url).host,
    )
    request = _pin(request, address)

    start_time = time.time()
    try:
        response = await _send(request, timeout_ms)
    except AIProviderError as e:
        ai_logger.log_response(
            request_id,
            provider=provider.provider_type.value,
            model=config.model,
            latency_ms=(time.time() - start_time) * 1000,
            success=False,
            error_code=e.code.value,
        )
        raise
    latency_ms = (time.time() - start_time) * 1000

    try:
        data = response.json()
    except ValueError:
        data = None
    content = provider.extract_text(data)

    ai_logger.log_response(
        request_id,
        provider=provider.provider_type.value,
        model=config.model,
        latency_ms=latency_ms,
        response_length=len(content) if content else 0,
        success=bool(content),
        error_code=None if content else AIErrorCode.INVALID_RESPONSE.value,
    )

    if not content:
        raise AIProviderError(AIErrorCode.INVALID_RESPONSE, "No content in provider response")

    try:
        parsed = json.loads(strip_code_fences(content))
        return validate(parsed)
    except Exception as e:
        ai_logger.log_error(request_id, str(e), stage="parse")
        raise AIProviderError(
            AIErrorCode.INVALID_RESPONSE,
            f"Failed to parse response as JSON: {content[:200]}",
        ) from e


async def test_connection(config: ProviderConfig, timeout_ms: Optional[int] = None) -> None:
    """
    Verify a provider config with a tiny "Reply with OK" request.

    Only the status code matters; the reply text is ignored.

    Raises:
        AIProviderError: same taxonomy as call_provider()
    """
    provider = get_provider(config.provider)

    address = None
    if config.endpoint_url:
        address = await ensure_safe_endpoint(config.endpoint_url)

    request = _pin(provider.build_request(config, provider.build_test_body(config.model)), address)
    await _send(request, timeout_ms)
    logger.info(f"Connection test succeeded for {provider.provider_type.value}/{config.model}")
