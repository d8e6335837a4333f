"""
AI Providers Module - provider-agnostic client for chat-style model APIs.

Supported wire formats:
- OpenAI chat completions (also any OpenAI-compatible server)
- Anthropic messages
- Google Gemini generateContent

All vendors are reached through the same entry points:
    result = await call_provider(config, system_prompt, user_content,
                                 temperature, max_tokens, timeout_ms, validate)
    await test_connection(config)
"""

from app.ai.providers.base import (
    AIErrorCode,
    AIProvider,
    AIProviderError,
    ProviderConfig,
    ProviderType,
)
from app.ai.providers.client import call_provider, get_provider, strip_code_fences, test_connection

__all__ = [
    "AIErrorCode",
    "AIProvider",
    "AIProviderError",
    "ProviderConfig",
    "ProviderType",
    "call_provider",
    "get_provider",
    "strip_code_fences",
    "test_connection",
]
