"""
Anthropic Provider - Messages API wire format.

API Documentation: https://docs.anthropic.com/en/api/messages
"""

from typing import Any, Dict, Optional

from app.ai.providers.base import AIProvider, ProviderConfig, ProviderRequest, ProviderType

# Pinned API version header required by the Messages API
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(AIProvider):
    """
    Anthropic messages.

    Request:  {model, max_tokens, temperature, system, messages: [user]}
    Response: first block of content[] whose type is "text"
    Auth:     x-api-key + anthropic-version
    """

    provider_type = ProviderType.ANTHROPIC
    default_base_url = "https://api.anthropic.com"

    def build_body(
        self,
        model: str,
        system_prompt: str,
        user_content: str,
        temperature: float,
        max_tokens: int,
        top_p: Optional[float] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_content}],
        }
        if top_p is not None:
            body["top_p"] = top_p
        return body

    def build_test_body(self, model: str) -> Dict[str, Any]:
        return {
            "model": model,
            "max_tokens": 10,
            "messages": [{"role": "user", "content": "Reply with OK"}],
        }

    def build_request(self, config: ProviderConfig, body: Dict[str, Any]) -> ProviderRequest:
        return ProviderRequest(
            url=f"{self.base_url(config)}/v1/messages",
            headers={
                "Content-Type": "application/json",
                "x-api-key": config.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            },
            body=body,
        )

    def extract_text(self, data: Any) -> Optional[str]:
        if not isinstance(data, dict) or not isinstance(data.get("content"), list):
            return None
        for block in data["content"]:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                return text if isinstance(text, str) else None
        return None
