"""
OpenAI Provider - Chat Completions wire format.

Also used for "openai-compatible" servers (Ollama, LM Studio, vLLM, OpenRouter
and similar) which accept the same body at {base}/chat/completions.

API Documentation: https://platform.openai.com/docs/api-reference/chat
"""

from typing import Any, Dict, Optional

from app.ai.providers.base import AIProvider, ProviderConfig, ProviderRequest, ProviderType


class OpenAIProvider(AIProvider):
    """
    OpenAI chat completions.

    Request:  {model, max_tokens, temperature, messages: [system, user]}
    Response: choices[0].message.content
    Auth:     Authorization: Bearer <key>
    """

    provider_type = ProviderType.OPENAI
    default_base_url = "https://api.openai.com/v1"

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
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
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
            url=f"{self.base_url(config)}/chat/completions",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {config.api_key}",
            },
            body=body,
        )

    def extract_text(self, data: Any) -> Optional[str]:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None
        return content if isinstance(content, str) else None


class OpenAICompatibleProvider(OpenAIProvider):
    """Same wire format as OpenAI, pointed at a caller-supplied base URL."""

    provider_type = ProviderType.OPENAI_COMPATIBLE
