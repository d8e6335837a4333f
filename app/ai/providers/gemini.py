"""
Gemini Provider - Generative Language API (generateContent) wire format.

Gemini differs from the chat-style vendors in three ways:
- the model name is part of the URL, not the body
- the system prompt goes in systemInstruction, the turn in contents[].parts[]
- sampling options live under generationConfig with camelCase names

API Documentation: https://ai.google.dev/api/generate-content
"""

from typing import Any, Dict, Optional

from app.ai.providers.base import AIProvider, ProviderConfig, ProviderRequest, ProviderType


class GeminiProvider(AIProvider):
    """
    Google Gemini.

    Response: candidates[0].content.parts[0].text
    Auth:     x-goog-api-key
    """

    provider_type = ProviderType.GEMINI
    default_base_url = "https://generativelanguage.googleapis.com/v1beta"

    def build_body(
        self,
        model: str,
        system_prompt: str,
        user_content: str,
        temperature: float,
        max_tokens: int,
        top_p: Optional[float] = None,
    ) -> Dict[str, Any]:
        generation_config: Dict[str, Any] = {
            "temperature": temperature,
            "maxOutputTokens": max_tokens,
        }
        if top_p is not None:
            generation_config["topP"] = top_p

        return {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_content}]}],
            "generationConfig": generation_config,
        }

    def build_test_body(self, model: str) -> Dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": "Reply with OK"}]}],
            "generationConfig": {"maxOutputTokens": 10},
        }

    def build_request(self, config: ProviderConfig, body: Dict[str, Any]) -> ProviderRequest:
        return ProviderRequest(
            url=f"{self.base_url(config)}/models/{config.model}:generateContent",
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": config.api_key,
            },
            body=body,
        )

    def extract_text(self, data: Any) -> Optional[str]:
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None
        return text if isinstance(text, str) else None
