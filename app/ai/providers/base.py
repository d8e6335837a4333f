"""
Base AI Provider - wire-format contract shared by every model vendor.

Design Pattern: Strategy Pattern
================================
Each vendor (OpenAI, Anthropic, Gemini, and any OpenAI-compatible server)
is one small AIProvider subclass that knows three things:

    build_body()    -> the JSON payload for a chat-style completion
    build_request() -> the URL and auth headers for that payload
    extract_text()  -> where the model's answer sits in the response

The client (app.ai.providers.client) picks the strategy from a table keyed
by ProviderType and owns everything else: egress checks, the HTTP call,
error mapping, JSON parsing and validation.

Example:
    provider = get_provider(ProviderType.ANTHROPIC)
    body = provider.build_body("You are...", "Command: ...", 0.2, 2000)
    request = provider.build_request(config, body)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger("openbin.ai")


class ProviderType(str, Enum):
    """Enum of supported AI providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    OPENAI_COMPATIBLE = "openai-compatible"


class AIErrorCode(str, Enum):
    """Closed set of failure codes surfaced to API callers."""
    NETWORK_ERROR = "NETWORK_ERROR"
    INVALID_KEY = "INVALID_KEY"
    RATE_LIMITED = "RATE_LIMITED"
    MODEL_NOT_FOUND = "MODEL_NOT_FOUND"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    PROVIDER_ERROR = "PROVIDER_ERROR"


class AIProviderError(Exception):
    """
    Raised by the provider client for every failed call.

    The message is safe to show to the user; raw HTTP bodies are truncated
    to 200 characters before they get here.
    """

    def __init__(self, code: AIErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"AIProviderError({self.code.value}, {self.message!r})"


@dataclass
class ProviderConfig:
    """
    Connection settings for one provider call.

    Attributes:
        provider: Which wire format to speak
        api_key: Vendor credential, sent only in the vendor's auth header
        model: Vendor model identifier ("gpt-4o-mini", "claude-3-5-haiku-latest")
        endpoint_url: Optional caller-supplied base URL. When set, the host
            must pass the egress guard before any request is sent.
    """
    provider: ProviderType
    api_key: str
    model: str
    endpoint_url: Optional[str] = None


@dataclass
class ProviderRequest:
    """A fully built outbound request: URL, headers and JSON body."""
    url: str
    headers: Dict[str, str]
    body: Dict[str, Any] = field(default_factory=dict)
    # httpx request extensions (sni_hostname when pinned to an address)
    extensions: Dict[str, Any] = field(default_factory=dict)


class AIProvider(ABC):
    """
    Abstract base class for vendor wire formats.

    Subclasses must be stateless: one shared instance per vendor serves
    every request.
    """

    provider_type: ProviderType

    # Base URL used when the config carries no endpoint_url
    default_base_url: str = ""

    @abstractmethod
    def build_body(
        self,
        model: str,
        system_prompt: str,
        user_content: str,
        temperature: float,
        max_tokens: int,
        top_p: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Build the JSON body for a system + single user turn completion."""

    @abstractmethod
    def build_test_body(self, model: str) -> Dict[str, Any]:
        """Build a minimal 10-token "Reply with OK" body for connection tests."""

    @abstractmethod
    def build_request(self, config: ProviderConfig, body: Dict[str, Any]) -> ProviderRequest:
        """Attach the endpoint URL and auth headers for this vendor."""

    @abstractmethod
    def extract_text(self, data: Any) -> Optional[str]:
        """
        Pull the model's text answer out of the decoded response JSON.

        Returns None when the envelope has no usable text; never raises on
        unexpected shapes.
        """

    def base_url(self, config: ProviderConfig) -> str:
        """Configured endpoint (or the vendor default) without trailing slashes."""
        return (config.endpoint_url or self.default_base_url).rstrip("/")
