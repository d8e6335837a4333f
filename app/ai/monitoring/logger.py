"""
AI Logger - Structured logging for outbound model calls.

One JSON line per event so provider traffic can be grepped and aggregated:

    ai_request   provider, model, prompt length, endpoint host
    ai_response  provider, model, latency, response length, success
    ai_error     error text and the stage that failed

API keys and prompt text are never logged; only lengths.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger("openbin.ai")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(
        '[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(handler)


class AILogger:
    """
    Structured logger for AI provider calls.

    Usage:
        ai_logger.log_request(request_id, provider="openai", model="gpt-4o-mini",
                              prompt_length=1532)
        ai_logger.log_response(request_id, provider="openai", model="gpt-4o-mini",
                               latency_ms=812.4, response_length=240)
    """

    def __init__(self):
        self._logger = logger

    def _emit(self, level: int, label: str, event: str, request_id: str, **fields: Any) -> None:
        entry = {"event": event, "request_id": request_id}
        entry.update({k: v for k, v in fields.items() if v is not None})
        entry["timestamp"] = datetime.now(timezone.utc).isoformat()
        self._logger.log(level, f"{label}: {json.dumps(entry)}")

    def log_request(
        self,
        request_id: str,
        provider: str,
        model: str,
        prompt_length: int,
        endpoint_host: Optional[str] = None,
    ) -> None:
        self._emit(
            logging.INFO, "AI Request", "ai_request", request_id,
            provider=provider,
            model=model,
            prompt_length=prompt_length,
            endpoint_host=endpoint_host,
        )

    def log_response(
        self,
        request_id: str,
        provider: str,
        model: str,
        latency_ms: float,
        response_length: int = 0,
        success: bool = True,
        error_code: Optional[str] = None,
    ) -> None:
        """
        Log the outcome of a provider call.

        Failed calls are logged at WARNING with the error code.
        """
        self._emit(
            logging.INFO if success else logging.WARNING,
            "AI Response", "ai_response", request_id,
            provider=provider,
            model=model,
            success=success,
            latency_ms=round(latency_ms, 2),
            response_length=response_length,
            error_code=error_code,
        )

    def log_error(self, request_id: str, error: str, stage: str) -> None:
        """
        Log a failure before or after the HTTP exchange.

        Args:
            request_id: Request identifier
            error: Error message (truncated to 300 characters)
            stage: "egress" (endpoint rejected) or "parse" (unusable answer)
        """
        self._emit(
            logging.ERROR, "AI Error", "ai_error", request_id,
            error=error[:300],
            stage=stage,
        )


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
ai_logger = AILogger()
