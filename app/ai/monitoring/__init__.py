"""
Monitoring Module - structured logging for AI provider traffic.

Usage:
    from app.ai.monitoring import ai_logger

    ai_logger.log_request(request_id, provider, model, prompt_length)
"""

from app.ai.monitoring.logger import AILogger, ai_logger

__all__ = [
    "AILogger",
    "ai_logger",
]
