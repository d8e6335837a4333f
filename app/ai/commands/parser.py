"""
Command Parser - turns a natural-language inventory command into actions.

The parser:
1. Builds the system prompt (rules + action schema) and the user message
   (command + inventory snapshot)
2. Sends one request through the provider client
3. Validates the model's JSON with the lenient policy: bad or dangling
   actions are dropped, the interpretation is always returned

Provider failures propagate as AIProviderError; this class never hides
them behind an empty result.
"""

import logging
import time
from typing import Optional

from app.ai.actions.validation import validate_command_result
from app.ai.context import CommandContext
from app.ai.prompts.command_prompts import build_command_system_prompt, build_command_user_message
from app.ai.providers.base import ProviderConfig
from app.ai.providers.client import call_provider
from app.ai.schemas.actions import CommandResult
from app.core.config import settings

logger = logging.getLogger("openbin.ai.commands")


class CommandParser:
    """
    Parses natural language into validated inventory actions.

    Usage:
        result = await command_parser.parse(config, "remove hammer from Tools bin", context)
        for action in result.actions:
            print(action.type, action.bin_id)
    """

    async def parse(
        self,
        config: ProviderConfig,
        text: str,
        context: CommandContext,
        custom_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        top_p: Optional[float] = None,
        timeout_ms: Optional[int] = None,
    ) -> CommandResult:
        """
        Parse a command against a location snapshot.

        Args:
            config: Provider connection settings
            text: The user's command
            context: Snapshot of bins/areas/trash for the location
            custom_prompt: Optional rule preamble override
            temperature, max_tokens, top_p: Sampling overrides
                (defaults from AI_COMMAND_* settings)
            timeout_ms: Hard deadline for the provider call

        Raises:
            AIProviderError: provider or response failure
        """
        start_time = time.time()
        known_bin_ids = context.known_bin_ids()

        result = await call_provider(
            config,
            build_command_system_prompt(context, custom_prompt),
            build_command_user_message(text, context),
            temperature if temperature is not None else settings.AI_COMMAND_TEMPERATURE,
            max_tokens if max_tokens is not None else settings.AI_COMMAND_MAX_TOKENS,
            timeout_ms,
            lambda raw: validate_command_result(raw, known_bin_ids),
            top_p=top_p,
        )

        logger.info(
            f"Parsed command into {len(result.actions)} action(s) "
            f"in {(time.time() - start_time) * 1000:.0f}ms"
        )
        return result


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
command_parser = CommandParser()
