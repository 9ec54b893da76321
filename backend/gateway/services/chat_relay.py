"""
Chat relay service.

Assembles the outbound turn sequence for one bot and hands it to the
generation service.
"""

from typing import Any

from gateway.errors import UpstreamError
from gateway.logging import get_logger
from gateway.models import BotConfig, ChatRole, ChatTurn, normalize_role
from gateway.services.gemini import GeminiService
from gateway.services.prompts import generate_system_message

logger = get_logger('services.chat_relay')

LEADING_TURN = "leading_turn"
SYSTEM_INSTRUCTION = "system_instruction"


def _part_text(part: Any) -> str:
    if isinstance(part, dict):
        return str(part.get("text") or "")
    return str(part)


def _entry_text(entry: dict[str, Any]) -> str:
    """Text of a history entry without a parts list: ``parts.text``, then ``content``, then ``text``."""
    parts = entry.get("parts")
    if isinstance(parts, dict) and parts.get("text"):
        return str(parts["text"])
    for key in ("content", "text"):
        value = entry.get(key)
        if value:
            return str(value)
    return ""


def normalize_history_entry(entry: dict[str, Any]) -> ChatTurn:
    role = normalize_role(entry.get("role"))
    parts = entry.get("parts")
    if isinstance(parts, list):
        return ChatTurn(role=role, parts=[_part_text(part) for part in parts])
    return ChatTurn(role=role, parts=[_entry_text(entry)])


def normalize_history(history: list[dict[str, Any]] | None) -> list[ChatTurn]:
    return [normalize_history_entry(entry) for entry in history or []]


class ChatRelayService:
    """Builds the message sequence for a bot and relays it to Gemini."""

    def __init__(
        self,
        gemini: GeminiService,
        max_output_tokens: int,
        strategy: str = LEADING_TURN,
    ):
        if strategy not in (LEADING_TURN, SYSTEM_INSTRUCTION):
            raise ValueError(f"Unknown system prompt strategy: {strategy}")
        self.gemini = gemini
        self.max_output_tokens = max_output_tokens
        self.strategy = strategy

    def build_turns(
        self,
        system_message: str,
        history: list[dict[str, Any]] | None,
        prompt: str,
    ) -> tuple[list[ChatTurn], str | None]:
        """
        Compose the outbound turns.

        With the leading-turn strategy the system message becomes turn 0 as
        a user turn and no system instruction is sent. With the
        system-instruction strategy the turns start at the history and the
        system message is returned separately.

        :return: The turns and the system instruction, if any
        :rtype: tuple[list[ChatTurn], str | None]
        """
        turns = normalize_history(history)
        turns.append(ChatTurn(role=ChatRole.USER, parts=[prompt]))
        if self.strategy == SYSTEM_INSTRUCTION:
            return turns, system_message
        return [ChatTurn(role=ChatRole.USER, parts=[system_message]), *turns], None

    async def ask(
        self,
        bot_config: BotConfig,
        prompt: str,
        history: list[dict[str, Any]] | None = None,
    ) -> str:
        system_message = generate_system_message(bot_config)
        turns, system_instruction = self.build_turns(system_message, history, prompt)

        # Output ceiling is global; the bot's max_response_length only shapes the prompt.
        result = await self.gemini.generate(
            turns,
            max_output_tokens=self.max_output_tokens,
            system_instruction=system_instruction,
        )
        if not result.success:
            logger.error(f"Relay for bot {bot_config.bot_id} failed: {result.error}")
            raise UpstreamError()

        return result.response
