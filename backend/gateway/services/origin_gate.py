"""
Tenant-scoped origin validation for the relay endpoint.

Unlike a static CORS policy, the allow-list belongs to the bot named in
the request, so the bot must be resolved before the origin can be judged.
"""

import aiosqlite

from gateway.errors import (
    BotNotFoundError,
    ForbiddenOriginError,
    GateFailureError,
    MissingParameterError,
)
from gateway.logging import get_logger
from gateway.models import BotConfig
from gateway.services.bot_config import BotConfigService

logger = get_logger('services.origin_gate')

PREFLIGHT_METHOD = "OPTIONS"


def cors_headers(origin: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Credentials": "true",
        "Vary": "Origin",
    }


class OriginGate:
    """Admits a request only if its origin is on the bot's allow-list."""

    def __init__(self, bots: BotConfigService):
        self.bots = bots

    async def resolve(self, origin: str | None, bot_id: str | None) -> BotConfig:
        if not origin or not bot_id:
            raise MissingParameterError("Origin and botId are required for CORS validation")

        try:
            bot = await self.bots.get_bot(bot_id)
        except aiosqlite.Error as exc:
            logger.error(f"Bot lookup failed during origin validation for {bot_id}: {exc}")
            raise GateFailureError() from exc

        if bot is None:
            raise BotNotFoundError()

        # Exact membership: no wildcards, no case folding.
        if origin not in bot.allowed_origins:
            logger.warning(f"Origin {origin} not allowed for bot {bot_id}")
            raise ForbiddenOriginError()

        return bot
