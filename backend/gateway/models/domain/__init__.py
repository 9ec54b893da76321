"""Domain models for bot configuration and chat relay."""

from gateway.models.domain.bot_config import (
    BotConfig,
    BotConfigCreate,
    BotConfigUpdate,
    BotConfigEnvelope,
    BotCreated,
    BotDeleted,
    BotPage,
    Pagination,
)
from gateway.models.domain.chat import AskRequest, AskResponse, ChatTurn

__all__ = [
    "BotConfig", "BotConfigCreate", "BotConfigUpdate",
    "BotConfigEnvelope", "BotCreated", "BotDeleted", "BotPage", "Pagination",
    "AskRequest", "AskResponse", "ChatTurn",
]
