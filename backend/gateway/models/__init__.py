"""
Bot gateway models.

Usage:
    from gateway.models import BotConfig, BotConfigCreate, ChatTurn
    from gateway.models import Tone, PersonalityTrait, ChatRole
    from gateway.models import GenerationResult
"""

# --- Enums & utilities ---
from gateway.models.enums import (
    Tone,
    PersonalityTrait,
    ChatRole,
    normalize_role,
)

# --- Domain models ---
from gateway.models.domain import (
    BotConfig, BotConfigCreate, BotConfigUpdate,
    BotConfigEnvelope, BotCreated, BotDeleted, BotPage, Pagination,
    AskRequest, AskResponse, ChatTurn,
)

# --- Result models ---
from gateway.models.results import ServiceResult, GenerationResult

__all__ = [
    # Enums
    "Tone", "PersonalityTrait", "ChatRole", "normalize_role",
    # Domain
    "BotConfig", "BotConfigCreate", "BotConfigUpdate",
    "BotConfigEnvelope", "BotCreated", "BotDeleted", "BotPage", "Pagination",
    "AskRequest", "AskResponse", "ChatTurn",
    # Results
    "ServiceResult", "GenerationResult",
]
