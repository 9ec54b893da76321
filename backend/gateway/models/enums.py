"""
Enum definitions for bot configuration.

Both enums are closed: values outside them are rejected when a record is
written, so downstream code can map them exhaustively.
"""
from enum import Enum


class Tone(str, Enum):
    """Conversational tone of a bot."""
    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    CASUAL = "casual"
    FORMAL = "formal"
    ENTHUSIASTIC = "enthusiastic"
    HELPFUL = "helpful"


class PersonalityTrait(str, Enum):
    """Personality traits a bot may be asked to show."""
    PATIENT = "patient"
    KNOWLEDGEABLE = "knowledgeable"
    EMPATHETIC = "empathetic"
    EFFICIENT = "efficient"
    DETAIL_ORIENTED = "detail-oriented"
    PROACTIVE = "proactive"


class ChatRole(str, Enum):
    """Roles understood by the generation service."""
    USER = "user"
    MODEL = "model"


def normalize_role(role) -> ChatRole:
    """
    Map a caller-supplied history role onto a generation-service role.

    Examples:
        "model" -> ChatRole.MODEL
        "assistant" -> ChatRole.MODEL
        None -> ChatRole.USER
    """
    raw = str(role or "").strip().lower()
    if raw in {"model", "assistant", "bot"}:
        return ChatRole.MODEL
    return ChatRole.USER
