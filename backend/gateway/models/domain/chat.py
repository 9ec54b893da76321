"""Chat relay domain models."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from gateway.models.domain.bot_config import CamelModel
from gateway.models.enums import ChatRole


class AskRequest(CamelModel):
    """
    Body of a relay request.

    ``prompt`` and ``botId`` are optional here so that their absence is
    reported as a missing parameter rather than a schema error.
    """
    prompt: Optional[str] = None
    history: Optional[list[dict[str, Any]]] = None
    bot_id: Optional[str] = None


class AskResponse(BaseModel):
    response: str


class ChatTurn(BaseModel):
    """One role-tagged turn of the outbound message sequence."""
    role: ChatRole
    parts: list[str] = Field(default_factory=list)
