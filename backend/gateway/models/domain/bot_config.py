"""Bot configuration domain model."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from gateway.models.enums import PersonalityTrait, Tone

DEFAULT_PRIMARY_ROLE = "customer support assistant"
DEFAULT_BUSINESS_HOURS = "9 AM - 5 PM"
DEFAULT_LANGUAGE = "English"
DEFAULT_FALLBACK_MESSAGE = (
    "I apologize, but I can only assist with questions related to our company and services."
)
DEFAULT_GREETING_MESSAGE = "Hello! How can I help you today?"
MIN_RESPONSE_LENGTH = 100
MAX_RESPONSE_LENGTH = 2000


class CamelModel(BaseModel):
    """Base model exposing camelCase names on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class BotConfigCreate(CamelModel):
    """Payload for creating a new bot."""
    bot_id: Optional[str] = None
    company_name: str = Field(min_length=1)
    industry: Optional[str] = None
    allowed_origins: list[str] = Field(default_factory=list)
    tone: Tone = Tone.PROFESSIONAL
    primary_role: str = DEFAULT_PRIMARY_ROLE
    allowed_topics: list[str] = Field(default_factory=list)
    restrictions: list[str] = Field(default_factory=list)
    website_url: Optional[str] = None
    support_email: Optional[str] = None
    business_hours: Optional[str] = DEFAULT_BUSINESS_HOURS
    max_response_length: int = Field(1000, ge=MIN_RESPONSE_LENGTH, le=MAX_RESPONSE_LENGTH)
    language: str = DEFAULT_LANGUAGE
    personality_traits: list[PersonalityTrait] = Field(default_factory=list)
    fallback_message: str = DEFAULT_FALLBACK_MESSAGE
    greeting_message: str = DEFAULT_GREETING_MESSAGE
    created_by: Optional[str] = None


class BotConfigUpdate(CamelModel):
    """Payload for a partial bot update. Unset fields are left untouched."""
    bot_id: Optional[str] = None
    created_by: Optional[str] = None
    company_name: Optional[str] = Field(None, min_length=1)
    industry: Optional[str] = None
    allowed_origins: Optional[list[str]] = None
    tone: Optional[Tone] = None
    primary_role: Optional[str] = None
    allowed_topics: Optional[list[str]] = None
    restrictions: Optional[list[str]] = None
    website_url: Optional[str] = None
    support_email: Optional[str] = None
    business_hours: Optional[str] = None
    max_response_length: Optional[int] = Field(None, ge=MIN_RESPONSE_LENGTH, le=MAX_RESPONSE_LENGTH)
    language: Optional[str] = None
    personality_traits: Optional[list[PersonalityTrait]] = None
    fallback_message: Optional[str] = None
    greeting_message: Optional[str] = None


class BotConfig(CamelModel):
    """A tenant: one configured bot persona and its access policy."""
    bot_id: str
    company_name: str
    industry: Optional[str] = None
    allowed_origins: list[str] = Field(default_factory=list)
    tone: Tone = Tone.PROFESSIONAL
    primary_role: str = DEFAULT_PRIMARY_ROLE
    allowed_topics: list[str] = Field(default_factory=list)
    restrictions: list[str] = Field(default_factory=list)
    website_url: Optional[str] = None
    support_email: Optional[str] = None
    business_hours: Optional[str] = None
    max_response_length: int = Field(1000, ge=MIN_RESPONSE_LENGTH, le=MAX_RESPONSE_LENGTH)
    language: str = DEFAULT_LANGUAGE
    personality_traits: list[PersonalityTrait] = Field(default_factory=list)
    fallback_message: str = DEFAULT_FALLBACK_MESSAGE
    greeting_message: str = DEFAULT_GREETING_MESSAGE
    created_by: str = "admin"
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class BotConfigEnvelope(CamelModel):
    """A stored bot together with its generated system message."""
    bot_config: BotConfig
    system_message: str


class BotCreated(BotConfigEnvelope):
    """Response to a successful bot creation."""
    bot_id: str


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class BotPage(CamelModel):
    """One page of active bots."""
    bots: list[BotConfig]
    pagination: Pagination


class BotDeleted(CamelModel):
    message: str
    bot_id: str
