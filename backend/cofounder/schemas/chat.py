"""Chat Pydantic schemas for the relay and persisted chat endpoints."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ChatMessageIn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRelayRequest(BaseModel):
    """Relay body; keys follow the browser client's camelCase wire format."""

    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessageIn] = Field(min_length=1)
    user_context: str = Field(default="", alias="userContext")
    conversation_context: str = Field(default="", alias="conversationContext")
    context_type: str = Field(default="general", alias="contextType")
    user_country: str | None = Field(default=None, alias="userCountry")
    current_date: str | None = Field(default=None, alias="currentDate")


class SendMessageRequest(BaseModel):
    content: str = Field(min_length=1)
    context_type: str = "general"
    context_id: str | None = None
    user_country: str | None = None
    current_date: str | None = None


class ChatMessageResponse(BaseModel):
    id: UUID
    role: str
    content: str
    context_type: str | None
    context_id: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ChatContextResponse(BaseModel):
    user_context: str
    conversation_context: str
