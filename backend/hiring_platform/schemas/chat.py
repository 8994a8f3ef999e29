"""Chat Pydantic schemas."""
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from hiring_platform.schemas.common import CamelModel


class Message(CamelModel):
    id: str
    conversation_id: str
    sender_id: str
    content: str
    role: Literal["user", "assistant"]
    timestamp: datetime


class Conversation(CamelModel):
    id: str
    participants: list[str]
    created_by: str
    created_at: datetime


class SendMessageRequest(CamelModel):
    conversation_id: str = Field(min_length=1)
    content: str = Field(min_length=1)


class SendMessageResponse(CamelModel):
    user_message: Message
    ai_message: Message


class CreateConversationRequest(CamelModel):
    participant_ids: list[str]


class ConversationSummary(CamelModel):
    id: str
    participants: list[str]
    created_at: datetime
    last_message: Optional[Message] = None
