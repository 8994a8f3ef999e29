"""
Chat endpoints: conversations with the hiring assistant.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from hiring_platform.api.auth import get_current_user
from hiring_platform.config import settings
from hiring_platform.errors import FieldError, ValidationError
from hiring_platform.models.user import User
from hiring_platform.schemas.chat import (
    Message,
    Conversation,
    ConversationSummary,
    SendMessageRequest,
    SendMessageResponse,
    CreateConversationRequest,
)
from hiring_platform.services.chat import ChatService
from hiring_platform.services.completion import CompletionClient, get_completion_client
from hiring_platform.services.conversation_store import ConversationStore, InMemoryConversationStore

logger = logging.getLogger(__name__)
router = APIRouter()

conversation_store = InMemoryConversationStore()


def get_conversation_store() -> ConversationStore:
    return conversation_store


def get_chat_service(
    store: ConversationStore = Depends(get_conversation_store),
    client: CompletionClient = Depends(get_completion_client),
) -> ChatService:
    return ChatService(store, client, history_window=settings.chat_history_window)


@router.post("/messages", response_model=SendMessageResponse, status_code=201)
async def send_message(
    request: SendMessageRequest,
    current_user: User = Depends(get_current_user),
    chat: ChatService = Depends(get_chat_service),
):
    """Send a message and get the assistant's reply."""
    user_message, ai_message = await chat.send_message(
        request.conversation_id, request.content, current_user.id
    )
    return SendMessageResponse(user_message=user_message, ai_message=ai_message)


@router.get("/messages", response_model=list[Message])
async def get_messages(
    conversation_id: Optional[str] = Query(None, alias="conversationId"),
    current_user: User = Depends(get_current_user),
    chat: ChatService = Depends(get_chat_service),
):
    """Messages of a conversation in the order they were sent."""
    if not conversation_id:
        raise ValidationError([FieldError("conversationId", "Conversation ID is required")])
    return chat.get_messages(conversation_id)


@router.get("/conversations", response_model=list[ConversationSummary])
async def list_conversations(
    current_user: User = Depends(get_current_user),
    chat: ChatService = Depends(get_chat_service),
):
    """Conversations the current user takes part in."""
    return chat.list_conversations(current_user.id)


@router.post("/conversations", response_model=Conversation, status_code=201)
async def create_conversation(
    request: CreateConversationRequest,
    current_user: User = Depends(get_current_user),
    chat: ChatService = Depends(get_chat_service),
):
    """Start a new, empty conversation."""
    return chat.create_conversation(request.participant_ids, current_user.id)
