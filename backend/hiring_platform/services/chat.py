"""Chat assistant: conversation turns forwarded to the hosted LLM."""
import logging
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from hiring_platform.schemas.chat import Conversation, Message, ConversationSummary
from hiring_platform.services.completion import CompletionClient
from hiring_platform.services.conversation_store import ConversationStore

logger = logging.getLogger(__name__)

ASSISTANT_SENDER_ID = "assistant"

SYSTEM_PROMPT = (
    "You are a hiring assistant for a recruitment platform. Help recruiters with job "
    "descriptions, resume screening and interview questions, and help applicants with "
    "their job search and applications. Keep answers concise and practical."
)


def new_message(conversation_id: str, sender_id: str, content: str, role: str) -> Message:
    return Message(
        id=str(uuid.uuid4()),
        conversation_id=conversation_id,
        sender_id=sender_id,
        content=content,
        role=role,
        timestamp=datetime.utcnow(),
    )


class ChatService:
    def __init__(
        self,
        store: ConversationStore,
        client: CompletionClient,
        history_window: Optional[int] = None,
    ):
        self.store = store
        self.client = client
        self.history_window = history_window

    def _prompt(self, history: List[Message]) -> List[dict]:
        if self.history_window:
            history = history[-self.history_window:]
        return [{"role": "system", "content": SYSTEM_PROMPT}] + [
            {"role": m.role, "content": m.content} for m in history
        ]

    async def send_message(self, conversation_id: str, content: str, sender_id: str) -> Tuple[Message, Message]:
        """
        Add a user turn and the assistant's reply to a conversation.

        The conversation is locked for the whole turn so concurrent sends are
        applied one after the other. Both messages are stored only once the
        provider has replied; on failure the conversation is left unchanged.
        """
        async with self.store.lock(conversation_id):
            user_message = new_message(conversation_id, sender_id, content, "user")
            history = self.store.get(conversation_id) + [user_message]

            reply = await self.client.complete(self._prompt(history))

            ai_message = new_message(conversation_id, ASSISTANT_SENDER_ID, reply, "assistant")
            self.store.append(conversation_id, user_message)
            self.store.append(conversation_id, ai_message)

        logger.info(f"Message sent in conversation {conversation_id} by user {sender_id}")
        return user_message, ai_message

    def get_messages(self, conversation_id: str) -> List[Message]:
        return self.store.get(conversation_id)

    def create_conversation(self, participant_ids: List[str], user_id: str) -> Conversation:
        # dict.fromkeys de-duplicates while keeping first-seen order
        participants = list(dict.fromkeys([*participant_ids, user_id]))
        conversation = self.store.create(participants, created_by=user_id)
        logger.info(
            f"Created new conversation {conversation.id} with participants: {', '.join(participants)}"
        )
        return conversation

    def list_conversations(self, user_id: str) -> List[ConversationSummary]:
        summaries = []
        for conversation in self.store.list_for_user(user_id):
            messages = self.store.get(conversation.id)
            summaries.append(ConversationSummary(
                id=conversation.id,
                participants=conversation.participants,
                created_at=conversation.created_at,
                last_message=messages[-1] if messages else None,
            ))
        return summaries
