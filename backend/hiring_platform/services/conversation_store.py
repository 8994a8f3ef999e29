"""
Conversation storage for the chat assistant.

`ConversationStore` is the interface the chat service depends on; the
in-memory implementation keeps everything in process (lost on restart) and
serialises writers per conversation with an asyncio.Lock.
"""
import asyncio
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, Dict, List, Optional, Protocol

from hiring_platform.schemas.chat import Conversation, Message


class ConversationStore(Protocol):
    def get(self, conversation_id: str) -> List[Message]: ...

    def append(self, conversation_id: str, message: Message) -> None: ...

    def create(self, participants: List[str], created_by: str) -> Conversation: ...

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]: ...

    def list_for_user(self, user_id: str) -> List[Conversation]: ...

    def lock(self, conversation_id: str): ...


@dataclass
class _Entry:
    conversation: Conversation
    messages: List[Message] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class InMemoryConversationStore:
    """Process-local conversation store. No persistence, no eviction."""

    def __init__(self):
        self._entries: Dict[str, _Entry] = {}

    def _entry(self, conversation_id: str, created_by: str = "") -> _Entry:
        entry = self._entries.get(conversation_id)
        if entry is None:
            entry = _Entry(
                conversation=Conversation(
                    id=conversation_id,
                    participants=[created_by] if created_by else [],
                    created_by=created_by,
                    created_at=datetime.utcnow(),
                )
            )
            self._entries[conversation_id] = entry
        return entry

    def get(self, conversation_id: str) -> List[Message]:
        """Messages in insertion order; unknown ids give an empty list."""
        entry = self._entries.get(conversation_id)
        return list(entry.messages) if entry else []

    def append(self, conversation_id: str, message: Message) -> None:
        entry = self._entry(conversation_id)
        if not entry.conversation.created_by:
            # Conversation started implicitly by its first message
            entry.conversation.created_by = message.sender_id
            entry.conversation.participants.append(message.sender_id)
        entry.messages.append(message)

    def create(self, participants: List[str], created_by: str) -> Conversation:
        conversation_id = str(uuid.uuid4())
        entry = self._entry(conversation_id, created_by=created_by)
        entry.conversation.participants = list(participants)
        return entry.conversation

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        entry = self._entries.get(conversation_id)
        return entry.conversation if entry else None

    def list_for_user(self, user_id: str) -> List[Conversation]:
        """Conversations the user participates in or has written to."""
        return [
            entry.conversation
            for entry in self._entries.values()
            if user_id in entry.conversation.participants
            or any(m.sender_id == user_id for m in entry.messages)
        ]

    @asynccontextmanager
    async def lock(self, conversation_id: str) -> AsyncIterator[None]:
        """Hold the conversation's write lock (creating the conversation if needed)."""
        entry = self._entry(conversation_id)
        async with entry.lock:
            yield
