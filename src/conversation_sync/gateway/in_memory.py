"""
In-process gateway backed by plain dicts.

Used for tests, demos and local runs. It behaves like the remote store: it
assigns ids and timestamps, only lets a user see their own chats, and answers
responder calls through a pluggable 'Responder'. Timestamps handed out are
strictly increasing so that messages appended in sequence keep their order
even when the clock does not advance between calls.
"""

from collections.abc import Callable
from datetime import datetime, timedelta

from loguru import logger

from conversation_sync.data_models.chat import Chat
from conversation_sync.data_models.message import Message, SenderRole
from conversation_sync.data_models.session import SessionContext
from conversation_sync.gateway.base import (
    ChatGateway,
    ChatNotFoundError,
    GatewayError,
    ResponderReply,
    normalize_responder_payload,
)
from conversation_sync.responders.base import EchoResponder, Responder
from conversation_sync.utils.database import generate_uid
from conversation_sync.utils.time import get_current_timestamp


class InMemoryChatGateway(ChatGateway):
    def __init__(
        self,
        responder: Responder | None = None,
        clock: Callable[[], datetime] = get_current_timestamp,
    ):
        self.responder = responder or EchoResponder()
        self._clock = clock
        self._last_timestamp: datetime | None = None
        self._chats: dict[str, Chat] = {}
        self._messages: dict[str, list[Message]] = {}

    def _next_timestamp(self) -> datetime:
        now = self._clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def _owned_chat(self, session: SessionContext, chat_id: str) -> Chat:
        chat = self._chats.get(chat_id)
        if chat is None or chat.user_id != session.user_id:
            raise ChatNotFoundError(chat_id)
        return chat

    def _snapshot(self, chat: Chat) -> Chat:
        return chat.model_copy(update={"messages": list(self._messages[chat.id])})

    async def create_chat(self, session: SessionContext) -> Chat:
        created_at = self._next_timestamp()
        chat = Chat(id=generate_uid(), user_id=session.user_id, created_at=created_at, updated_at=created_at)
        self._chats[chat.id] = chat
        self._messages[chat.id] = []
        logger.debug(f"Created chat {chat.id} for user {session.user_id}")
        return self._snapshot(chat)

    async def append_message(
        self,
        session: SessionContext,
        chat_id: str,
        content: str,
        sender_type: SenderRole,
    ) -> Message:
        self._owned_chat(session, chat_id)
        message = Message(
            id=generate_uid(),
            chat_id=chat_id,
            content=content,
            sender_type=SenderRole(sender_type),
            created_at=self._next_timestamp(),
        )
        self._messages[chat_id].append(message)
        return message

    async def touch_chat_timestamp(self, session: SessionContext, chat_id: str) -> Chat:
        chat = self._owned_chat(session, chat_id)
        chat.updated_at = self._next_timestamp()
        return self._snapshot(chat)

    async def invoke_responder(self, session: SessionContext, chat_id: str, content: str) -> ResponderReply:
        self._owned_chat(session, chat_id)
        try:
            output = await self.responder.respond(chat_id, content)
        except GatewayError:
            raise
        except Exception as e:
            raise GatewayError(f"Responder call failed: {e}") from e
        return normalize_responder_payload(output.success, output.message)

    async def list_chats_for_user(self, session: SessionContext) -> list[Chat]:
        chats = [chat for chat in self._chats.values() if chat.user_id == session.user_id]
        chats.sort(key=lambda c: c.last_activity, reverse=True)
        return [self._snapshot(chat) for chat in chats]

    async def list_messages_for_chat(
        self, session: SessionContext, chat_id: str, fresh: bool = False
    ) -> list[Message]:
        self._owned_chat(session, chat_id)
        return sorted(self._messages[chat_id], key=lambda m: m.created_at)
