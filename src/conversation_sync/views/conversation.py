"""
View model for the open conversation.

Holds the messages of at most one chat. Every refresh replaces the list
wholesale with a fresh read from the gateway; there is no local patching, so
anything the store added on its own shows up on the next refresh.

Refreshes are ticketed like the chat list's: a read that started before an
already applied one is dropped, so a slow read cannot hide a completed send.
"""

from enum import StrEnum

from loguru import logger

from conversation_sync.data_models.message import Message
from conversation_sync.data_models.result import FailureReason, OperationResult
from conversation_sync.data_models.session import SessionContext
from conversation_sync.gateway.base import ChatGateway


class ConversationState(StrEnum):
    NO_CHAT = "no_chat"
    EMPTY = "empty"
    LOADED = "loaded"


class ConversationViewModel:
    def __init__(self, gateway: ChatGateway, session: SessionContext, chat_id: str | None = None):
        self.gateway = gateway
        self.session = session
        self._chat_id = chat_id
        self._messages: list[Message] = []
        self._started = 0
        self._applied = 0

    @property
    def chat_id(self) -> str | None:
        return self._chat_id

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    @property
    def state(self) -> ConversationState:
        if self._chat_id is None:
            return ConversationState.NO_CHAT
        return ConversationState.LOADED if self._messages else ConversationState.EMPTY

    def select(self, chat_id: str | None) -> None:
        if chat_id == self._chat_id:
            return
        self._chat_id = chat_id
        self._messages = []

    def clear(self) -> None:
        self._chat_id = None
        self._messages = []

    async def refresh(self) -> OperationResult[list[Message]]:
        chat_id = self._chat_id
        if chat_id is None:
            return OperationResult.failure(FailureReason.NO_CHAT)

        self._started += 1
        ticket = self._started
        try:
            messages = await self.gateway.list_messages_for_chat(self.session, chat_id, fresh=True)
        except Exception as e:
            logger.error(f"Error fetching messages for chat {chat_id}: {e!r}")
            return OperationResult.failure(FailureReason.FETCH_FAILED, str(e))

        # selection may have changed while the read was in flight
        if chat_id != self._chat_id:
            logger.debug(f"Discarding messages of chat {chat_id}, no longer selected")
            return OperationResult.failure(FailureReason.STALE)

        if ticket < self._applied:
            logger.debug(f"Dropping messages read #{ticket} of chat {chat_id}, #{self._applied} already applied")
            return OperationResult.failure(FailureReason.STALE)

        self._applied = ticket
        self._messages = list(messages)
        logger.debug(f"Chat {chat_id}: {len(self._messages)} message(s)")
        return OperationResult.success(self.messages)
