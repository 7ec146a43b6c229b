"""
View model for the signed-in user's chat list.

The list is rebuilt wholesale from 'list_chats_for_user' on every refresh and
kept ordered by last activity, newest first. Refreshes come from three places
that all end up in 'refresh': the interval poller, chat creation and completed
sends, the latter two via the 'SyncCoordinator'.

Poll ticks and explicit refreshes can overlap. Each refresh takes a ticket when
it starts and a result is only applied if no refresh that started later has
already been applied, so a slow poll cannot overwrite the list with data older
than a send that has already completed.
"""

from collections.abc import Callable, Sequence
from datetime import datetime

from loguru import logger
from pydantic import BaseModel

from conversation_sync.data_models.chat import Chat
from conversation_sync.data_models.message import Message
from conversation_sync.data_models.result import FailureReason, OperationResult
from conversation_sync.data_models.session import SessionContext
from conversation_sync.gateway.base import ChatGateway
from conversation_sync.sync.coordinator import SyncCoordinator

NEW_CHAT_PREVIEW = "New chat"
PREVIEW_LENGTH = 50
ELLIPSIS = "..."
CHAT_CREATED_REASON = "chat-created"


def preview_text(messages: Sequence[Message], limit: int = PREVIEW_LENGTH) -> str:
    """Content of the last message, cut to 'limit' characters plus an ellipsis."""
    if not messages:
        return NEW_CHAT_PREVIEW
    content = messages[-1].content
    return content[:limit] + ELLIPSIS if len(content) > limit else content


def format_display_date(timestamp: datetime, now: datetime | None = None) -> str:
    """Clock time within a day, weekday within a week, otherwise month and day."""
    now = now or datetime.now(timestamp.tzinfo)
    hours = (now - timestamp).total_seconds() / 3600
    if hours < 24:
        return timestamp.strftime("%H:%M")
    if hours < 24 * 7:
        return timestamp.strftime("%a")
    return f"{timestamp:%b} {timestamp.day}"


def sort_chats(chats: Sequence[Chat]) -> list[Chat]:
    """Last activity descending, then creation time descending; otherwise input order."""
    return sorted(chats, key=lambda c: (c.last_activity, c.created_at), reverse=True)


class ChatListItem(BaseModel):
    chat_id: str
    preview: str
    display_timestamp: datetime
    created_at: datetime
    message_count: int

    @classmethod
    def from_chat(cls, chat: Chat, preview_length: int = PREVIEW_LENGTH) -> "ChatListItem":
        return cls(
            chat_id=chat.id,
            preview=preview_text(chat.messages, preview_length),
            display_timestamp=chat.last_activity,
            created_at=chat.created_at,
            message_count=len(chat.messages),
        )

    def display_date(self, now: datetime | None = None) -> str:
        return format_display_date(self.display_timestamp, now)


class ChatListViewModel:
    """
    Chat list for one session.

    Attributes:
        on_chat_created: Called with the new chat's id after a successful
            'create_chat', typically to make it the selected chat.
        creating: True while a 'create_chat' call is in flight.
    """

    def __init__(
        self,
        gateway: ChatGateway,
        session: SessionContext,
        coordinator: SyncCoordinator | None = None,
        on_chat_created: Callable[[str], None] | None = None,
        preview_length: int = PREVIEW_LENGTH,
    ):
        self.gateway = gateway
        self.session = session
        self.coordinator = coordinator
        self.on_chat_created = on_chat_created
        self.preview_length = preview_length
        self.creating = False
        self._items: list[ChatListItem] = []
        self._started = 0
        self._applied = 0
        self._unsubscribe: Callable[[], None] | None = None
        if coordinator is not None:
            self._unsubscribe = coordinator.subscribe(self._on_refresh_signal)

    @property
    def items(self) -> list[ChatListItem]:
        return list(self._items)

    def item(self, chat_id: str) -> ChatListItem | None:
        return next((item for item in self._items if item.chat_id == chat_id), None)

    async def _on_refresh_signal(self, reason: str) -> None:
        logger.debug(f"Chat list refresh ({reason})")
        await self.refresh()

    async def refresh(self) -> OperationResult[list[ChatListItem]]:
        self._started += 1
        ticket = self._started
        try:
            chats = await self.gateway.list_chats_for_user(self.session)
        except Exception as e:
            logger.error(f"Error fetching chats for user {self.session.user_id}: {e!r}")
            return OperationResult.failure(FailureReason.FETCH_FAILED, str(e))

        if ticket < self._applied:
            logger.debug(f"Dropping chat list result #{ticket}, #{self._applied} already applied")
            return OperationResult.failure(FailureReason.STALE)

        self._applied = ticket
        self._items = [ChatListItem.from_chat(chat, self.preview_length) for chat in sort_chats(chats)]
        return OperationResult.success(self.items)

    async def create_chat(self) -> OperationResult[Chat]:
        if not self.session.user_id:
            logger.error("User ID not available")
            return OperationResult.failure(FailureReason.NO_SESSION)
        if self.creating:
            return OperationResult.failure(FailureReason.BUSY)

        logger.info(f"Creating chat for user {self.session.user_id}")
        self.creating = True
        try:
            chat = await self.gateway.create_chat(self.session)
        except Exception as e:
            logger.error(f"Error creating chat: {e!r}")
            return OperationResult.failure(FailureReason.CREATE_FAILED, str(e))
        finally:
            self.creating = False

        if self.on_chat_created is not None:
            self.on_chat_created(chat.id)
        if self.coordinator is not None:
            await self.coordinator.request_refresh(CHAT_CREATED_REASON)
        else:
            await self.refresh()
        return OperationResult.success(chat)

    def discard(self) -> None:
        """Drop the list and stop listening, e.g. on sign-out."""
        self._items = []
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
