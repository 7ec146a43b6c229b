"""
Chat application controller (Facade).

'ChatAppController' is the single entry point a front-end talks to. It
resolves the session through the 'AuthProvider', owns the selected chat and
the draft input, and wires the gateway, both view models, the send
orchestrator, the coordinator and the poller together.

Lifecycle:

    'mount'    - resolve the session, build the components, start polling and
                 load the chat list. Returns False when nobody is signed in.
    'unmount'  - stop polling and discard both in-memory lists.
    'sign_out' - 'unmount' plus signing out with the auth provider.
"""

from loguru import logger

from conversation_sync.auth.base import AuthProvider
from conversation_sync.config import Settings
from conversation_sync.data_models.chat import Chat
from conversation_sync.data_models.result import FailureReason, OperationResult, SendResult, SendStatus
from conversation_sync.data_models.session import SessionContext
from conversation_sync.gateway.base import ChatGateway
from conversation_sync.orchestrator import SendOrchestrator
from conversation_sync.sync.coordinator import SyncCoordinator
from conversation_sync.sync.poller import IntervalPoller
from conversation_sync.views.chat_list import ChatListViewModel
from conversation_sync.views.conversation import ConversationViewModel


class ChatAppController:
    def __init__(self, gateway: ChatGateway, auth: AuthProvider, settings: Settings | None = None):
        self.gateway = gateway
        self.auth = auth
        self.settings = settings or Settings()
        self.draft = ""
        self.session: SessionContext | None = None
        self.coordinator: SyncCoordinator | None = None
        self.chat_list: ChatListViewModel | None = None
        self.conversation: ConversationViewModel | None = None
        self.orchestrator: SendOrchestrator | None = None

    @property
    def mounted(self) -> bool:
        return self.session is not None

    @property
    def selected_chat_id(self) -> str | None:
        return self.conversation.chat_id if self.conversation is not None else None

    @property
    def processing(self) -> bool:
        return self.orchestrator is not None and self.orchestrator.processing

    async def mount(self) -> bool:
        if self.mounted:
            return True

        session = await self.auth.resolve_session()
        if session is None:
            logger.info("No signed-in user, sign-in required")
            return False

        self.session = session
        self.coordinator = SyncCoordinator()
        self.conversation = ConversationViewModel(self.gateway, session)
        self.chat_list = ChatListViewModel(
            self.gateway,
            session,
            coordinator=self.coordinator,
            on_chat_created=self.select_chat,
            preview_length=self.settings.preview_length,
        )
        self.orchestrator = SendOrchestrator(self.gateway, session, self.conversation, self.coordinator)
        self.coordinator.attach(IntervalPoller(self.coordinator, self.settings.poll_interval_seconds))
        self.coordinator.start()
        logger.info(f"Mounted chat client for user {session.user_id}")

        await self.chat_list.refresh()
        return True

    def select_chat(self, chat_id: str | None) -> None:
        if self.conversation is None:
            return
        self.conversation.select(chat_id)

    async def open_chat(self, chat_id: str | None) -> OperationResult:
        """Select 'chat_id' and load its messages."""
        if self.conversation is None:
            return OperationResult.failure(FailureReason.NO_SESSION)
        self.select_chat(chat_id)
        if chat_id is None:
            return OperationResult.success()
        return await self.conversation.refresh()

    async def new_chat(self) -> OperationResult[Chat]:
        if self.chat_list is None:
            return OperationResult.failure(FailureReason.NO_SESSION)
        result = await self.chat_list.create_chat()
        if result.ok and self.conversation is not None:
            await self.conversation.refresh()
        return result

    async def submit(self) -> SendResult:
        """Send the current draft to the selected chat.

        The draft is cleared before the send starts. If the user message cannot
        be stored the text is lost unless 'restore_draft_on_failure' is set.
        """
        if self.orchestrator is None:
            return SendResult(status=SendStatus.REJECTED, reason=FailureReason.NO_SESSION)

        text = self.draft
        if not text.strip() or self.selected_chat_id is None or self.orchestrator.processing:
            return await self.orchestrator.send_message(self.selected_chat_id, text)

        self.draft = ""
        result = await self.orchestrator.send_message(self.selected_chat_id, text)
        if result.status == SendStatus.FAILED and self.settings.restore_draft_on_failure and not self.draft:
            self.draft = text
        return result

    async def unmount(self) -> None:
        if self.coordinator is not None:
            await self.coordinator.stop()
        if self.chat_list is not None:
            self.chat_list.discard()
        if self.conversation is not None:
            self.conversation.clear()
        self.session = None
        self.coordinator = None
        self.chat_list = None
        self.conversation = None
        self.orchestrator = None
        self.draft = ""

    async def sign_out(self) -> None:
        await self.unmount()
        await self.auth.sign_out()
        logger.info("Signed out")
