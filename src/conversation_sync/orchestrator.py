"""
Send orchestrator.

'SendOrchestrator.send_message' turns one typed message into a stored
exchange with the responder. The steps run strictly in order and each is
attempted once:

    1  append the user message        - failure aborts the send
    2  touch the chat timestamp       - failure is logged, the send goes on
    3  invoke the responder           - a transport error counts as no reply
    3a append the reply as 'bot'      - when the reply is usable
    3b append a diagnostic 'bot' text - otherwise (payload dump or apology)
    4  touch the chat timestamp again - best-effort, like step 2
    5  re-pull the open conversation and signal a refresh to other views

Every gateway call is an await, so poll ticks can observe the store between
steps. Nothing raises out of 'send_message'; the outcome is a 'SendResult'.
"""

from loguru import logger

from conversation_sync.data_models.message import Message, SenderRole
from conversation_sync.data_models.result import FailureReason, SendResult, SendStatus
from conversation_sync.data_models.session import SessionContext
from conversation_sync.gateway.base import ChatGateway, ResponderReply
from conversation_sync.sync.coordinator import SyncCoordinator
from conversation_sync.views.conversation import ConversationViewModel

MESSAGE_SENT_REASON = "message-sent"


class SendOrchestrator:
    """
    Drives sends for one chat window.

    'processing' is True while a send is in flight; a second 'send_message'
    during that time is rejected without touching the gateway. It is a
    per-instance guard, not a lock across chats.
    """

    def __init__(
        self,
        gateway: ChatGateway,
        session: SessionContext,
        conversation: ConversationViewModel,
        coordinator: SyncCoordinator | None = None,
    ):
        self.gateway = gateway
        self.session = session
        self.conversation = conversation
        self.coordinator = coordinator
        self._processing = False

    @property
    def processing(self) -> bool:
        return self._processing

    async def send_message(self, chat_id: str | None, user_text: str) -> SendResult:
        text = (user_text or "").strip()
        if not chat_id:
            return SendResult(status=SendStatus.REJECTED, reason=FailureReason.NO_CHAT)
        if not text:
            return SendResult(status=SendStatus.REJECTED, reason=FailureReason.EMPTY_TEXT)
        if self._processing:
            logger.debug(f"Send to chat {chat_id} ignored, another send is in flight")
            return SendResult(status=SendStatus.REJECTED, reason=FailureReason.BUSY)

        self._processing = True
        logger.debug(f"Sending message to chat {chat_id}")
        try:
            return await self._run(chat_id, text)
        except Exception as e:
            logger.exception(f"Error sending message to chat {chat_id}: {e!r}")
            return SendResult(status=SendStatus.FAILED, reason=FailureReason.UNEXPECTED, detail=str(e))
        finally:
            self._processing = False

    async def _run(self, chat_id: str, text: str) -> SendResult:
        try:
            user_message = await self.gateway.append_message(self.session, chat_id, text, SenderRole.USER)
        except Exception as e:
            logger.error(f"Error inserting user message into chat {chat_id}: {e!r}")
            return SendResult(status=SendStatus.FAILED, reason=FailureReason.APPEND_FAILED, detail=str(e))

        await self._touch(chat_id)

        reply = await self._invoke_responder(chat_id, text)
        if reply.usable:
            content = reply.text or ""
        else:
            logger.warning(f"Responder gave no usable reply for chat {chat_id}, storing diagnostic message")
            content = reply.diagnostic_text()

        result = SendResult(status=SendStatus.COMPLETED, user_message=user_message, responder_succeeded=reply.usable)
        result.bot_message = await self._append_bot_message(chat_id, content)
        if result.bot_message is None:
            result.reason = FailureReason.RESPONSE_APPEND_FAILED

        await self._touch(chat_id)

        await self.conversation.refresh()
        if self.coordinator is not None:
            await self.coordinator.request_refresh(MESSAGE_SENT_REASON)
        return result

    async def _touch(self, chat_id: str) -> None:
        try:
            await self.gateway.touch_chat_timestamp(self.session, chat_id)
        except Exception as e:
            logger.warning(f"Error updating chat timestamp for {chat_id}: {e!r}")

    async def _invoke_responder(self, chat_id: str, text: str) -> ResponderReply:
        try:
            reply = await self.gateway.invoke_responder(self.session, chat_id, text)
        except Exception as e:
            logger.error(f"Error sending message to responder for chat {chat_id}: {e!r}")
            return ResponderReply.transport_failure()
        logger.debug(f"Responder reply for chat {chat_id}: success={reply.success}")
        return reply

    async def _append_bot_message(self, chat_id: str, content: str) -> Message | None:
        try:
            return await self.gateway.append_message(self.session, chat_id, content, SenderRole.BOT)
        except Exception as e:
            logger.error(f"Error inserting bot message into chat {chat_id}: {e!r}")
            return None
