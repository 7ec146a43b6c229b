"""Unit tests for the send orchestrator."""
import asyncio

import pytest

from conversation_sync.data_models import FailureReason, SenderRole, SendStatus
from conversation_sync.gateway import APOLOGY_TEXT, NO_MESSAGE_TEXT, GatewayError
from conversation_sync.orchestrator import MESSAGE_SENT_REASON, SendOrchestrator
from conversation_sync.responders import ResponderOutput
from conversation_sync.views import ConversationViewModel
from tests.conftest import BlockingResponder, FlakyGateway, ScriptedResponder


async def _open_chat(gateway, session, conversation):
    chat = await gateway.create_chat(session)
    conversation.select(chat.id)
    gateway.calls.clear()
    return chat


def _contents(messages):
    return [(m.sender_type, m.content) for m in messages]


class TestSendMessage:
    """Tests for the successful send path."""

    @pytest.mark.asyncio
    async def test_hello_scenario(self, gateway, session, conversation, coordinator):
        """Test that a send stores the user message followed by the responder's reply."""
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation, coordinator)

        result = await orchestrator.send_message(chat.id, "Hello")

        assert result.ok
        assert result.responder_succeeded
        assert _contents(conversation.messages) == [(SenderRole.USER, "Hello"), (SenderRole.BOT, "Hi there")]
        assert result.user_message.content == "Hello"
        assert result.bot_message.content == "Hi there"

    @pytest.mark.asyncio
    async def test_steps_run_in_order(self, gateway, session, conversation):
        """Test the exact gateway call sequence of one send."""
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        await orchestrator.send_message(chat.id, "Hello")

        assert gateway.calls == [
            "append_message:user",
            "touch_chat_timestamp",
            "invoke_responder",
            "append_message:bot",
            "touch_chat_timestamp",
            "list_messages_for_chat",
        ]

    @pytest.mark.asyncio
    async def test_text_is_trimmed_before_sending(self, gateway, session, conversation, responder):
        """Test that surrounding whitespace is stripped from the stored and forwarded text."""
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        await orchestrator.send_message(chat.id, "  Hello  ")

        assert conversation.messages[0].content == "Hello"
        assert responder.received == ["Hello"]

    @pytest.mark.asyncio
    async def test_each_send_adds_two_messages(self, gateway, session, conversation):
        """Test that repeated sends are not de-duplicated."""
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        await orchestrator.send_message(chat.id, "same")
        await orchestrator.send_message(chat.id, "same")

        assert [m.sender_type for m in conversation.messages] == [
            SenderRole.USER,
            SenderRole.BOT,
            SenderRole.USER,
            SenderRole.BOT,
        ]
        created = [m.created_at for m in conversation.messages]
        assert created == sorted(created)

    @pytest.mark.asyncio
    async def test_chat_timestamp_covers_bot_message(self, gateway, session, conversation):
        """Test that the chat's last activity is not older than its newest message."""
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        result = await orchestrator.send_message(chat.id, "Hello")

        [stored] = await gateway.list_chats_for_user(session)
        assert stored.updated_at >= result.bot_message.created_at

    @pytest.mark.asyncio
    async def test_signals_refresh_after_send(self, gateway, session, conversation, coordinator):
        """Test that other views are told to refresh once the send completes."""
        chat = await _open_chat(gateway, session, conversation)
        reasons = []

        async def listener(reason):
            reasons.append(reason)

        coordinator.subscribe(listener)
        orchestrator = SendOrchestrator(gateway, session, conversation, coordinator)

        await orchestrator.send_message(chat.id, "Hello")

        assert reasons == [MESSAGE_SENT_REASON]


class TestResponderFailures:
    """Tests for the diagnostic reply path."""

    @pytest.mark.asyncio
    async def test_transport_error_yields_apology(self, gateway, session, conversation, responder):
        """Test that a raised responder error becomes an apology message."""
        responder.error = ConnectionError("connection reset")
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        result = await orchestrator.send_message(chat.id, "Hello")

        assert result.status == SendStatus.COMPLETED
        assert not result.responder_succeeded
        assert _contents(conversation.messages) == [(SenderRole.USER, "Hello"), (SenderRole.BOT, APOLOGY_TEXT)]

    @pytest.mark.asyncio
    async def test_gateway_error_from_responder_step(self, gateway, session, conversation):
        """Test that a failing responder call at the gateway still yields a reply."""
        gateway.fail.add("invoke_responder")
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        result = await orchestrator.send_message(chat.id, "Hello")

        assert result.ok
        assert conversation.messages[-1].content == APOLOGY_TEXT

    @pytest.mark.asyncio
    async def test_unsuccessful_without_payload(self, gateway, session, conversation, responder):
        """Test that success=false with no message falls back to the apology."""
        responder.output = ResponderOutput(success=False)
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        await orchestrator.send_message(chat.id, "Hello")

        assert conversation.messages[-1].content == APOLOGY_TEXT

    @pytest.mark.asyncio
    async def test_unsuccessful_with_payload_is_serialized(self, gateway, session, conversation, responder):
        """Test that the payload of a failed reply is stored as JSON."""
        responder.output = ResponderOutput(success=False, message={"error": "quota exceeded"})
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        await orchestrator.send_message(chat.id, "Hello")

        assert conversation.messages[-1].content == '{\n  "error": "quota exceeded"\n}'

    @pytest.mark.asyncio
    async def test_successful_but_empty_reply(self, gateway, session, conversation, responder):
        """Test that a successful reply with blank text takes the diagnostic path."""
        responder.output = ResponderOutput(success=True, message="   ")
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        result = await orchestrator.send_message(chat.id, "Hello")

        assert not result.responder_succeeded
        assert conversation.messages[-1].content == '"   "'

    @pytest.mark.asyncio
    async def test_list_payload_uses_first_element(self, gateway, session, conversation, responder):
        """Test that only the first element of a list reply is used."""
        responder.output = ResponderOutput(success=True, message=[{"message": "first"}, {"message": "second"}])
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        await orchestrator.send_message(chat.id, "Hello")

        assert conversation.messages[-1].content == "first"

    @pytest.mark.asyncio
    async def test_list_payload_without_message(self, gateway, session, conversation, responder):
        """Test the fixed text used when the first list element has no message."""
        responder.output = ResponderOutput(success=True, message=[{"text": "wrong field"}])
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        await orchestrator.send_message(chat.id, "Hello")

        assert conversation.messages[-1].content == NO_MESSAGE_TEXT

    @pytest.mark.asyncio
    async def test_object_payload(self, gateway, session, conversation, responder):
        """Test that an object reply contributes its message field."""
        responder.output = ResponderOutput(success=True, message={"message": "from object"})
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        await orchestrator.send_message(chat.id, "Hello")

        assert conversation.messages[-1].content == "from object"


class TestPartialFailures:
    """Tests for failures of individual steps."""

    @pytest.mark.asyncio
    async def test_user_append_failure_aborts(self, gateway, session, conversation, coordinator, responder):
        """Test that nothing else runs when the user message cannot be stored."""
        gateway.fail.add("append_message:user")
        chat = await _open_chat(gateway, session, conversation)
        signals = []

        async def listener(reason):
            signals.append(reason)

        coordinator.subscribe(listener)
        orchestrator = SendOrchestrator(gateway, session, conversation, coordinator)

        result = await orchestrator.send_message(chat.id, "Hello")

        assert result.status == SendStatus.FAILED
        assert result.reason == FailureReason.APPEND_FAILED
        assert gateway.calls == ["append_message:user"]
        assert responder.received == []
        assert signals == []
        assert not orchestrator.processing

    @pytest.mark.asyncio
    async def test_timestamp_failure_is_not_fatal(self, gateway, session, conversation):
        """Test that a failing timestamp update does not stop the exchange."""
        gateway.fail.add("touch_chat_timestamp")
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        result = await orchestrator.send_message(chat.id, "Hello")

        assert result.ok
        assert gateway.calls.count("touch_chat_timestamp") == 2
        assert _contents(conversation.messages) == [(SenderRole.USER, "Hello"), (SenderRole.BOT, "Hi there")]

    @pytest.mark.asyncio
    async def test_bot_append_failure_is_reported(self, gateway, session, conversation):
        """Test that a lost reply is reported while the user message stays stored."""
        gateway.fail.add("append_message:bot")
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        result = await orchestrator.send_message(chat.id, "Hello")

        assert result.status == SendStatus.COMPLETED
        assert result.bot_message is None
        assert result.reason == FailureReason.RESPONSE_APPEND_FAILED
        assert _contents(conversation.messages) == [(SenderRole.USER, "Hello")]

    @pytest.mark.asyncio
    async def test_unexpected_error_clears_processing(self, gateway, session, conversation):
        """Test that the processing flag is released after an unexpected error."""
        chat = await _open_chat(gateway, session, conversation)

        class BrokenConversation:
            async def refresh(self):
                raise RuntimeError("view gone")

        orchestrator = SendOrchestrator(gateway, session, BrokenConversation())

        result = await orchestrator.send_message(chat.id, "Hello")

        assert result.status == SendStatus.FAILED
        assert result.reason == FailureReason.UNEXPECTED
        assert not orchestrator.processing

    @pytest.mark.asyncio
    async def test_unknown_chat_fails_first_step(self, gateway, session, conversation):
        """Test that sending to a chat the user does not own is a failed send."""
        orchestrator = SendOrchestrator(gateway, session, conversation)

        result = await orchestrator.send_message("missing", "Hello")

        assert result.status == SendStatus.FAILED
        assert result.reason == FailureReason.APPEND_FAILED


class TestPreconditions:
    """Tests for rejected sends."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_text_rejected(self, gateway, session, conversation, text):
        """Test that blank input makes no gateway call."""
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        result = await orchestrator.send_message(chat.id, text)

        assert result.status == SendStatus.REJECTED
        assert result.reason == FailureReason.EMPTY_TEXT
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_no_chat_rejected(self, gateway, session, conversation):
        """Test that a send without a selected chat is rejected."""
        orchestrator = SendOrchestrator(gateway, session, conversation)

        result = await orchestrator.send_message(None, "Hello")

        assert result.status == SendStatus.REJECTED
        assert result.reason == FailureReason.NO_CHAT

    @pytest.mark.asyncio
    async def test_reentrant_send_is_ignored(self, session):
        """Test that a send while another is in flight changes nothing."""
        responder = BlockingResponder()
        gateway = FlakyGateway(responder=responder)
        conversation = ConversationViewModel(gateway, session)
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        first = asyncio.create_task(orchestrator.send_message(chat.id, "one"))
        await responder.started.wait()
        assert orchestrator.processing

        second = await orchestrator.send_message(chat.id, "two")
        assert second.status == SendStatus.REJECTED
        assert second.reason == FailureReason.BUSY

        responder.release.set()
        result = await first

        assert result.ok
        assert not orchestrator.processing
        assert _contents(conversation.messages) == [(SenderRole.USER, "one"), (SenderRole.BOT, "reply to one")]


class TestScriptedResponderError:
    @pytest.mark.asyncio
    async def test_gateway_error_raised_by_responder(self, session):
        """Test that a GatewayError from the responder itself is handled like any transport error."""
        gateway = FlakyGateway(responder=ScriptedResponder(error=GatewayError("timeout")))
        conversation = ConversationViewModel(gateway, session)
        chat = await _open_chat(gateway, session, conversation)
        orchestrator = SendOrchestrator(gateway, session, conversation)

        result = await orchestrator.send_message(chat.id, "Hello")

        assert result.ok
        assert conversation.messages[-1].content == APOLOGY_TEXT
