"""Pytest configuration and shared fixtures."""
import asyncio
from datetime import datetime, timezone

import pytest

from conversation_sync.data_models import SessionContext
from conversation_sync.gateway import GatewayError, InMemoryChatGateway
from conversation_sync.responders import Responder, ResponderOutput
from conversation_sync.sync import SyncCoordinator
from conversation_sync.views import ConversationViewModel

FIXED_TIME = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)


class ScriptedResponder(Responder):
    """Returns a fixed output, or raises 'error' when one is set."""

    def __init__(self, output: ResponderOutput | None = None, error: Exception | None = None):
        self.output = output or ResponderOutput(success=True, message="Hi there")
        self.error = error
        self.received: list[str] = []

    async def respond(self, chat_id: str, content: str) -> ResponderOutput:
        self.received.append(content)
        if self.error is not None:
            raise self.error
        return self.output


class BlockingResponder(Responder):
    """Holds the responder call open until 'release' is set."""

    def __init__(self):
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def respond(self, chat_id: str, content: str) -> ResponderOutput:
        self.started.set()
        await self.release.wait()
        return ResponderOutput(success=True, message=f"reply to {content}")


class FlakyGateway(InMemoryChatGateway):
    """In-memory gateway that records calls and fails the operations named in 'fail'."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail: set[str] = set()
        self.calls: list[str] = []

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail:
            raise GatewayError(f"{operation} failed")

    async def create_chat(self, session):
        self._check("create_chat")
        return await super().create_chat(session)

    async def append_message(self, session, chat_id, content, sender_type):
        self._check(f"append_message:{sender_type}")
        return await super().append_message(session, chat_id, content, sender_type)

    async def touch_chat_timestamp(self, session, chat_id):
        self._check("touch_chat_timestamp")
        return await super().touch_chat_timestamp(session, chat_id)

    async def invoke_responder(self, session, chat_id, content):
        self._check("invoke_responder")
        return await super().invoke_responder(session, chat_id, content)

    async def list_chats_for_user(self, session):
        self._check("list_chats_for_user")
        return await super().list_chats_for_user(session)

    async def list_messages_for_chat(self, session, chat_id, fresh=False):
        self._check("list_messages_for_chat")
        return await super().list_messages_for_chat(session, chat_id, fresh)


@pytest.fixture
def session():
    """Return the session of the signed-in test user."""
    return SessionContext(user_id="user-1", access_token="token-1")


@pytest.fixture
def responder():
    return ScriptedResponder()


@pytest.fixture
def gateway(responder):
    """Return a failure-injecting in-memory gateway driven by a fixed clock."""
    return FlakyGateway(responder=responder, clock=lambda: FIXED_TIME)


@pytest.fixture
def coordinator():
    return SyncCoordinator()


@pytest.fixture
def conversation(gateway, session):
    return ConversationViewModel(gateway, session)
