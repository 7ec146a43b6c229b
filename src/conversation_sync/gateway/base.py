"""
Remote data gateway interface.

'ChatGateway' is the pluggable boundary to the authoritative store. It covers
four writes (create chat, append message, touch the chat timestamp, invoke the
responder) and two reads (chats with their messages, messages of one chat).
Concrete implementations ('InMemoryChatGateway', 'GraphQLChatGateway') are
interchangeable at construction time, keeping the view models and the
orchestrator free of transport-specific code.

Every call takes the resolved 'SessionContext' explicitly. The responder's
loosely typed payload is normalized here into a 'ResponderReply' so callers
never branch on its shape.
"""

import json
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from conversation_sync.data_models.chat import Chat
from conversation_sync.data_models.message import Message, SenderRole
from conversation_sync.data_models.session import SessionContext

APOLOGY_TEXT = "Sorry, I encountered an error processing your message."
NO_MESSAGE_TEXT = "No message received"


class GatewayError(Exception):
    """Raised by a gateway when a remote operation fails or cannot be reached."""


class ChatNotFoundError(GatewayError):
    def __init__(self, chat_id: str):
        super().__init__(f"Chat with id {chat_id} not found")
        self.chat_id = chat_id


class ResponderReply(BaseModel):
    """
    Canonical form of a responder result.

    'text' is the reply to show, or None when the payload held nothing usable.
    'payload' keeps the raw value so the diagnostic fallback can echo it.
    """

    success: bool
    text: str | None = None
    payload: Any = None

    @property
    def usable(self) -> bool:
        return self.success and bool(self.text)

    def diagnostic_text(self) -> str:
        """Bot message content used when the reply is not usable."""
        if self.payload is None or self.payload == "":
            return APOLOGY_TEXT
        return json.dumps(self.payload, indent=2, default=str)

    @classmethod
    def transport_failure(cls) -> "ResponderReply":
        return cls(success=False)


def _extract_text(payload: Any) -> str | None:
    if payload is None:
        return None
    if isinstance(payload, str):
        return payload
    if isinstance(payload, list):
        first = payload[0] if payload else None
        if isinstance(first, dict) and first.get("message"):
            return str(first["message"])
        return NO_MESSAGE_TEXT
    if isinstance(payload, dict):
        message = payload.get("message")
        return message if isinstance(message, str) else None
    return None


def normalize_responder_payload(success: bool, payload: Any) -> ResponderReply:
    """Collapse a string, '{"message": ...}' or list-of-those payload into one reply.

    A list contributes its first element's message; a list whose first element
    carries no message yields 'NO_MESSAGE_TEXT'. Blank text counts as no text.
    """
    text = _extract_text(payload)
    if text is not None and not text.strip():
        text = None
    return ResponderReply(success=bool(success), text=text, payload=payload)


class ChatGateway(ABC):
    """Abstract gateway to the chat store and the responder."""

    @abstractmethod
    async def create_chat(self, session: SessionContext) -> Chat:
        pass

    @abstractmethod
    async def append_message(
        self,
        session: SessionContext,
        chat_id: str,
        content: str,
        sender_type: SenderRole,
    ) -> Message:
        pass

    @abstractmethod
    async def touch_chat_timestamp(self, session: SessionContext, chat_id: str) -> Chat:
        """Advance the chat's last-activity timestamp to the store's current time."""
        pass

    @abstractmethod
    async def invoke_responder(self, session: SessionContext, chat_id: str, content: str) -> ResponderReply:
        """Ask the responder to answer 'content'.

        Raises 'GatewayError' only when the call itself fails; an unsuccessful
        answer is returned as a reply with 'success=False'.
        """
        pass

    @abstractmethod
    async def list_chats_for_user(self, session: SessionContext) -> list[Chat]:
        """Chats of the session user by 'updated_at' descending, messages ascending."""
        pass

    @abstractmethod
    async def list_messages_for_chat(
        self, session: SessionContext, chat_id: str, fresh: bool = False
    ) -> list[Message]:
        """Messages of one chat by 'created_at' ascending.

        'fresh=True' bypasses any read cache the implementation keeps.
        """
        pass
