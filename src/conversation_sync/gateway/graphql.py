"""
GraphQL gateway for a Hasura-style chat backend.

Each gateway operation maps onto one document in 'queries'. Requests are sent
with aiohttp and carry the session's bearer token; the client never refreshes
tokens itself. GraphQL 'errors', HTTP failures and transport failures all
surface as 'GatewayError' subclasses.

Reads of one chat's messages may be served from a short-lived cache unless the
caller asks for a fresh read. Any write to a chat evicts its cache entry.
"""

import asyncio
import time
from typing import Any

import aiohttp
from loguru import logger

from conversation_sync.data_models.chat import Chat
from conversation_sync.data_models.message import Message, SenderRole
from conversation_sync.data_models.session import SessionContext
from conversation_sync.gateway import queries
from conversation_sync.gateway.base import (
    ChatGateway,
    ChatNotFoundError,
    GatewayError,
    ResponderReply,
    normalize_responder_payload,
)


class GraphQLRequestError(GatewayError):
    """The endpoint answered with a GraphQL 'errors' list."""

    def __init__(self, errors: list[dict[str, Any]]):
        messages = "; ".join(str(error.get("message", error)) for error in errors)
        super().__init__(f"GraphQL request failed: {messages}")
        self.errors = errors


class GraphQLChatGateway(ChatGateway):
    def __init__(self, url: str, timeout_seconds: float = 30.0, read_cache_seconds: float = 0.0):
        self.url = url
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.read_cache_seconds = read_cache_seconds
        self._session: aiohttp.ClientSession | None = None
        self._message_cache: dict[str, tuple[float, list[Message]]] = {}

    async def connect(self) -> None:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "GraphQLChatGateway":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _execute(self, session: SessionContext, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        await self.connect()
        if self._session is None:
            raise GatewayError("GraphQL session is not connected")
        try:
            async with self._session.post(
                self.url,
                json={"query": query, "variables": variables},
                headers=session.authorization_header,
            ) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise GatewayError(f"GraphQL endpoint returned HTTP {response.status}: {body[:200]}")
                payload = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise GatewayError(f"GraphQL transport error: {e!r}") from e
        except ValueError as e:
            raise GatewayError(f"GraphQL endpoint returned a malformed body: {e!r}") from e

        if not isinstance(payload, dict):
            raise GatewayError(f"GraphQL response is not an object: {type(payload).__name__}")

        if payload.get("errors"):
            raise GraphQLRequestError(payload["errors"])
        data = payload.get("data")
        if data is None:
            raise GatewayError("GraphQL response carried no data")
        return data

    def _evict(self, chat_id: str) -> None:
        self._message_cache.pop(chat_id, None)

    async def create_chat(self, session: SessionContext) -> Chat:
        data = await self._execute(session, queries.CREATE_CHAT, {"user_id": session.user_id})
        row = data.get("insert_chats_one")
        if row is None:
            raise GatewayError(f"Chat could not be created for user {session.user_id}")
        return Chat.model_validate(row)

    async def append_message(
        self,
        session: SessionContext,
        chat_id: str,
        content: str,
        sender_type: SenderRole,
    ) -> Message:
        self._evict(chat_id)
        data = await self._execute(
            session,
            queries.INSERT_MESSAGE,
            {"chat_id": chat_id, "content": content, "sender_type": str(sender_type)},
        )
        row = data.get("insert_messages_one")
        if row is None:
            raise GatewayError(f"Message could not be stored in chat {chat_id}")
        return Message.model_validate(row)

    async def touch_chat_timestamp(self, session: SessionContext, chat_id: str) -> Chat:
        data = await self._execute(session, queries.UPDATE_CHAT_TIMESTAMP, {"chat_id": chat_id})
        row = data.get("update_chats_by_pk")
        if row is None:
            raise ChatNotFoundError(chat_id)
        return Chat.model_validate(row)

    async def invoke_responder(self, session: SessionContext, chat_id: str, content: str) -> ResponderReply:
        self._evict(chat_id)
        data = await self._execute(session, queries.SEND_MESSAGE_TO_BOT, {"chat_id": chat_id, "content": content})
        result = data.get("sendMessageToBot") or {}
        logger.debug(f"Responder result for chat {chat_id}: {result}")
        return normalize_responder_payload(bool(result.get("success")), result.get("message"))

    async def list_chats_for_user(self, session: SessionContext) -> list[Chat]:
        data = await self._execute(session, queries.GET_USER_CHATS, {"user_id": session.user_id})
        return [Chat.model_validate(row) for row in data.get("chats") or []]

    async def list_messages_for_chat(
        self, session: SessionContext, chat_id: str, fresh: bool = False
    ) -> list[Message]:
        if not fresh and self.read_cache_seconds > 0:
            cached = self._message_cache.get(chat_id)
            if cached is not None and time.monotonic() - cached[0] < self.read_cache_seconds:
                return list(cached[1])

        data = await self._execute(session, queries.GET_CHAT_MESSAGES, {"chat_id": chat_id})
        messages = [Message.model_validate(row) for row in data.get("messages") or []]
        self._message_cache[chat_id] = (time.monotonic(), messages)
        return list(messages)
