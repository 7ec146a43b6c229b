"""
End-to-end run of the chat client.

Signs in a fixed user, creates a chat, sends a few messages and logs the
conversation and the chat list after each send. Without a GraphQL endpoint
the in-memory gateway and an echo responder are used.

Usage:
    python -m conversation_sync.demo

    Against a real backend (token issued out of band):
        CONVERSATION_SYNC_GRAPHQL_URL=https://.../v1/graphql \\
        DEMO_USER_ID=<uuid> DEMO_ACCESS_TOKEN=<jwt> python -m conversation_sync.demo

    MESSAGES="Hello|How are you?" python -m conversation_sync.demo
"""

import asyncio
import os

from loguru import logger

from conversation_sync.auth.base import StaticAuthProvider
from conversation_sync.config import Settings, configure_logging
from conversation_sync.controller import ChatAppController
from conversation_sync.data_models.session import SessionUser
from conversation_sync.gateway.base import ChatGateway
from conversation_sync.gateway.graphql import GraphQLChatGateway
from conversation_sync.gateway.in_memory import InMemoryChatGateway

DEFAULT_MESSAGES = "Hello|What can you do?"


def build_gateway(settings: Settings) -> ChatGateway:
    if settings.graphql_url:
        logger.info(f"Gateway: GraphQL ({settings.graphql_url})")
        return GraphQLChatGateway(
            settings.graphql_url,
            timeout_seconds=settings.request_timeout_seconds,
            read_cache_seconds=settings.read_cache_seconds,
        )
    logger.info("Gateway: in-memory with echo responder")
    return InMemoryChatGateway()


async def main() -> None:
    settings = Settings()
    configure_logging(settings.log_level)

    gateway = build_gateway(settings)
    auth = StaticAuthProvider(
        SessionUser(id=os.environ.get("DEMO_USER_ID", "demo-user"), email="demo@example.com"),
        token=os.environ.get("DEMO_ACCESS_TOKEN"),
    )
    app = ChatAppController(gateway, auth, settings)
    try:
        if not await app.mount():
            return

        created = await app.new_chat()
        if not created.ok:
            logger.error(f"Could not create a chat: {created.detail}")
            return

        for text in os.environ.get("MESSAGES", DEFAULT_MESSAGES).split("|"):
            app.draft = text
            result = await app.submit()
            logger.info(f"Send {text!r}: {result.status}")

        if app.conversation is None or app.chat_list is None:
            return
        for message in app.conversation.messages:
            logger.info(f"[{message.sender_type}] {message.content}")
        for item in app.chat_list.items:
            logger.info(f"{item.chat_id} {item.display_date()} {item.preview!r}")
    finally:
        await app.unmount()
        if isinstance(gateway, GraphQLChatGateway):
            await gateway.close()


if __name__ == "__main__":
    asyncio.run(main())
