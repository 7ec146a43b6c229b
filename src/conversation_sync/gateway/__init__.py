from conversation_sync.gateway.base import (
    APOLOGY_TEXT,
    NO_MESSAGE_TEXT,
    ChatGateway,
    ChatNotFoundError,
    GatewayError,
    ResponderReply,
    normalize_responder_payload,
)
from conversation_sync.gateway.in_memory import InMemoryChatGateway

__all__ = [
    "APOLOGY_TEXT",
    "NO_MESSAGE_TEXT",
    "ChatGateway",
    "ChatNotFoundError",
    "GatewayError",
    "InMemoryChatGateway",
    "ResponderReply",
    "normalize_responder_payload",
]
