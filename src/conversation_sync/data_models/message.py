"""
Message data model.

A message is one immutable turn in a chat. Identity and 'created_at' are
assigned by the store; the client never edits or deletes a message once it has
been written. Messages within a chat are ordered by 'created_at' ascending.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class SenderRole(StrEnum):
    """Author of a message. The store only accepts these two values."""

    USER = "user"
    BOT = "bot"


class Message(BaseModel):
    """
    A single turn in a chat.

    'content' of a 'USER' message is never blank. 'BOT' messages may carry any
    text, including the serialized payload of a failed responder call.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    chat_id: str
    content: str
    sender_type: SenderRole
    created_at: datetime
