"""
Chat data model.

'updated_at' is the last-activity timestamp that orders the chat list. It is
not derived from the messages: the send orchestrator advances it explicitly
after every append, so a chat whose timestamp update failed can lag behind its
newest message until the next successful touch.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from conversation_sync.data_models.message import Message


class Chat(BaseModel):
    """A conversation thread owned by one user."""

    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime | None = None
    messages: list[Message] = Field(default_factory=list)

    @property
    def last_activity(self) -> datetime:
        return self.updated_at or self.created_at
