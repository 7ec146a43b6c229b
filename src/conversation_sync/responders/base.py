"""
Responder abstractions.

The responder is the automated system that produces 'bot' replies. On the
wire it answers with '{"success": bool, "message": ...}' where 'message' may be
a string, an object with a 'message' field or a list of such objects.
'ResponderOutput' mirrors that raw shape; gateways normalize it into a
'ResponderReply' before handing it to the client.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


class ResponderOutput(BaseModel):
    success: bool
    message: Any = None


class Responder(ABC):
    """Abstract responder used by in-process gateways."""

    @abstractmethod
    async def respond(self, chat_id: str, content: str) -> ResponderOutput:
        pass


class EchoResponder(Responder):
    """Answers every message by repeating it. Useful for demos and local runs."""

    def __init__(self, prefix: str = "You said: "):
        self.prefix = prefix

    async def respond(self, chat_id: str, content: str) -> ResponderOutput:
        return ResponderOutput(success=True, message=f"{self.prefix}{content}")
