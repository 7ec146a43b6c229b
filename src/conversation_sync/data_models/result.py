"""
Typed outcomes of the public client operations.

None of the operations raise to their caller. Failures are logged where they
happen and reported here as data, so a UI can decide whether to surface them
or keep the quiet log-and-continue behaviour.
"""

from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel

from conversation_sync.data_models.message import Message

T = TypeVar("T")


class FailureReason(StrEnum):
    NO_SESSION = "no_session"
    NO_CHAT = "no_chat"
    EMPTY_TEXT = "empty_text"
    BUSY = "busy"
    APPEND_FAILED = "append_failed"
    RESPONSE_APPEND_FAILED = "response_append_failed"
    FETCH_FAILED = "fetch_failed"
    CREATE_FAILED = "create_failed"
    STALE = "stale"
    UNEXPECTED = "unexpected"


class OperationResult(BaseModel, Generic[T]):
    """Success flag plus either a value or a failure reason."""

    ok: bool
    value: T | None = None
    reason: FailureReason | None = None
    detail: str | None = None

    @classmethod
    def success(cls, value: T | None = None) -> "OperationResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: FailureReason, detail: str | None = None) -> "OperationResult[T]":
        return cls(ok=False, reason=reason, detail=detail)


class SendStatus(StrEnum):
    """
    'REJECTED' means a precondition failed and no gateway call was made.
    'FAILED' means the user message could not be stored; nothing else ran.
    'COMPLETED' means the user message is stored and the responder step ran,
    whether the reply came from the responder or from the diagnostic fallback.
    """

    REJECTED = "rejected"
    FAILED = "failed"
    COMPLETED = "completed"


class SendResult(BaseModel):
    status: SendStatus
    reason: FailureReason | None = None
    detail: str | None = None
    user_message: Message | None = None
    bot_message: Message | None = None
    responder_succeeded: bool = False

    @property
    def ok(self) -> bool:
        return self.status == SendStatus.COMPLETED
