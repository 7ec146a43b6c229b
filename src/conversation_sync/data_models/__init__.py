from conversation_sync.data_models.chat import Chat
from conversation_sync.data_models.message import Message, SenderRole
from conversation_sync.data_models.result import FailureReason, OperationResult, SendResult, SendStatus
from conversation_sync.data_models.session import SessionContext, SessionUser

__all__ = [
    "Chat",
    "FailureReason",
    "Message",
    "OperationResult",
    "SendResult",
    "SendStatus",
    "SenderRole",
    "SessionContext",
    "SessionUser",
]
