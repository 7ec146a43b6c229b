from conversation_sync.responders.base import EchoResponder, Responder, ResponderOutput

__all__ = ["EchoResponder", "Responder", "ResponderOutput"]
