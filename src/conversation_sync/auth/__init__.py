from conversation_sync.auth.base import AuthProvider, StaticAuthProvider

__all__ = ["AuthProvider", "StaticAuthProvider"]
