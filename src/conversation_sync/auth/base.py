"""
Authentication provider abstractions.

An 'AuthProvider' identifies the signed-in user and supplies the credential
the gateway sends with each request. Sign-in, sign-up and token refresh live
outside this package; the client only resolves a 'SessionContext' once and
passes it along explicitly.
"""

from abc import ABC, abstractmethod

from conversation_sync.data_models.session import SessionContext, SessionUser


class AuthProvider(ABC):
    """Abstract base class for authentication backends."""

    @abstractmethod
    async def current_user(self) -> SessionUser | None:
        """Return the signed-in user, or None when nobody is signed in."""
        pass

    @abstractmethod
    async def access_token(self) -> str | None:
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        pass

    async def resolve_session(self) -> SessionContext | None:
        user = await self.current_user()
        if user is None:
            return None
        return SessionContext(user_id=user.id, access_token=await self.access_token())


class StaticAuthProvider(AuthProvider):
    """Provider holding a fixed user and token, e.g. one issued out of band."""

    def __init__(self, user: SessionUser | None, token: str | None = None):
        self._user = user
        self._token = token

    async def current_user(self) -> SessionUser | None:
        return self._user

    async def access_token(self) -> str | None:
        return self._token if self._user is not None else None

    async def sign_out(self) -> None:
        self._user = None
        self._token = None
