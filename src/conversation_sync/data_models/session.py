"""
Session identity passed into every gateway call.

The auth collaborator resolves a 'SessionContext' once; the view models and
the orchestrator receive it explicitly and never look up the current user on
their own.
"""

from pydantic import BaseModel, ConfigDict


class SessionUser(BaseModel):
    """The signed-in user as reported by the auth provider."""

    id: str
    email: str | None = None


class SessionContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    access_token: str | None = None

    @property
    def authorization_header(self) -> dict[str, str]:
        if not self.access_token:
            return {}
        return {"Authorization": f"Bearer {self.access_token}"}
