"""Sign-in session schema definitions."""

from datetime import datetime

from pydantic import BaseModel, Field


class AuthSession(BaseModel):
    """A freshly issued sign-in session.

    The token is returned to the caller exactly once; only its digest is
    persisted.
    """
    token: str = Field(description="Opaque session token.")
    expires_at: datetime = Field(description="UTC expiry of the session.")
