"""Sign-in session database model.

Only the SHA-256 digest of the opaque token is stored.
"""

from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship

from .base import Base


class AuthSessionModel(Base):
    """Sign-in session database model."""

    __tablename__ = "auth_sessions"

    token_hash = Column(String, primary_key=True, index=True)
    user_id = Column(
        String,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    expires_at = Column(String, nullable=False)  # ISO format string

    user = relationship("UserModel", back_populates="sessions")
