"""User database model.

This module defines the User database model using SQLAlchemy.
"""

from sqlalchemy import Column, Index, String, func
from sqlalchemy.orm import relationship

from .base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    user_id = Column(String, primary_key=True, index=True)
    email = Column(String, nullable=False)
    username = Column(String, nullable=False)
    display_name = Column(String, nullable=True)
    role = Column(String, nullable=False)  # 'user' or 'admin'
    salt = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    password_algo = Column(String, nullable=False, default="scrypt")
    created_at = Column(String, nullable=False)  # ISO format string

    sessions = relationship(
        "AuthSessionModel",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    leaderboard_entry = relationship(
        "LeaderboardEntryModel",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )


# Email and username are unique regardless of case
Index("uq_users_email_lower", func.lower(UserModel.email), unique=True)
Index("uq_users_username_lower", func.lower(UserModel.username), unique=True)
