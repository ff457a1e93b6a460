"""Leaderboard entry database model.

Scores are written by the gameplay service; this package only reads them.
"""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import Base


class LeaderboardEntryModel(Base):
    """Cumulative score of a single user."""

    __tablename__ = "leaderboard_entries"

    user_id = Column(
        String,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        primary_key=True,
    )
    score = Column(Integer, nullable=False, default=0)

    user = relationship("UserModel", back_populates="leaderboard_entry")
