"""Read access to the leaderboard."""

import logging
from typing import List

from sqlalchemy.orm import Session

from config import LEADERBOARD_LIMIT
from core.database import storage_guard
from models.leaderboard_entry import LeaderboardEntryModel
from models.user import UserModel
from schemas.leaderboard import LeaderboardEntry

logger = logging.getLogger(__name__)


class LeaderboardManager:
    """Lists cumulative scores. Scores are written elsewhere."""

    def __init__(self, db: Session):
        self.db = db

    @storage_guard
    def get_leaderboard(self, limit: int = LEADERBOARD_LIMIT) -> List[LeaderboardEntry]:
        """Return the top players by score, highest first."""
        rows = (
            self.db.query(UserModel.user_id, UserModel.username, LeaderboardEntryModel.score)
            .join(LeaderboardEntryModel, LeaderboardEntryModel.user_id == UserModel.user_id)
            .order_by(LeaderboardEntryModel.score.desc(), UserModel.username)
            .limit(limit)
            .all()
        )
        return [
            LeaderboardEntry(user_id=user_id, username=username, score=int(score))
            for user_id, username, score in rows
        ]
