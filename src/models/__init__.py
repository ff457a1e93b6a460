"""Database models package.

Importing this package registers every model with Base.metadata.
"""

from .user import UserModel
from .auth_session import AuthSessionModel
from .category import CategoryModel
from .quiz import QuizModel, QuestionModel, OptionModel, QuizStatus
from .leaderboard_entry import LeaderboardEntryModel

__all__ = [
    "UserModel",
    "AuthSessionModel",
    "CategoryModel",
    "QuizModel",
    "QuestionModel",
    "OptionModel",
    "QuizStatus",
    "LeaderboardEntryModel",
]
