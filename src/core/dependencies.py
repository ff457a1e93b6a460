"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes. Every
manager gets a request-scoped database session.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from config import SESSION_COOKIE_NAME
from core.database import get_db
from schemas.user import User
from utils import access_control
from utils import category_manager
from utils import leaderboard_manager
from utils import quiz_manager
from utils import session_manager
from utils import user_manager


def get_session_token(request: Request) -> Optional[str]:
    """Read the opaque session token from the session cookie."""
    return request.cookies.get(SESSION_COOKIE_NAME)


def get_session_manager(db: Session = Depends(get_db)) -> session_manager.SessionManager:
    """Get SessionManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        SessionManager instance.
    """
    return session_manager.SessionManager(db)


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_category_manager(db: Session = Depends(get_db)) -> category_manager.CategoryManager:
    """Get CategoryManager instance with request-scoped DB session."""
    return category_manager.CategoryManager(db)


def get_quiz_manager(db: Session = Depends(get_db)) -> quiz_manager.QuizManager:
    """Get QuizManager instance with request-scoped DB session."""
    return quiz_manager.QuizManager(db)


def get_leaderboard_manager(
    db: Session = Depends(get_db),
) -> leaderboard_manager.LeaderboardManager:
    """Get LeaderboardManager instance with request-scoped DB session."""
    return leaderboard_manager.LeaderboardManager(db)


def get_access_control(db: Session = Depends(get_db)) -> access_control.AccessControl:
    """Get AccessControl instance with request-scoped DB session."""
    return access_control.AccessControl(db)


# Type aliases for dependency injection
SessionTokenDep = Annotated[Optional[str], Depends(get_session_token)]
SessionManagerDep = Annotated[
    session_manager.SessionManager, Depends(get_session_manager)
]
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
CategoryManagerDep = Annotated[
    category_manager.CategoryManager, Depends(get_category_manager)
]
QuizManagerDep = Annotated[
    quiz_manager.QuizManager, Depends(get_quiz_manager)
]
LeaderboardManagerDep = Annotated[
    leaderboard_manager.LeaderboardManager, Depends(get_leaderboard_manager)
]
AccessControlDep = Annotated[
    access_control.AccessControl, Depends(get_access_control)
]


def get_current_user(
    token: SessionTokenDep,
    sessions: SessionManagerDep,
) -> Optional[User]:
    """Resolve the session cookie to a user, or None when signed out."""
    return sessions.get_user_by_session(token)


CurrentUserDep = Annotated[Optional[User], Depends(get_current_user)]
