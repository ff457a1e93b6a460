"""Role-gated access to the managers.

AccessControl resolves the caller's session token first and checks the
caller's role or ownership before any manager method runs. A denied call
leaves the database untouched.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from core.clock import Clock
from core.exceptions import ForbiddenError, NotFoundError
from schemas.category import Category
from schemas.quiz import Quiz, QuizInput
from schemas.user import User
from utils.category_manager import CategoryManager
from utils.quiz_manager import QuizManager
from utils.session_manager import SessionManager
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)


class AccessControl:
    """Guards manager operations by role and ownership."""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        """Initialize AccessControl.

        Args:
            db: SQLAlchemy Session shared by all managers.
            clock: Optional callable returning the current UTC time.
        """
        self.sessions = SessionManager(db, clock)
        self.users = UserManager(db, clock)
        self.categories = CategoryManager(db)
        self.quizzes = QuizManager(db, clock)

    # --- Guards ---

    def resolve_user(self, token: Optional[str]) -> Optional[User]:
        return self.sessions.get_user_by_session(token)

    def require_user(self, token: Optional[str]) -> User:
        """Return the signed-in user or raise ForbiddenError."""
        user = self.resolve_user(token)
        if user is None:
            raise ForbiddenError("Sign in required.")
        return user

    def require_admin(self, token: Optional[str]) -> User:
        """Return the signed-in admin or raise ForbiddenError."""
        user = self.resolve_user(token)
        if user is None or user.role != "admin":
            logger.warning(
                "Admin operation denied for %s",
                user.user_id if user else "anonymous caller",
            )
            raise ForbiddenError("Forbidden.")
        return user

    @staticmethod
    def ensure_owner(user: User, owner_id: str) -> None:
        """Raise ForbiddenError unless the user owns the resource."""
        if user.user_id != owner_id:
            raise ForbiddenError("Forbidden.")

    # --- Signed-in users ---

    def submit_quiz(self, token: Optional[str], payload: QuizInput) -> Quiz:
        user = self.require_user(token)
        return self.quizzes.submit_quiz(payload, user.user_id)

    def get_my_submissions(self, token: Optional[str]) -> List[Quiz]:
        user = self.require_user(token)
        return self.quizzes.get_user_submissions(user.user_id)

    def get_my_submission(self, token: Optional[str], quiz_id: str) -> Quiz:
        """Return one of the caller's quizzes in any state.

        Admins may view any quiz; other users only their own.
        """
        user = self.require_user(token)
        quiz = self.quizzes.get_submission_by_id(quiz_id)
        if quiz is None:
            raise NotFoundError("Quiz not found.")
        if user.role != "admin":
            self.ensure_owner(user, quiz.created_by)
        return quiz

    # --- Admins ---

    def get_pending_quizzes(self, token: Optional[str]) -> List[Quiz]:
        self.require_admin(token)
        return self.quizzes.get_pending_quizzes()

    def update_pending_quiz(
        self, token: Optional[str], quiz_id: str, payload: QuizInput
    ) -> Quiz:
        self.require_admin(token)
        return self.quizzes.update_pending_quiz(quiz_id, payload)

    def approve_pending_quiz(self, token: Optional[str], quiz_id: str) -> None:
        admin = self.require_admin(token)
        self.quizzes.approve_pending_quiz(quiz_id, admin.user_id)

    def reject_pending_quiz(
        self, token: Optional[str], quiz_id: str, reason: str
    ) -> None:
        admin = self.require_admin(token)
        self.quizzes.reject_pending_quiz(quiz_id, admin.user_id, reason)

    def create_quiz_as_admin(self, token: Optional[str], payload: QuizInput) -> Quiz:
        admin = self.require_admin(token)
        return self.quizzes.create_quiz_as_admin(payload, admin.user_id)

    def delete_quiz(self, token: Optional[str], quiz_id: str) -> None:
        self.require_admin(token)
        self.quizzes.delete_quiz(quiz_id)

    def create_category(
        self, token: Optional[str], name: str, description: Optional[str] = None
    ) -> Category:
        self.require_admin(token)
        return self.categories.create_category(name, description)

    def delete_category(self, token: Optional[str], category_id: str) -> None:
        self.require_admin(token)
        self.categories.delete_category(category_id)

    def get_users(self, token: Optional[str]) -> List[User]:
        self.require_admin(token)
        return self.users.get_users()

    def create_user_as_admin(
        self,
        token: Optional[str],
        email: str,
        username: str,
        password: str,
        display_name: Optional[str] = None,
        role: str = "user",
    ) -> User:
        self.require_admin(token)
        return self.users.create_user_as_admin(
            email, username, password, display_name, role
        )

    def delete_user(self, token: Optional[str], user_id: str) -> None:
        admin = self.require_admin(token)
        self.users.delete_user(user_id, requester_id=admin.user_id)
