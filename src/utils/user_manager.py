"""User management utilities.

This module provides user management functionality including account
creation, credential verification, listing and guarded deletion.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from config import MAX_DISPLAY_NAME_LEN, MAX_ID_LEN
from core.clock import Clock, utc_now
from core.database import storage_guard, transaction
from core.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from models.quiz import QuizModel
from models.user import UserModel
from schemas.user import User
from utils import credentials
from utils.converters import model_to_user
from utils.validators import (
    optional_text,
    require_text,
    validate_email,
    validate_username,
)

logger = logging.getLogger(__name__)

ROLES = ("user", "admin")

_UNKNOWN_ACCOUNT_SALT = credentials.generate_salt()
_OWNS_QUIZZES = "Delete this user's quizzes first."


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
            clock: Optional callable returning the current UTC time.
        """
        self.db = db
        self.clock = clock or utc_now

    def create_user(
        self,
        email: str,
        username: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> User:
        """Register a regular user.

        Args:
            email: Email address (stored lower-cased).
            username: Username, letters, digits, '.', '-' and '_' only.
            password: Plain text password, 8-128 characters.
            display_name: Optional display name; defaults to the username.

        Returns:
            Created User object.

        Raises:
            ValidationError: If any field is invalid.
            ConflictError: If the email or username is already taken.
        """
        return self._create_user(email, username, password, display_name, "user")

    def create_user_as_admin(
        self,
        email: str,
        username: str,
        password: str,
        display_name: Optional[str] = None,
        role: str = "user",
    ) -> User:
        """Create an account on behalf of an admin, optionally as admin."""
        if role not in ROLES:
            raise ValidationError(f"Invalid role: {role}. Must be 'user' or 'admin'.")
        return self._create_user(email, username, password, display_name, role)

    def _create_user(
        self,
        email: str,
        username: str,
        password: str,
        display_name: Optional[str],
        role: str,
    ) -> User:
        email = validate_email(email)
        username = validate_username(username)
        password = credentials.validate_password(password)
        display_name = (
            optional_text(display_name, "Display name", MAX_DISPLAY_NAME_LEN)
            or username
        )

        if self._find_by_identifier(email) or self._find_by_identifier(username):
            raise ConflictError("User already exists.")

        salt = credentials.generate_salt()
        model = UserModel(
            user_id=str(uuid.uuid4()),
            email=email,
            username=username,
            display_name=display_name,
            role=role,
            salt=salt,
            password_hash=credentials.hash_password(password, salt),
            password_algo=credentials.CURRENT_ALGORITHM,
            created_at=self.clock().isoformat(),
        )

        # Two concurrent sign-ups can both pass the check above; the unique
        # indexes on lower(email) and lower(username) decide the winner.
        try:
            with transaction(self.db):
                self.db.add(model)
        except IntegrityError as e:
            raise ConflictError("User already exists.") from e

        logger.info("Created user %s with role %s", model.user_id, role)
        return model_to_user(model)

    def verify_user(self, identifier: str, password: str) -> User:
        """Check sign-in credentials.

        Args:
            identifier: Email or username, case-insensitive.
            password: Plain text password.

        Returns:
            The authenticated User.

        Raises:
            InvalidCredentialsError: If the account does not exist or the
                password does not match.
        """
        identifier = (identifier or "").strip().lower()
        password = (password or "").strip()
        if not identifier or not password:
            raise InvalidCredentialsError()

        model = self._find_by_identifier(identifier)
        if model is None:
            # same scrypt cost as a wrong password
            credentials.hash_password(password, _UNKNOWN_ACCOUNT_SALT)
            raise InvalidCredentialsError()

        algorithm = model.password_algo or credentials.CURRENT_ALGORITHM
        if not credentials.verify_password(
            password, model.salt, model.password_hash, algorithm
        ):
            raise InvalidCredentialsError()

        if credentials.needs_rehash(algorithm):
            self._upgrade_credential(model, password)

        return model_to_user(model)

    def _upgrade_credential(self, model: UserModel, password: str) -> None:
        salt = credentials.generate_salt()
        with transaction(self.db):
            model.salt = salt
            model.password_hash = credentials.hash_password(password, salt)
            model.password_algo = credentials.CURRENT_ALGORITHM
        logger.info("Upgraded password hash of user %s", model.user_id)

    @storage_guard
    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by user ID.

        Args:
            user_id: User ID to look up.

        Returns:
            User object if found, None otherwise.
        """
        model = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        if model:
            return model_to_user(model)
        return None

    @storage_guard
    def get_users(self) -> List[User]:
        """List all users, newest first."""
        models = self.db.query(UserModel).order_by(UserModel.created_at.desc()).all()
        return [model_to_user(m) for m in models]

    def delete_user(self, user_id: str, requester_id: str) -> None:
        """Delete a user account.

        The last-admin check is evaluated inside the DELETE statement, so two
        admins deleting each other at the same time cannot both succeed.

        Args:
            user_id: Account to delete.
            requester_id: Account performing the deletion.

        Raises:
            ValidationError: If the requester targets their own account.
            NotFoundError: If the account does not exist.
            ConflictError: If the account is the last admin or still owns
                quizzes.
        """
        user_id = require_text(user_id, "User", MAX_ID_LEN)
        requester_id = require_text(requester_id, "Requester", MAX_ID_LEN)
        if user_id == requester_id:
            raise ValidationError("You cannot delete your own account.")

        try:
            with transaction(self.db):
                model = self._get_model(user_id)
                if model is None:
                    raise NotFoundError("User not found.")
                if model.role == "admin":
                    # row locks on backends with SELECT ... FOR UPDATE
                    (
                        self.db.query(UserModel.user_id)
                        .filter(UserModel.role == "admin")
                        .with_for_update()
                        .all()
                    )

                if self._owns_quizzes(user_id):
                    raise ConflictError(_OWNS_QUIZZES)

                if not self._delete_unless_last_admin(user_id):
                    if self._get_model(user_id) is None:
                        raise NotFoundError("User not found.")
                    raise ConflictError("Cannot delete the last admin.")
        except IntegrityError as e:
            # a quiz was submitted by this user in the meantime
            raise ConflictError(_OWNS_QUIZZES) from e

        logger.info("User %s deleted by %s", user_id, requester_id)

    def _get_model(self, user_id: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.user_id == user_id).first()

    def _owns_quizzes(self, user_id: str) -> bool:
        quiz_count = (
            self.db.query(func.count(QuizModel.quiz_id))
            .filter(QuizModel.created_by == user_id)
            .scalar()
        )
        return quiz_count > 0

    def _delete_unless_last_admin(self, user_id: str) -> bool:
        admins = aliased(UserModel)
        admin_count = (
            select(func.count(admins.user_id))
            .where(admins.role == "admin")
            .scalar_subquery()
        )
        deleted = (
            self.db.query(UserModel)
            .filter(
                UserModel.user_id == user_id,
                or_(UserModel.role != "admin", admin_count > 1),
            )
            .delete(synchronize_session=False)
        )
        return deleted > 0

    @storage_guard
    def _find_by_identifier(self, identifier: str) -> Optional[UserModel]:
        key = identifier.lower()
        return (
            self.db.query(UserModel)
            .filter(
                (func.lower(UserModel.email) == key)
                | (func.lower(UserModel.username) == key)
            )
            .first()
        )
