"""Sign-in session management module.

This module issues opaque session tokens, resolves them back to users and
enforces expiry. Tokens are never stored or logged; the database only holds
their SHA-256 digest, so a leaked table does not expose usable tokens.
"""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session as DBSession, joinedload

from config import SESSION_MAX_AGE_DAYS
from core.clock import Clock, utc_now
from core.database import storage_guard, transaction
from core.exceptions import NotFoundError
from models.auth_session import AuthSessionModel
from models.user import UserModel
from schemas.session import AuthSession
from schemas.user import User
from utils.converters import model_to_user

logger = logging.getLogger(__name__)


def hash_session_token(token: str) -> str:
    """Return the hex SHA-256 digest under which a token is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionManager:
    """Manages sign-in sessions using SQLAlchemy."""

    def __init__(self, db: DBSession, clock: Optional[Clock] = None):
        """Initialize SessionManager.

        Args:
            db: SQLAlchemy Session.
            clock: Optional callable returning the current UTC time.
        """
        self.db = db
        self.clock = clock or utc_now

    def create_session(self, user_id: str) -> AuthSession:
        """Issue a new session for a user.

        Every other session of the user is removed in the same transaction,
        so at most one session per user is live at any time.

        Args:
            user_id: Owner of the new session.

        Returns:
            AuthSession carrying the plaintext token and its expiry.

        Raises:
            NotFoundError: If the user does not exist.
        """
        token = secrets.token_urlsafe(32)
        expires_at = self.clock() + timedelta(days=SESSION_MAX_AGE_DAYS)

        with transaction(self.db):
            user = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
            if user is None:
                raise NotFoundError("User not found.")

            evicted = (
                self.db.query(AuthSessionModel)
                .filter(AuthSessionModel.user_id == user_id)
                .delete(synchronize_session=False)
            )
            self.db.add(
                AuthSessionModel(
                    token_hash=hash_session_token(token),
                    user_id=user_id,
                    expires_at=expires_at.isoformat(),
                )
            )

        if evicted:
            logger.info("Evicted %d previous session(s) for user %s", evicted, user_id)
        logger.info("Created session for user %s", user_id)
        return AuthSession(token=token, expires_at=expires_at)

    def get_user_by_session(self, token: Optional[str]) -> Optional[User]:
        """Resolve a session token to its user.

        An expired session is deleted on the spot and treated as absent.

        Args:
            token: Plaintext session token, possibly missing.

        Returns:
            The owning User, or None if the token is unknown or expired.
        """
        if not token:
            return None

        model = self._get_model(hash_session_token(token))
        if model is None:
            return None

        if self._is_expired(model):
            logger.info("Session for user %s expired, removing", model.user_id)
            self.remove_session(token)
            return None

        return model_to_user(model.user)

    def remove_session(self, token: Optional[str]) -> None:
        """Delete a session. Unknown tokens are ignored."""
        if not token:
            return
        with transaction(self.db):
            self.db.query(AuthSessionModel).filter(
                AuthSessionModel.token_hash == hash_session_token(token)
            ).delete(synchronize_session=False)

    def purge_expired_sessions(self) -> int:
        """Delete every expired session.

        Expiry is already enforced on read; this sweep only reclaims rows.

        Returns:
            Number of sessions removed.
        """
        removed = 0
        with transaction(self.db):
            for model in self.db.query(AuthSessionModel).all():
                if self._is_expired(model):
                    self.db.delete(model)
                    removed += 1
        logger.info("Purged %d expired session(s)", removed)
        return removed

    @storage_guard
    def _get_model(self, token_hash: str) -> Optional[AuthSessionModel]:
        return (
            self.db.query(AuthSessionModel)
            .options(joinedload(AuthSessionModel.user))
            .filter(AuthSessionModel.token_hash == token_hash)
            .first()
        )

    def _is_expired(self, model: AuthSessionModel) -> bool:
        try:
            expires_at = datetime.fromisoformat(model.expires_at.replace("Z", "+00:00"))
        except ValueError:
            return True
        return expires_at < self.clock()
