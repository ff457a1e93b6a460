"""Quiz aggregate management.

This module stores quizzes together with their ordered questions and
options and drives the moderation lifecycle:

    pending --approve--> approved
    pending --reject---> rejected
    pending --edit-----> pending

Approved and rejected quizzes can only be deleted. Every write that touches
more than one row runs inside a single transaction, so a quiz is never
visible with only part of its questions or options.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from config import MAX_ID_LEN, MAX_REJECTION_LEN
from core.clock import Clock, utc_now
from core.database import storage_guard, transaction
from core.exceptions import ConflictError, NotFoundError, ValidationError
from models.category import CategoryModel
from models.quiz import OptionModel, QuestionModel, QuizModel, QuizStatus
from schemas.quiz import Quiz, QuizInput
from utils.converters import model_to_quiz
from utils.validators import NormalizedQuestion, NormalizedQuiz, normalize_quiz, require_text

logger = logging.getLogger(__name__)

_PENDING_NOT_FOUND = "Pending quiz not found."


class QuizManager:
    """Manages quizzes and their moderation state."""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        """Initialize QuizManager.

        Args:
            db: SQLAlchemy Session.
            clock: Optional callable returning the current UTC time.
        """
        self.db = db
        self.clock = clock or utc_now

    # --- Reads ---

    def _aggregate_query(self):
        return self.db.query(QuizModel).options(
            selectinload(QuizModel.questions).selectinload(QuestionModel.options)
        )

    @storage_guard
    def get_quizzes(self) -> List[Quiz]:
        """List approved quizzes, newest first."""
        models = (
            self._aggregate_query()
            .filter(QuizModel.status == QuizStatus.APPROVED)
            .order_by(QuizModel.created_at.desc())
            .all()
        )
        return [model_to_quiz(m) for m in models]

    @storage_guard
    def get_quiz_by_id(self, quiz_id: str) -> Optional[Quiz]:
        """Get an approved quiz; pending and rejected quizzes are hidden."""
        model = (
            self._aggregate_query()
            .filter(
                QuizModel.quiz_id == quiz_id,
                QuizModel.status == QuizStatus.APPROVED,
            )
            .first()
        )
        if model:
            return model_to_quiz(model)
        return None

    @storage_guard
    def get_user_submissions(self, user_id: str) -> List[Quiz]:
        """List a user's pending and rejected quizzes, newest first."""
        models = (
            self._aggregate_query()
            .filter(
                QuizModel.created_by == user_id,
                QuizModel.status.in_([QuizStatus.PENDING, QuizStatus.REJECTED]),
            )
            .order_by(QuizModel.created_at.desc())
            .all()
        )
        return [model_to_quiz(m) for m in models]

    @storage_guard
    def get_submission_by_id(self, quiz_id: str) -> Optional[Quiz]:
        """Get a quiz in any moderation state, for its owner or moderators."""
        model = self._aggregate_query().filter(QuizModel.quiz_id == quiz_id).first()
        if model:
            return model_to_quiz(model)
        return None

    @storage_guard
    def get_pending_quizzes(self) -> List[Quiz]:
        """List quizzes awaiting moderation, newest first."""
        models = (
            self._aggregate_query()
            .filter(QuizModel.status == QuizStatus.PENDING)
            .order_by(QuizModel.created_at.desc())
            .all()
        )
        return [model_to_quiz(m) for m in models]

    # --- Writes ---

    def submit_quiz(self, payload: QuizInput, user_id: str) -> Quiz:
        """Submit a quiz for moderation.

        Args:
            payload: Quiz content.
            user_id: Submitting user.

        Returns:
            The stored quiz in pending state.

        Raises:
            ValidationError: If the payload is invalid or the category does
                not exist.
        """
        quiz = normalize_quiz(payload)
        model = self._insert_aggregate(quiz, user_id, QuizStatus.PENDING)
        logger.info("Quiz %s submitted by user %s", model.quiz_id, user_id)
        return model_to_quiz(model)

    def create_quiz_as_admin(self, payload: QuizInput, admin_id: str) -> Quiz:
        """Create a quiz that is approved immediately.

        Validation is identical to submit_quiz.
        """
        quiz = normalize_quiz(payload)
        model = self._insert_aggregate(quiz, admin_id, QuizStatus.APPROVED)
        logger.info("Quiz %s created and approved by admin %s", model.quiz_id, admin_id)
        return model_to_quiz(model)

    def _insert_aggregate(
        self, quiz: NormalizedQuiz, user_id: str, status: QuizStatus
    ) -> QuizModel:
        now = self.clock().isoformat()
        try:
            with transaction(self.db):
                self._ensure_category(quiz.category_id)
                model = QuizModel(
                    quiz_id=str(uuid.uuid4()),
                    title=quiz.title,
                    description=quiz.description,
                    category_id=quiz.category_id,
                    created_by=user_id,
                    created_at=now,
                    updated_at=now,
                    status=status,
                )
                if status == QuizStatus.APPROVED:
                    model.reviewed_by = user_id
                    model.reviewed_at = now
                self.db.add(model)
                self._attach_questions(model, quiz.questions)
        except IntegrityError as e:
            raise ConflictError("Quiz references a missing category or user.") from e
        return model

    def update_pending_quiz(self, quiz_id: str, payload: QuizInput) -> Quiz:
        """Edit a pending quiz in place.

        All questions and options are replaced by the ones in the payload;
        positions are re-derived from the new order.

        Raises:
            ValidationError: If the payload is invalid.
            NotFoundError: If the quiz does not exist or is not pending.
        """
        quiz = normalize_quiz(payload)
        try:
            with transaction(self.db):
                self._ensure_category(quiz.category_id)
                updated = (
                    self.db.query(QuizModel)
                    .filter(
                        QuizModel.quiz_id == quiz_id,
                        QuizModel.status == QuizStatus.PENDING,
                    )
                    .update(
                        {
                            QuizModel.title: quiz.title,
                            QuizModel.description: quiz.description,
                            QuizModel.category_id: quiz.category_id,
                            QuizModel.updated_at: self.clock().isoformat(),
                        },
                        synchronize_session=False,
                    )
                )
                if updated == 0:
                    raise NotFoundError(_PENDING_NOT_FOUND)

                model = (
                    self._aggregate_query()
                    .populate_existing()
                    .filter(QuizModel.quiz_id == quiz_id)
                    .one()
                )
                # delete-orphan removes the previous questions and options
                model.questions = []
                self.db.flush()
                self._attach_questions(model, quiz.questions)
        except IntegrityError as e:
            raise ConflictError("Quiz references a missing category.") from e

        logger.info("Pending quiz %s updated", quiz_id)
        return model_to_quiz(model)

    def approve_pending_quiz(self, quiz_id: str, admin_id: str) -> None:
        """Approve a pending quiz.

        The status check and the write are one conditional UPDATE, so of two
        concurrent decisions on the same quiz exactly one succeeds.

        Raises:
            NotFoundError: If the quiz is not currently pending.
        """
        now = self.clock().isoformat()
        self._transition(
            quiz_id,
            {
                QuizModel.status: QuizStatus.APPROVED,
                QuizModel.reviewed_by: admin_id,
                QuizModel.reviewed_at: now,
                QuizModel.rejection_reason: None,
                QuizModel.updated_at: now,
            },
        )
        logger.info("Quiz %s approved by admin %s", quiz_id, admin_id)

    def reject_pending_quiz(self, quiz_id: str, admin_id: str, reason: str) -> None:
        """Reject a pending quiz with a reason.

        Raises:
            ValidationError: If the reason is blank or longer than 200
                characters.
            NotFoundError: If the quiz is not currently pending.
        """
        reason = require_text(reason, "Rejection reason", MAX_REJECTION_LEN)
        now = self.clock().isoformat()
        self._transition(
            quiz_id,
            {
                QuizModel.status: QuizStatus.REJECTED,
                QuizModel.reviewed_by: admin_id,
                QuizModel.reviewed_at: now,
                QuizModel.rejection_reason: reason,
                QuizModel.updated_at: now,
            },
        )
        logger.info("Quiz %s rejected by admin %s", quiz_id, admin_id)

    def delete_quiz(self, quiz_id: str) -> None:
        """Delete a quiz in any state together with its questions and options.

        Raises:
            NotFoundError: If the quiz does not exist.
        """
        quiz_id = require_text(quiz_id, "Quiz", MAX_ID_LEN)
        with transaction(self.db):
            model = self.db.query(QuizModel).filter(QuizModel.quiz_id == quiz_id).first()
            if model is None:
                raise NotFoundError("Quiz not found.")
            self.db.delete(model)
        logger.info("Deleted quiz: %s", quiz_id)

    # --- Helpers ---

    def _transition(self, quiz_id: str, values: dict) -> None:
        with transaction(self.db):
            updated = (
                self.db.query(QuizModel)
                .filter(
                    QuizModel.quiz_id == quiz_id,
                    QuizModel.status == QuizStatus.PENDING,
                )
                .update(values, synchronize_session=False)
            )
            if updated == 0:
                raise NotFoundError(_PENDING_NOT_FOUND)

    def _ensure_category(self, category_id: str) -> None:
        exists = (
            self.db.query(CategoryModel.id)
            .filter(CategoryModel.id == category_id)
            .first()
        )
        if not exists:
            raise ValidationError("Category not found.")

    def _attach_questions(
        self, model: QuizModel, questions: List[NormalizedQuestion]
    ) -> None:
        for question_index, question in enumerate(questions):
            question_model = QuestionModel(
                question_id=str(uuid.uuid4()),
                prompt=question.prompt,
                position=question_index,
            )
            for option_index, option in enumerate(question.options):
                question_model.options.append(
                    OptionModel(
                        option_id=str(uuid.uuid4()),
                        label=option.label,
                        is_correct=option.is_correct,
                        position=option_index,
                    )
                )
            model.questions.append(question_model)
        self.db.flush()
