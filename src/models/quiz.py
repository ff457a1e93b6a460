"""Quiz aggregate database models.

A quiz owns its questions and a question owns its options. Both child
collections are ordered by ``position`` and removed together with their
parent.
"""

import enum

from sqlalchemy import Boolean, Column, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import Base


class QuizStatus(str, enum.Enum):
    """Moderation state of a quiz."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class QuizModel(Base):
    """Quiz database model."""

    __tablename__ = "quizzes"

    quiz_id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    category_id = Column(
        String, ForeignKey("categories.id"), index=True, nullable=False
    )
    created_by = Column(
        String, ForeignKey("users.user_id"), index=True, nullable=False
    )
    created_at = Column(String, nullable=False)  # ISO format string
    updated_at = Column(String, nullable=True)
    reviewed_by = Column(String, nullable=True)
    reviewed_at = Column(String, nullable=True)
    status = Column(
        Enum(
            QuizStatus,
            name="quiz_status",
            values_callable=lambda e: [member.value for member in e],
        ),
        index=True,
        nullable=False,
        default=QuizStatus.PENDING,
    )
    rejection_reason = Column(String, nullable=True)

    questions = relationship(
        "QuestionModel",
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="QuestionModel.position",
    )


class QuestionModel(Base):
    """Question database model."""

    __tablename__ = "questions"

    question_id = Column(String, primary_key=True, index=True)
    quiz_id = Column(
        String,
        ForeignKey("quizzes.quiz_id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    prompt = Column(String, nullable=False)
    position = Column(Integer, nullable=False)

    quiz = relationship("QuizModel", back_populates="questions")
    options = relationship(
        "OptionModel",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="OptionModel.position",
    )


class OptionModel(Base):
    """Answer option database model."""

    __tablename__ = "options"

    option_id = Column(String, primary_key=True, index=True)
    question_id = Column(
        String,
        ForeignKey("questions.question_id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    label = Column(String, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=False)

    question = relationship("QuestionModel", back_populates="options")
