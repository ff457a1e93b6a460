"""Input normalization for the manager layer.

Every function here either returns a cleaned value or raises
ValidationError. Managers call them before touching the database, so a
request is rejected as a whole before any write happens.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from config import (
    MAX_CATEGORY_NAME_LEN,
    MAX_DESC_LEN,
    MAX_EMAIL_LEN,
    MAX_OPTION_COUNT,
    MAX_OPTION_LEN,
    MAX_PROMPT_LEN,
    MAX_QUESTION_COUNT,
    MAX_TITLE_LEN,
    MAX_USERNAME_LEN,
    MIN_OPTION_COUNT,
    MIN_QUESTION_COUNT,
)
from core.exceptions import ValidationError
from schemas.quiz import QuestionInput, QuizInput

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+$")


@dataclass(frozen=True)
class NormalizedOption:
    label: str
    is_correct: bool


@dataclass(frozen=True)
class NormalizedQuestion:
    prompt: str
    options: List[NormalizedOption]


@dataclass(frozen=True)
class NormalizedQuiz:
    title: str
    description: str
    category_id: str
    questions: List[NormalizedQuestion]


def require_text(value: Optional[str], field: str, max_len: int) -> str:
    """Trim a mandatory text field and enforce its maximum length."""
    trimmed = (value or "").strip()
    if not trimmed:
        raise ValidationError(f"{field} is required.")
    if len(trimmed) > max_len:
        raise ValidationError(f"{field} is too long.")
    return trimmed


def optional_text(value: Optional[str], field: str, max_len: int) -> Optional[str]:
    """Trim an optional text field; blank values become None."""
    trimmed = (value or "").strip()
    if not trimmed:
        return None
    if len(trimmed) > max_len:
        raise ValidationError(f"{field} is too long.")
    return trimmed


def validate_email(email: Optional[str]) -> str:
    """Return the trimmed, lower-cased email or raise ValidationError."""
    email = require_text(email, "Email", MAX_EMAIL_LEN).lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Email is invalid.")
    return email


def validate_username(username: Optional[str]) -> str:
    username = require_text(username, "Username", MAX_USERNAME_LEN)
    if not USERNAME_PATTERN.match(username):
        raise ValidationError(
            "Username can only use letters, numbers, ., - and _."
        )
    return username


def normalize_questions(questions: List[QuestionInput]) -> List[NormalizedQuestion]:
    """Validate the question list of a quiz.

    Args:
        questions: Questions in display order.

    Returns:
        Cleaned questions in the same order.

    Raises:
        ValidationError: If there are not 1-20 questions, a question does not
            have 2-6 options, or a question does not have exactly one
            correct option.
    """
    if not questions or len(questions) < MIN_QUESTION_COUNT:
        raise ValidationError("Questions are required.")
    if len(questions) > MAX_QUESTION_COUNT:
        raise ValidationError("Too many questions.")

    normalized = []
    for question in questions:
        prompt = require_text(question.prompt, "Question prompt", MAX_PROMPT_LEN)
        if len(question.options) < MIN_OPTION_COUNT:
            raise ValidationError("Each question needs at least two options.")
        if len(question.options) > MAX_OPTION_COUNT:
            raise ValidationError("Too many options in a question.")

        options = [
            NormalizedOption(
                label=require_text(option.label, "Option label", MAX_OPTION_LEN),
                is_correct=bool(option.is_correct),
            )
            for option in question.options
        ]
        correct_count = sum(1 for option in options if option.is_correct)
        if correct_count != 1:
            raise ValidationError("Each question needs exactly one correct option.")

        normalized.append(NormalizedQuestion(prompt=prompt, options=options))
    return normalized


def normalize_quiz(payload: QuizInput) -> NormalizedQuiz:
    """Validate a complete quiz payload.

    The category is only checked for shape here; its existence is verified
    by the caller against the database.
    """
    return NormalizedQuiz(
        title=require_text(payload.title, "Title", MAX_TITLE_LEN),
        description=optional_text(payload.description, "Description", MAX_DESC_LEN)
        or "",
        category_id=require_text(
            payload.category_id, "Category", MAX_CATEGORY_NAME_LEN
        ),
        questions=normalize_questions(payload.questions),
    )
