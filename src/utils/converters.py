"""Conversions between database models and pydantic schemas."""

from models.category import CategoryModel
from models.quiz import OptionModel, QuestionModel, QuizModel
from models.user import UserModel
from schemas.category import Category
from schemas.quiz import Option, Question, Quiz
from schemas.user import User


def model_to_user(model: UserModel) -> User:
    return User(
        user_id=model.user_id,
        email=model.email,
        username=model.username,
        display_name=model.display_name,
        role=model.role,
        created_at=model.created_at,
    )


def model_to_category(model: CategoryModel) -> Category:
    return Category(
        id=model.id,
        name=model.name,
        slug=model.slug,
        description=model.description or "",
    )


def model_to_option(model: OptionModel) -> Option:
    return Option(
        option_id=model.option_id,
        label=model.label,
        is_correct=bool(model.is_correct),
    )


def model_to_question(model: QuestionModel) -> Question:
    # relationship is ordered by position
    return Question(
        question_id=model.question_id,
        prompt=model.prompt,
        options=[model_to_option(o) for o in model.options],
    )


def model_to_quiz(model: QuizModel) -> Quiz:
    return Quiz(
        quiz_id=model.quiz_id,
        title=model.title,
        description=model.description or "",
        category_id=model.category_id,
        created_by=model.created_by,
        created_at=model.created_at,
        status=model.status,
        reviewed_by=model.reviewed_by,
        reviewed_at=model.reviewed_at,
        rejection_reason=model.rejection_reason,
        questions=[model_to_question(q) for q in model.questions],
    )
