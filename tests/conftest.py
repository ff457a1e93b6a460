"""Shared fixtures: a fresh in-memory database per test and a pinned clock."""

from datetime import datetime, timedelta

import pytest
import pytz
from sqlalchemy.pool import StaticPool

from core.database import SessionLocal, configure_engine
from schemas.quiz import OptionInput, QuestionInput, QuizInput
from utils.category_manager import CategoryManager
from utils.user_manager import UserManager

PASSWORD = "correct-horse-battery"


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def engine():
    return configure_engine("sqlite://", poolclass=StaticPool)


@pytest.fixture
def db(engine):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 1, 1, 12, 0, tzinfo=pytz.utc))


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role="user", username=None, password=PASSWORD):
        counter["n"] += 1
        username = username or f"player{counter['n']}"
        return UserManager(db).create_user_as_admin(
            email=f"{username}@example.com",
            username=username,
            password=password,
            role=role,
        )

    return _make_user


@pytest.fixture
def category(db):
    return CategoryManager(db).create_category("Web Security", "Browser attacks.")


def build_quiz(category_id, question_count=2, title="OWASP basics"):
    return QuizInput(
        title=title,
        description="Warm-up questions.",
        category_id=category_id,
        questions=[
            QuestionInput(
                prompt=f"Question {i}?",
                options=[
                    OptionInput(label=f"Q{i} right", is_correct=True),
                    OptionInput(label=f"Q{i} wrong", is_correct=False),
                    OptionInput(label=f"Q{i} also wrong", is_correct=False),
                ],
            )
            for i in range(question_count)
        ],
    )


@pytest.fixture
def quiz_payload(category):
    """Factory for valid quiz payloads in the default category."""

    def _quiz_payload(question_count=2, title="OWASP basics", category_id=None):
        return build_quiz(category_id or category.id, question_count, title)

    return _quiz_payload
