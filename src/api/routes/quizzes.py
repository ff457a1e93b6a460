"""Public quiz and submission routes."""

from typing import List

from fastapi import APIRouter

from core.dependencies import AccessControlDep, QuizManagerDep, SessionTokenDep
from core.exceptions import NotFoundError
from schemas.quiz import Quiz, QuizInput

router = APIRouter(prefix="/api/quizzes", tags=["Quizzes"])


@router.get("", response_model=List[Quiz], summary="List approved quizzes")
def list_quizzes(quiz_manager: QuizManagerDep = None) -> List[Quiz]:
    return quiz_manager.get_quizzes()


@router.post("/submit", response_model=Quiz, summary="Submit a quiz for review")
def submit_quiz(
    req: QuizInput,
    token: SessionTokenDep = None,
    access: AccessControlDep = None,
) -> Quiz:
    """Submit a quiz; it stays pending until an admin reviews it."""
    return access.submit_quiz(token, req)


@router.get(
    "/submissions",
    response_model=List[Quiz],
    summary="List the caller's pending and rejected quizzes",
)
def list_submissions(
    token: SessionTokenDep = None,
    access: AccessControlDep = None,
) -> List[Quiz]:
    return access.get_my_submissions(token)


@router.get(
    "/submissions/{quiz_id}",
    response_model=Quiz,
    summary="Get one of the caller's quizzes",
)
def get_submission(
    quiz_id: str,
    token: SessionTokenDep = None,
    access: AccessControlDep = None,
) -> Quiz:
    return access.get_my_submission(token, quiz_id)


@router.get("/{quiz_id}", response_model=Quiz, summary="Get an approved quiz")
def get_quiz(quiz_id: str, quiz_manager: QuizManagerDep = None) -> Quiz:
    quiz = quiz_manager.get_quiz_by_id(quiz_id)
    if quiz is None:
        raise NotFoundError("Quiz not found.")
    return quiz
