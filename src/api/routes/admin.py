"""Admin routes: moderation, quizzes, categories and users.

Every handler goes through AccessControl, which rejects non-admin callers
before any manager runs.
"""

import logging
from typing import List

from fastapi import APIRouter

from core.dependencies import AccessControlDep, SessionTokenDep
from core.exceptions import ValidationError
from schemas.category import Category, CreateCategoryRequest
from schemas.quiz import ModerationRequest, Quiz, QuizInput
from schemas.user import CreateUserRequest, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


# --- Moderation ---

@router.get("/pending", response_model=List[Quiz], summary="List pending quizzes")
def list_pending(
    token: SessionTokenDep = None,
    access: AccessControlDep = None,
) -> List[Quiz]:
    return access.get_pending_quizzes(token)


@router.patch("/pending/{quiz_id}", response_model=Quiz, summary="Edit a pending quiz")
def update_pending(
    quiz_id: str,
    req: QuizInput,
    token: SessionTokenDep = None,
    access: AccessControlDep = None,
) -> Quiz:
    return access.update_pending_quiz(token, quiz_id, req)


@router.post("/pending/{quiz_id}", summary="Approve or reject a pending quiz")
def moderate_pending(
    quiz_id: str,
    req: ModerationRequest,
    token: SessionTokenDep = None,
    access: AccessControlDep = None,
) -> dict:
    """Apply a moderation decision.

    Args:
        quiz_id: Quiz under review.
        req: ``action`` is 'approve' or 'reject'; a reject needs a reason.
        token: Session token of the caller.
        access: Injected AccessControl instance.

    Returns:
        Dictionary with ok flag.

    Raises:
        ValidationError: If the action is unknown.
    """
    if req.action == "approve":
        access.approve_pending_quiz(token, quiz_id)
    elif req.action == "reject":
        access.reject_pending_quiz(token, quiz_id, req.rejection_reason or "")
    else:
        # still require an admin before reporting on the payload
        access.require_admin(token)
        raise ValidationError("Unknown action.")
    return {"ok": True}


# --- Quizzes ---

@router.post("/quizzes", response_model=Quiz, summary="Create an approved quiz")
def create_quiz(
    req: QuizInput,
    token: SessionTokenDep = None,
    access: AccessControlDep = None,
) -> Quiz:
    return access.create_quiz_as_admin(token, req)


@router.delete("/quizzes/{quiz_id}", summary="Delete a quiz")
def delete_quiz(
    quiz_id: str,
    token: SessionTokenDep = None,
    access: AccessControlDep = None,
) -> dict:
    access.delete_quiz(token, quiz_id)
    return {"ok": True}


# --- Categories ---

@router.post("/categories", response_model=Category, summary="Create a category")
def create_category(
    req: CreateCategoryRequest,
    token: SessionTokenDep = None,
    access: AccessControlDep = None,
) -> Category:
    return access.create_category(token, req.name, req.description)


@router.delete("/categories/{category_id}", summary="Delete a category")
def delete_category(
    category_id: str,
    token: SessionTokenDep = None,
    access: AccessControlDep = None,
) -> dict:
    access.delete_category(token, category_id)
    return {"ok": True}


# --- Users ---

@router.get("/users", response_model=List[User], summary="List users")
def list_users(
    token: SessionTokenDep = None,
    access: AccessControlDep = None,
) -> List[User]:
    return access.get_users(token)


@router.post("/users", response_model=User, summary="Create a user")
def create_user(
    req: CreateUserRequest,
    token: SessionTokenDep = None,
    access: AccessControlDep = None,
) -> User:
    return access.create_user_as_admin(
        token,
        email=req.email,
        username=req.username,
        password=req.password,
        display_name=req.display_name,
        role=req.role,
    )


@router.delete("/users/{user_id}", summary="Delete a user")
def delete_user(
    user_id: str,
    token: SessionTokenDep = None,
    access: AccessControlDep = None,
) -> dict:
    access.delete_user(token, user_id)
    return {"ok": True}
