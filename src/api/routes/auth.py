"""Authentication routes.

This module handles HTTP endpoints for sign-up, sign-in, sign-out and the
current user. The session token travels in an HTTP-only cookie.
"""

import logging

from fastapi import APIRouter, Response

from config import SESSION_COOKIE_NAME, SESSION_COOKIE_SECURE, SESSION_MAX_AGE_DAYS
from core.dependencies import (
    CurrentUserDep,
    SessionManagerDep,
    SessionTokenDep,
    UserManagerDep,
)
from schemas.user import CurrentUserResponse, SignInRequest, SignUpRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

SESSION_MAX_AGE_SECONDS = SESSION_MAX_AGE_DAYS * 24 * 60 * 60


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        path="/",
        secure=SESSION_COOKIE_SECURE,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        SESSION_COOKIE_NAME,
        httponly=True,
        samesite="lax",
        path="/",
        secure=SESSION_COOKIE_SECURE,
    )


@router.post("/signup", response_model=CurrentUserResponse, summary="Sign up")
def signup(
    req: SignUpRequest,
    response: Response,
    user_manager: UserManagerDep = None,
    session_manager: SessionManagerDep = None,
) -> CurrentUserResponse:
    """Register a new user and sign them in.

    Args:
        req: Email, username, password and optional display name.
        response: Outgoing response used to set the session cookie.
        user_manager: Injected UserManager instance.
        session_manager: Injected SessionManager instance.

    Returns:
        CurrentUserResponse with the new user.
    """
    user = user_manager.create_user(
        email=req.email,
        username=req.username,
        password=req.password,
        display_name=req.display_name,
    )
    session = session_manager.create_session(user.user_id)
    set_session_cookie(response, session.token)
    return CurrentUserResponse(user=user)


@router.post("/signin", response_model=CurrentUserResponse, summary="Sign in")
def signin(
    req: SignInRequest,
    response: Response,
    user_manager: UserManagerDep = None,
    session_manager: SessionManagerDep = None,
) -> CurrentUserResponse:
    """Sign in with email or username and password.

    A new session replaces any session the user already had.
    """
    user = user_manager.verify_user(req.identifier, req.password)
    session = session_manager.create_session(user.user_id)
    set_session_cookie(response, session.token)
    return CurrentUserResponse(user=user)


@router.post("/signout", summary="Sign out")
def signout(
    response: Response,
    token: SessionTokenDep = None,
    session_manager: SessionManagerDep = None,
) -> dict:
    session_manager.remove_session(token)
    clear_session_cookie(response)
    return {"ok": True}


@router.get("/me", response_model=CurrentUserResponse, summary="Current user")
def me(current_user: CurrentUserDep = None) -> CurrentUserResponse:
    return CurrentUserResponse(user=current_user)
