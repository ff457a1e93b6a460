"""User schema definitions.

This module defines the public User model and the request bodies of the
authentication and user administration endpoints. Credential material
(salt, hash, algorithm tag) never appears on these models.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

Role = Literal["user", "admin"]


class User(BaseModel):
    """Public view of a user account."""
    user_id: str = Field(description="The unique identifier for the user.")
    email: str = Field(description="Lower-cased email address.")
    username: str = Field(description="Unique username, case preserved.")
    display_name: Optional[str] = Field(
        default=None,
        description="Name shown to other players; defaults to the username.",
    )
    role: Role = Field(default="user", description="'user' or 'admin'.")
    created_at: str = Field(description="ISO timestamp of account creation.")


class SignUpRequest(BaseModel):
    email: str = ""
    username: str = ""
    password: str = ""
    display_name: Optional[str] = None


class SignInRequest(BaseModel):
    identifier: str = Field(default="", description="Email or username.")
    password: str = ""


class CreateUserRequest(SignUpRequest):
    role: Role = "user"


class CurrentUserResponse(BaseModel):
    user: Optional[User] = None
