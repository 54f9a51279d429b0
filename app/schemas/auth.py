"""Pydantic schemas for authentication and user management."""

import uuid
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, StringConstraints

from app.models.user import UserRole
from app.utils.passwords import MIN_PASSWORD_LENGTH

EMAIL_PATTERN = r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$"

Email = Annotated[
    str, StringConstraints(strip_whitespace=True, pattern=EMAIL_PATTERN, max_length=255)
]


class SignupRequest(BaseModel):
    name: Annotated[
        str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)
    ]
    email: Email
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class LoginRequest(BaseModel):
    email: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Public view of a user; never includes the password."""

    id: uuid.UUID
    name: str
    email: str
    role: UserRole

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    user: UserResponse


class SessionResponse(BaseModel):
    user: Optional[UserResponse] = None


class LogoutResponse(BaseModel):
    message: str


class UserListItem(UserResponse):
    created_at: datetime


class UserListResponse(BaseModel):
    users: List[UserListItem]


class RoleUpdateRequest(BaseModel):
    role: UserRole
