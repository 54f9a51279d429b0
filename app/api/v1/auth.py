from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from app.api.deps import get_db_session, get_optional_user
from app.models.user import User, UserRole
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    LogoutResponse,
    SessionResponse,
    SignupRequest,
    UserResponse,
)
from app.utils.jwt_manager import clear_auth_cookie, create_access_token, set_auth_cookie
from app.utils.logging_config import logger
from app.utils.passwords import hash_password, verify_password

router = APIRouter()


def _sign_in(response: Response, user: User) -> AuthResponse:
    set_auth_cookie(response, create_access_token(user))
    return AuthResponse(user=UserResponse.model_validate(user))


@router.post("/signup", response_model=AuthResponse)
async def signup(
    payload: SignupRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
):
    """
    Register a new user and sign them in.
    """
    existing = await db.scalar(select(User.id).where(User.email == payload.email))
    if existing:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, "User with this email already exists"
        )

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=UserRole.USER,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent signup for the same email.
        await db.rollback()
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, "User with this email already exists"
        ) from e

    logger.info(f"New user signed up: {user.id}")
    return _sign_in(response, user)


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
):
    user = await db.scalar(
        select(User).options(undefer(User.password_hash)).where(User.email == payload.email)
    )
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid email or password")

    return _sign_in(response, user)


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response):
    clear_auth_cookie(response)
    return LogoutResponse(message="Logged out successfully")


@router.get("/session", response_model=SessionResponse)
async def session(user: Optional[User] = Depends(get_optional_user)):
    """
    Report who the auth cookie belongs to, or `null` when signed out.
    """
    if user is None:
        return SessionResponse(user=None)
    return SessionResponse(user=UserResponse.model_validate(user))
