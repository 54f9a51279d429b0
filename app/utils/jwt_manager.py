"""Utility for issuing and reading the signed auth cookie."""

from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Response

from app.models.user import User
from app.settings import settings


def create_access_token(user: User) -> str:
    """
    Creates a JWT carrying the user's id, email and role.

    Args:
        user (User): The authenticated user.

    Returns:
        str: The encoded JWT token.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "iat": now,
        "exp": now + timedelta(days=settings.AUTH_TOKEN_EXPIRE_DAYS),
        "id": str(user.id),
        "email": user.email,
        "role": user.role.value,
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token


def decode_access_token(token: str) -> dict:
    """
    Decodes and verifies a token issued by `create_access_token`.

    Raises:
        jwt.InvalidTokenError: If the signature is wrong, the token is
            malformed, expired, or missing the `id` claim.
    """
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["exp", "id"]},
    )


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=60 * 60 * 24 * settings.AUTH_TOKEN_EXPIRE_DAYS,
        path="/",
        httponly=True,
        secure=not settings.DEBUG,
        samesite="lax",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=not settings.DEBUG,
        samesite="lax",
    )
