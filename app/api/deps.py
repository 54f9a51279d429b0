"""Dependencies for API endpoints."""

import uuid
from typing import AsyncGenerator, Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from langchain_core.language_models import BaseChatModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.db import SessionLocal
from app.models.user import User
from app.services.assistant import get_chat_model
from app.settings import settings
from app.utils.jwt_manager import decode_access_token
from app.utils.logging_config import logger


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency to get a DB session.
    """
    async with SessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def get_llm() -> BaseChatModel:
    """
    FastAPI dependency returning the shared chat model.
    """
    return get_chat_model()


async def _user_from_token(token: str, db: AsyncSession) -> Optional[User]:
    payload = decode_access_token(token)
    try:
        user_id = uuid.UUID(str(payload["id"]))
    except ValueError as e:
        raise jwt.InvalidTokenError(f"Malformed user id: {payload['id']}") from e
    return await db.get(User, user_id)


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """
    Dependency to get the current user from the auth cookie.
    """
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )

    try:
        user = await _user_from_token(token, db)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has expired."
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected auth token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
        ) from e

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found."
        )
    return user


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Optional[User]:
    """
    Like `get_current_user` but returns None instead of raising.
    """
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        return None
    try:
        return await _user_from_token(token, db)
    except jwt.InvalidTokenError as e:
        logger.info(f"Session check with unusable token: {e}")
        return None


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return current_user
