import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session, require_admin
from app.models.user import User, UserRole
from app.schemas.auth import (
    RoleUpdateRequest,
    UserListItem,
    UserListResponse,
    UserResponse,
)
from app.utils.logging_config import logger

router = APIRouter()


@router.get("", response_model=UserListResponse)
async def list_users(
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    users = (await db.scalars(select(User).order_by(User.created_at.desc()))).all()
    return UserListResponse(users=[UserListItem.model_validate(u) for u in users])


@router.patch("/{user_id}/role", response_model=UserResponse)
async def update_role(
    user_id: uuid.UUID,
    payload: RoleUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "User not found")
    if user.id == admin.id and payload.role != UserRole.ADMIN:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, "Administrators cannot demote themselves"
        )

    user.role = payload.role
    await db.commit()
    logger.info(f"User {user.id} role set to {payload.role.value} by {admin.id}")
    return UserResponse.model_validate(user)
