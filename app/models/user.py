"""User model."""

import enum

from sqlalchemy import Enum as EnumType
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class UserRole(enum.Enum):
    USER = "user"
    ADMIN = "admin"


class User(BaseModel):
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )
    # Only loaded when a query undefers it (login).
    password_hash: Mapped[str] = mapped_column(
        String(255), nullable=False, deferred=True
    )
    role: Mapped[UserRole] = mapped_column(
        EnumType(
            UserRole,
            name="user_role",
            native_enum=False,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=UserRole.USER,
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
