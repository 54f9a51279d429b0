"""Knowledge base article model used as assistant context."""

import enum
import uuid
from typing import Optional

from sqlalchemy import JSON
from sqlalchemy import Enum as EnumType
from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel
from app.models.user import User


class KnowledgeCategory(enum.Enum):
    GENERAL = "general"
    TECHNICAL = "technical"
    BILLING = "billing"
    FEATURE = "feature"
    FAQ = "faq"


class KnowledgeArticle(BaseModel):
    __tablename__ = "knowledge_articles"

    title: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[KnowledgeCategory] = mapped_column(
        EnumType(
            KnowledgeCategory,
            name="knowledge_category",
            native_enum=False,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
    )
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    updated_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    created_by: Mapped["User"] = relationship("User", foreign_keys=[created_by_id])

    def as_context(self) -> str:
        """Render the article the way it is handed to the assistant."""
        return f"{self.title}:\n{self.content}"

    def __repr__(self) -> str:
        return f"<KnowledgeArticle(id={self.id}, title='{self.title}')>"
