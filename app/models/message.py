"""Message model for storing the conversation thread of a ticket."""

import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel
from app.models.user import User

if TYPE_CHECKING:
    from app.models.ticket import Ticket


class Message(BaseModel):
    __tablename__ = "ticket_messages"
    __table_args__ = (
        UniqueConstraint("ticket_id", "position", name="uq_ticket_message_position"),
    )

    ticket_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Insertion index of the message within its ticket.",
    )
    sender_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    is_ai: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    ticket: Mapped["Ticket"] = relationship("Ticket", back_populates="messages")
    sender: Mapped[Optional["User"]] = relationship("User")

    def __repr__(self) -> str:
        sender = "ai" if self.is_ai else self.sender_id
        return f"<Message(id={self.id}, ticket_id={self.ticket_id}, sender='{sender}')>"
