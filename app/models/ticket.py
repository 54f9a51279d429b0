"""Ticket model for tracking support requests."""

import enum
import uuid
from typing import Optional

from sqlalchemy import Enum as EnumType
from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel, utcnow
from app.models.message import Message
from app.models.user import User


def _values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class TicketStatus(enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TicketCategory(enum.Enum):
    TECHNICAL = "technical"
    BILLING = "billing"
    GENERAL = "general"
    FEATURE = "feature"
    BUG = "bug"


class Ticket(BaseModel):
    __tablename__ = "tickets"

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[TicketStatus] = mapped_column(
        EnumType(
            TicketStatus,
            name="ticket_status",
            native_enum=False,
            values_callable=_values,
        ),
        nullable=False,
        default=TicketStatus.OPEN,
        index=True,
    )
    priority: Mapped[TicketPriority] = mapped_column(
        EnumType(
            TicketPriority,
            name="ticket_priority",
            native_enum=False,
            values_callable=_values,
        ),
        nullable=False,
        default=TicketPriority.MEDIUM,
    )
    category: Mapped[TicketCategory] = mapped_column(
        EnumType(
            TicketCategory,
            name="ticket_category",
            native_enum=False,
            values_callable=_values,
        ),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assigned_to_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="Support agent the ticket is assigned to, if any.",
    )

    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    assigned_to: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[assigned_to_id]
    )
    # pyrefly: ignore [unknown-name]
    messages: Mapped[list["Message"]] = relationship(
        "Message",
        back_populates="ticket",
        order_by="Message.position",
        cascade="all, delete-orphan",
    )

    def append_message(
        self,
        content: str,
        sender_id: Optional[uuid.UUID] = None,
        is_ai: bool = False,
    ) -> Message:
        """
        Add a message to the end of the thread.

        The `messages` collection must already be loaded; the new message takes
        the slot after the highest stored position. Replying to an open ticket
        moves it into progress.
        """
        position = max((m.position for m in self.messages), default=-1) + 1
        message = Message(
            position=position,
            sender_id=sender_id,
            is_ai=is_ai,
            content=content,
        )
        self.messages.append(message)
        if self.status == TicketStatus.OPEN:
            self.status = TicketStatus.IN_PROGRESS
        self.updated_at = utcnow()
        return message

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, status='{self.status.value}')>"
