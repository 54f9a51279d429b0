"""Exports all models for easy access."""

from .base import Base, BaseModel
from .knowledge import KnowledgeArticle, KnowledgeCategory
from .message import Message
from .ticket import Ticket, TicketCategory, TicketPriority, TicketStatus
from .user import User, UserRole

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "UserRole",
    "Ticket",
    "TicketStatus",
    "TicketPriority",
    "TicketCategory",
    "Message",
    "KnowledgeArticle",
    "KnowledgeCategory",
]
