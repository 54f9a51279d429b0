"""Pydantic schemas for tickets and their message threads."""

import uuid
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, StringConstraints

from app.models.ticket import TicketCategory, TicketPriority, TicketStatus


class TicketCreateRequest(BaseModel):
    title: Annotated[
        str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)
    ]
    description: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    category: TicketCategory
    priority: Optional[TicketPriority] = None


class TicketMessageRequest(BaseModel):
    # Blank content is rejected by the route after the access check.
    content: str


class TicketUpdateRequest(BaseModel):
    """Management fields an admin may change."""

    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assigned_to_id: Optional[uuid.UUID] = None


class UserRef(BaseModel):
    id: uuid.UUID
    name: str
    email: str

    model_config = {"from_attributes": True}


class SenderRef(BaseModel):
    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    id: uuid.UUID
    sender: Optional[SenderRef] = None
    is_ai: bool
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TicketCreated(BaseModel):
    id: uuid.UUID
    title: str
    status: TicketStatus
    priority: TicketPriority
    category: TicketCategory
    created_at: datetime

    model_config = {"from_attributes": True}


class TicketSummary(TicketCreated):
    description: str
    updated_at: datetime
    user: UserRef


class TicketDetail(TicketSummary):
    assigned_to: Optional[SenderRef] = None
    messages: List[MessageResponse]


class TicketCreatedResponse(BaseModel):
    ticket: TicketCreated


class TicketListResponse(BaseModel):
    tickets: List[TicketSummary]


class TicketDetailResponse(BaseModel):
    ticket: TicketDetail


class TicketStatsResponse(BaseModel):
    total: int
    open: int
    in_progress: int
    resolved: int
    urgent: int
