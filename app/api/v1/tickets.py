import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from langchain_core.language_models import BaseChatModel
from sqlalchemy import case, func, select, true
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from app.api.deps import get_current_user, get_db_session, get_llm, require_admin
from app.models.message import Message
from app.models.ticket import (
    Ticket,
    TicketCategory,
    TicketPriority,
    TicketStatus,
)
from app.models.user import User
from app.schemas.ticket import (
    TicketCreated,
    TicketCreatedResponse,
    TicketCreateRequest,
    TicketDetail,
    TicketDetailResponse,
    TicketListResponse,
    TicketMessageRequest,
    TicketStatsResponse,
    TicketSummary,
    TicketUpdateRequest,
)
from app.services.assistant import build_ticket_conversation, generate_reply
from app.services.knowledge import format_articles, search_articles
from app.settings import settings
from app.utils.logging_config import logger

router = APIRouter()

MESSAGE_SAVE_ATTEMPTS = 3


def visible_to(user: User):
    """Filter clause limiting tickets to what `user` may see."""
    if user.is_admin:
        return true()
    return Ticket.user_id == user.id


async def load_ticket(db: AsyncSession, ticket_id: uuid.UUID) -> Ticket:
    """
    Fetch a ticket with its owner, assignee and full thread.

    Raises:
        HTTPException: 404 if the ticket does not exist.
    """
    ticket = await db.scalar(
        select(Ticket)
        .options(
            joinedload(Ticket.user),
            joinedload(Ticket.assigned_to),
            selectinload(Ticket.messages).joinedload(Message.sender),
        )
        .where(Ticket.id == ticket_id)
        .execution_options(populate_existing=True)
    )
    if not ticket:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Ticket not found")
    return ticket


def ensure_access(ticket: Ticket, user: User, action: str = "view") -> None:
    if not user.is_admin and ticket.user_id != user.id:
        raise HTTPException(
            status.HTTP_403_FORBIDDEN, f"You are not authorized to {action} this ticket"
        )


def detail_response(ticket: Ticket) -> TicketDetailResponse:
    return TicketDetailResponse(ticket=TicketDetail.model_validate(ticket))


async def save_message(
    db: AsyncSession,
    ticket_id: uuid.UUID,
    content: str,
    sender_id: Optional[uuid.UUID] = None,
    is_ai: bool = False,
) -> Ticket:
    """
    Append a message to the stored thread and commit it.

    The thread is reloaded before every attempt so the message lands after
    anything written concurrently. Losing a position to another writer fails
    the unique constraint and the append is retried.

    Returns:
        Ticket: The ticket with its thread, ending in the new message.
    """
    for attempt in range(1, MESSAGE_SAVE_ATTEMPTS + 1):
        ticket = await load_ticket(db, ticket_id)
        message = ticket.append_message(content, sender_id=sender_id, is_ai=is_ai)
        try:
            await db.commit()
            return ticket
        except IntegrityError:
            await db.rollback()
            if attempt == MESSAGE_SAVE_ATTEMPTS:
                raise
            logger.warning(
                f"Position {message.position} on ticket {ticket_id} already taken, retrying"
            )


@router.post("", response_model=TicketCreatedResponse)
async def create_ticket(
    payload: TicketCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Open a new ticket. The description becomes the first message of the thread.
    """
    ticket = Ticket(
        title=payload.title,
        description=payload.description,
        category=payload.category,
        priority=payload.priority or TicketPriority.MEDIUM,
        status=TicketStatus.OPEN,
        user_id=current_user.id,
        messages=[
            Message(
                position=0,
                sender_id=current_user.id,
                is_ai=False,
                content=payload.description,
            )
        ],
    )
    db.add(ticket)
    await db.commit()
    logger.info(f"Ticket {ticket.id} created by {current_user.id}")
    return TicketCreatedResponse(ticket=TicketCreated.model_validate(ticket))


@router.get("", response_model=TicketListResponse)
async def list_tickets(
    status_filter: Optional[TicketStatus] = Query(None, alias="status"),
    category: Optional[TicketCategory] = None,
    priority: Optional[TicketPriority] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    query = (
        select(Ticket)
        .options(joinedload(Ticket.user))
        .where(visible_to(current_user))
        .order_by(Ticket.created_at.desc())
    )
    if status_filter:
        query = query.where(Ticket.status == status_filter)
    if category:
        query = query.where(Ticket.category == category)
    if priority:
        query = query.where(Ticket.priority == priority)

    tickets = (await db.scalars(query)).all()
    return TicketListResponse(
        tickets=[TicketSummary.model_validate(ticket) for ticket in tickets]
    )


@router.get("/stats", response_model=TicketStatsResponse)
async def ticket_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    def count_where(condition):
        return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

    row = (
        await db.execute(
            select(
                func.count(Ticket.id),
                count_where(Ticket.status == TicketStatus.OPEN),
                count_where(Ticket.status == TicketStatus.IN_PROGRESS),
                count_where(Ticket.status == TicketStatus.RESOLVED),
                count_where(Ticket.priority == TicketPriority.URGENT),
            ).where(visible_to(current_user))
        )
    ).one()
    total, open_count, in_progress, resolved, urgent = row
    return TicketStatsResponse(
        total=total,
        open=open_count,
        in_progress=in_progress,
        resolved=resolved,
        urgent=urgent,
    )


@router.get("/recent", response_model=TicketListResponse)
async def recent_tickets(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    tickets = (
        await db.scalars(
            select(Ticket)
            .options(joinedload(Ticket.user))
            .where(visible_to(current_user))
            .order_by(Ticket.created_at.desc())
            .limit(settings.RECENT_TICKETS_LIMIT)
        )
    ).all()
    return TicketListResponse(
        tickets=[TicketSummary.model_validate(ticket) for ticket in tickets]
    )


@router.get("/{ticket_id}", response_model=TicketDetailResponse)
async def get_ticket(
    ticket_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    ticket = await load_ticket(db, ticket_id)
    ensure_access(ticket, current_user)
    return detail_response(ticket)


@router.post("/{ticket_id}/message", response_model=TicketDetailResponse)
async def post_message(
    ticket_id: uuid.UUID,
    payload: TicketMessageRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    llm: BaseChatModel = Depends(get_llm),
):
    """
    Append the user's message to the thread, then try to append an AI reply.

    The user's message is committed before the assistant is called, so a
    failing completion never loses it.
    """
    ticket = await load_ticket(db, ticket_id)
    ensure_access(ticket, current_user, action="update")

    content = payload.content
    if not content.strip():
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Message content is required")

    # 1. Save user message
    ticket = await save_message(db, ticket_id, content, sender_id=current_user.id)

    # 2. Draft and save the assistant reply
    try:
        articles = await search_articles(db, content)
        conversation = build_ticket_conversation(
            ticket, content, ticket.messages, format_articles(articles)
        )
        reply = await generate_reply(llm, conversation)
        await save_message(db, ticket_id, reply, is_ai=True)
    except Exception as e:
        logger.error(f"AI response error for ticket {ticket_id}: {e}", exc_info=True)
        await db.rollback()

    ticket = await load_ticket(db, ticket_id)
    return detail_response(ticket)


@router.patch("/{ticket_id}", response_model=TicketDetailResponse)
async def update_ticket(
    ticket_id: uuid.UUID,
    payload: TicketUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Admin-only management of status, priority and assignee.
    """
    ticket = await load_ticket(db, ticket_id)
    changes = payload.model_dump(exclude_unset=True)

    if "assigned_to_id" in changes and changes["assigned_to_id"] is not None:
        assignee = await db.get(User, changes["assigned_to_id"])
        if not assignee:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Assignee not found")

    for field, value in changes.items():
        if field in ("status", "priority") and value is None:
            continue
        setattr(ticket, field, value)
    await db.commit()
    logger.info(f"Ticket {ticket.id} updated by admin {admin.id}: {sorted(changes)}")

    ticket = await load_ticket(db, ticket_id)
    return detail_response(ticket)
