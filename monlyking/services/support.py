"""Support tickets and staff replies."""
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from monlyking.core.exceptions import NotFoundError
from monlyking.models.support import SupportTicket, TicketStatus
from monlyking.models.user import User
from monlyking.schemas.support import TicketCreate
from monlyking.services.chat import post_support_message
from monlyking.services.references import generate_ticket_reference

logger = structlog.get_logger(__name__)


async def create_ticket(db: AsyncSession, user: User, data: TicketCreate) -> SupportTicket:
    ticket = SupportTicket(
        reference=generate_ticket_reference(),
        user_id=user.id,
        order_id=data.order_id,
        category=data.category,
        subject=data.subject,
        description=data.description,
        priority=data.priority,
        status=TicketStatus.OPEN,
    )
    db.add(ticket)
    await db.flush()

    logger.info(
        "support_ticket_created",
        ticket_id=ticket.id,
        reference=ticket.reference,
        user_id=user.id,
        category=data.category.value,
        priority=data.priority.value,
    )
    return ticket


async def _get_ticket(db: AsyncSession, ticket_id: int) -> SupportTicket:
    ticket = await db.get(SupportTicket, ticket_id)
    if not ticket:
        raise NotFoundError("Ticket", ticket_id)
    return ticket


async def update_ticket_status(
    db: AsyncSession,
    ticket_id: int,
    status: TicketStatus,
    admin: User,
    admin_notes: Optional[str] = None,
) -> SupportTicket:
    ticket = await _get_ticket(db, ticket_id)
    ticket.status = status
    ticket.admin_id = admin.id
    if admin_notes is not None:
        ticket.admin_notes = admin_notes
    if status == TicketStatus.RESOLVED:
        ticket.resolved_at = datetime.utcnow()
    ticket.updated_at = datetime.utcnow()
    await db.flush()

    logger.info("support_ticket_status_changed", ticket_id=ticket.id, status=status.value, admin_id=admin.id)
    return ticket


async def respond_to_ticket(db: AsyncSession, ticket_id: int, response: str, admin: User):
    """
    Store a staff reply and deliver it to the user's support chat.

    Returns:
        (ticket, chat message)
    """
    ticket = await _get_ticket(db, ticket_id)
    ticket.admin_response = response
    ticket.admin_id = admin.id
    ticket.status = TicketStatus.IN_PROGRESS
    ticket.updated_at = datetime.utcnow()

    message = await post_support_message(db, ticket.user_id, response)

    logger.info("support_ticket_answered", ticket_id=ticket.id, admin_id=admin.id)
    return ticket, message


async def list_tickets(
    db: AsyncSession,
    user_id: Optional[int] = None,
    status: Optional[TicketStatus] = None,
) -> list[SupportTicket]:
    query = select(SupportTicket)
    if user_id is not None:
        query = query.where(SupportTicket.user_id == user_id)
    if status:
        query = query.where(SupportTicket.status == status)
    query = query.order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc())

    result = await db.execute(query)
    return list(result.scalars().all())
