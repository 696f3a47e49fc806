"""Support ticket endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from monlyking.core.database import get_db
from monlyking.core.security import get_current_user
from monlyking.models.user import User
from monlyking.schemas.support import TicketCreate, TicketResponse
from monlyking.services import support as support_service

router = APIRouter()


@router.post("/tickets", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    ticket_data: TicketCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Open a support ticket."""
    ticket = await support_service.create_ticket(db, user, ticket_data)
    await db.commit()
    await db.refresh(ticket)
    return ticket


@router.get("/tickets", response_model=list[TicketResponse])
async def my_tickets(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await support_service.list_tickets(db, user_id=user.id)
