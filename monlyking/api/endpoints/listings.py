"""Game account listing endpoints."""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
import structlog

from monlyking.core.config import settings
from monlyking.core.database import get_db
from monlyking.core.security import get_current_user
from monlyking.models.listing import GameAccount, Game, ListingStatus
from monlyking.models.user import User
from monlyking.schemas.listing import ListingCreate, ListingUpdate, ListingResponse, ListingList
from monlyking.services.game_data import validate_game_data

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _get_owned_listing(db: AsyncSession, listing_id: int, user_id: int) -> GameAccount:
    listing = await db.get(GameAccount, listing_id)

    if not listing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Listing not found",
        )

    if listing.seller_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to modify this listing",
        )

    return listing


@router.get("/", response_model=ListingList)
async def list_listings(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    game: Optional[Game] = None,
    status: Optional[ListingStatus] = None,
    seller_id: Optional[int] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """List listings with pagination and filters."""
    query = select(GameAccount)

    # Apply filters
    query = query.where(GameAccount.status == (status or ListingStatus.ACTIVE))

    if game:
        query = query.where(GameAccount.game == game)

    if seller_id:
        query = query.where(GameAccount.seller_id == seller_id)

    if search:
        query = query.where(
            GameAccount.title.ilike(f"%{search}%") | GameAccount.description.ilike(f"%{search}%")
        )

    # Get total count
    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar()

    # Apply pagination
    query = query.order_by(GameAccount.created_at.desc(), GameAccount.id.desc())
    query = query.offset((page - 1) * page_size).limit(page_size)

    result = await db.execute(query)
    listings = result.scalars().all()

    return ListingList(
        items=listings,
        total=total,
        page=page,
        page_size=page_size,
        pages=(total + page_size - 1) // page_size,
    )


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(
    listing_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get listing by ID."""
    listing = await db.get(GameAccount, listing_id)

    if not listing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Listing not found",
        )

    # Increment views
    listing.views += 1
    await db.commit()

    return listing


@router.post("/", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    listing_data: ListingCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Put a game account up for sale."""
    listing = GameAccount(
        seller_id=user.id,
        game=listing_data.game,
        title=listing_data.title,
        description=listing_data.description,
        price=listing_data.price,
        images=listing_data.images,
        game_data=listing_data.game_data,
        status=ListingStatus.ACTIVE,
        views=0,
    )

    db.add(listing)
    await db.commit()
    await db.refresh(listing)

    logger.info("listing_created", listing_id=listing.id, seller_id=user.id, game=listing.game.value)
    return listing


@router.put("/{listing_id}", response_model=ListingResponse)
async def update_listing(
    listing_id: int,
    listing_data: ListingUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a listing."""
    listing = await _get_owned_listing(db, listing_id, user.id)

    if listing.status != ListingStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot edit a listing that is {listing.status.value}",
        )

    update_data = listing_data.model_dump(exclude_unset=True)

    if update_data.get("game_data") is not None:
        errors = validate_game_data(listing.game, update_data["game_data"])
        if errors:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="; ".join(errors),
            )

    for field, value in update_data.items():
        if value is not None:
            setattr(listing, field, value)

    await db.commit()
    await db.refresh(listing)

    return listing


@router.delete("/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_listing(
    listing_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Remove a listing from sale (soft delete)."""
    listing = await _get_owned_listing(db, listing_id, user.id)

    if listing.status == ListingStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Listing has an order in progress",
        )

    listing.status = ListingStatus.REMOVED
    await db.commit()

    logger.info("listing_removed", listing_id=listing.id, seller_id=user.id)
