"""Game account listing schemas."""
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, List
from pydantic import BaseModel, Field, ConfigDict, model_validator

from monlyking.models.listing import Game, ListingStatus
from monlyking.services.game_data import validate_game_data


class ListingBase(BaseModel):
    """Base listing schema."""
    game: Game
    title: str = Field(..., min_length=10, max_length=100)
    description: str = Field(..., min_length=50, max_length=1000)
    price: Decimal = Field(..., ge=1, max_digits=12, decimal_places=2)


class ListingCreate(ListingBase):
    """Schema for creating a listing."""
    images: List[str] = []
    game_data: dict[str, Any] = {}

    @model_validator(mode="after")
    def check_game_data(self):
        errors = validate_game_data(self.game, self.game_data)
        if errors:
            raise ValueError("; ".join(errors))
        return self


class ListingUpdate(BaseModel):
    """Schema for updating a listing. Game-specific data is revalidated against the listing's game."""
    title: Optional[str] = Field(None, min_length=10, max_length=100)
    description: Optional[str] = Field(None, min_length=50, max_length=1000)
    price: Optional[Decimal] = Field(None, ge=1, max_digits=12, decimal_places=2)
    images: Optional[List[str]] = None
    game_data: Optional[dict[str, Any]] = None


class ListingResponse(BaseModel):
    """Schema for listing response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    seller_id: int
    game: Game
    title: str
    description: str
    price: float
    images: List[str] = []
    game_data: dict[str, Any] = {}
    status: ListingStatus
    views: int
    created_at: datetime
    updated_at: datetime


class ListingList(BaseModel):
    """Schema for paginated listing response."""
    items: List[ListingResponse]
    total: int
    page: int
    page_size: int
    pages: int
