from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime
from api.models.responses.card import CardResponse
from api.models.responses.common import PaginationInfo

class CardSetResponse(BaseModel):
    id: str = Field(..., description="Set ID")
    name: str = Field(..., description="Name of the set")
    description: Optional[str] = Field(default=None, description="Description of the set")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)

class CardSetSummaryResponse(CardSetResponse):
    card_count: int = Field(..., description="Number of non-deleted cards in the set")

class CardSetListResponse(BaseModel):
    data: List[CardSetSummaryResponse] = Field(default_factory=list, description="Sets on this page")
    pagination: PaginationInfo

class CardSetCardsPage(BaseModel):
    data: List[CardResponse] = Field(default_factory=list, description="Cards on this page")
    pagination: PaginationInfo

class CardSetDetailResponse(CardSetResponse):
    cards: CardSetCardsPage = Field(..., description="Paginated cards of the set")

class AddCardsToSetResponse(BaseModel):
    message: str
    set_id: str
    added_card_ids: List[str] = Field(default_factory=list, description="Cards newly linked to the set")
    added_count: int
