from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID

class CardSetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Name of the card set")
    description: Optional[str] = Field(default=None, max_length=500, description="Optional description of the set")

class CardSetUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="New name for the set")
    description: Optional[str] = Field(default=None, max_length=500, description="New description for the set")

class CardsToSetAdd(BaseModel):
    card_ids: List[UUID] = Field(..., min_length=1, description="IDs of the cards to add to the set")
