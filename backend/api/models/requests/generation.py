from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID

class ProcessTextRequest(BaseModel):
    text: str = Field(..., min_length=100, max_length=10000, description="Source text to generate cards from")
    target_count: Optional[int] = Field(default=None, ge=1, le=50, description="Number of cards to generate")
    set_id: Optional[UUID] = Field(default=None, description="Optional destination card set")

class AcceptAllRequest(BaseModel):
    set_id: Optional[UUID] = Field(default=None, description="Optional set to link the accepted cards to")

class AcceptCardRequest(BaseModel):
    set_id: Optional[UUID] = Field(default=None, description="Optional set to link the accepted card to")
    front_content: Optional[str] = Field(default=None, min_length=1, max_length=200, description="Edited front text")
    back_content: Optional[str] = Field(default=None, min_length=1, max_length=500, description="Edited back text")

class FinalizeRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Name of the new card set")
    description: Optional[str] = Field(default=None, max_length=500, description="Description of the new card set")
    accepted_cards: List[UUID] = Field(..., min_length=1, description="IDs of the accepted candidates")
