from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID
from models.enums import SourceType

class CardCreate(BaseModel):
    front_content: str = Field(..., min_length=1, max_length=200, description="Front text of the card")
    back_content: str = Field(..., min_length=1, max_length=500, description="Back text of the card")
    source_type: SourceType = Field(default=SourceType.MANUAL, description="How the card was created")
    set_id: Optional[UUID] = Field(default=None, description="Optional set to add the new card to")

class CardUpdate(BaseModel):
    front_content: str = Field(..., min_length=1, max_length=200, description="New front text of the card")
    back_content: str = Field(..., min_length=1, max_length=500, description="New back text of the card")
