from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime
from models.enums import SourceType
from api.models.responses.common import PaginationInfo

class CardResponse(BaseModel):
    id: str = Field(..., description="Card ID")
    front_content: str = Field(..., description="Front text of the card")
    back_content: str = Field(..., description="Back text of the card")
    source_type: SourceType = Field(..., description="How the card was created")
    readability_score: Optional[float] = Field(default=None, description="Readability score between 0 and 1")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)

class CardListResponse(BaseModel):
    data: List[CardResponse] = Field(default_factory=list, description="Cards on this page")
    pagination: PaginationInfo
