from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from models.enums import GenerationStatus

class ProcessTextResponse(BaseModel):
    generation_id: str = Field(..., description="ID of the created generation job")
    estimated_time_seconds: int = Field(..., description="Estimated processing time")

class GenerationStatusResponse(BaseModel):
    status: GenerationStatus = Field(..., description="Current job status")
    progress: int = Field(..., description="Progress percentage (0, 50 or 100)")
    error: Optional[str] = Field(default=None, description="Error message of a failed job")

class CandidateCardResponse(BaseModel):
    id: str = Field(..., description="Candidate ID")
    front_content: str = Field(..., description="Proposed front text")
    back_content: str = Field(..., description="Proposed back text")
    readability_score: float = Field(..., description="Readability score between 0 and 1")

    model_config = ConfigDict(from_attributes=True)

class GenerationStats(BaseModel):
    text_length: int
    generated_count: int
    generation_time_ms: int

class GenerationResultsResponse(BaseModel):
    cards: List[CandidateCardResponse] = Field(default_factory=list, description="Remaining candidates")
    stats: GenerationStats

class AcceptAllResponse(BaseModel):
    accepted_count: int
    card_ids: List[str] = Field(default_factory=list)

class FinalizeResponse(BaseModel):
    set_id: str
    name: str
    card_count: int

class GenerationHistoryEntry(BaseModel):
    date: str = Field(..., description="Calendar day (YYYY-MM-DD)")
    generated: int
    accepted: int

class GenerationStatisticsResponse(BaseModel):
    total_generated: int
    accepted_unedited: int
    accepted_edited: int
    rejected: int
    acceptance_rate: float = Field(..., description="Accepted cards divided by generated cards")
    average_generation_time: float = Field(..., description="Average generation time of completed jobs in ms")
    history: List[GenerationHistoryEntry] = Field(default_factory=list)
