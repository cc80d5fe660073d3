from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import logging
from database import get_db
from api.dependencies import get_current_user_id
from services.generation import GenerationService
from services.generation_worker import run_generation_job
from services.rate_limiter import FixedWindowRateLimiter, get_rate_limiter
from api.models.requests.generation import (
    ProcessTextRequest,
    AcceptAllRequest,
    AcceptCardRequest,
    FinalizeRequest
)
from api.models.responses.card import CardResponse
from api.models.responses.generation import (
    ProcessTextResponse,
    GenerationStatusResponse,
    GenerationResultsResponse,
    AcceptAllResponse,
    FinalizeResponse,
    GenerationStatisticsResponse
)

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/process-text", response_model=ProcessTextResponse, status_code=status.HTTP_202_ACCEPTED)
async def process_text(
    request: ProcessTextRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    rate_limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
    db: Session = Depends(get_db)
):
    """Start generating flashcards from text. Poll the status endpoint for progress."""
    rate_limiter.check(user_id)
    service = GenerationService(db)
    job = service.start_generation(user_id, request)
    background_tasks.add_task(run_generation_job, job.id)
    return service.to_process_response(job)

@router.get("/statistics", response_model=GenerationStatisticsResponse)
async def get_generation_statistics(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Acceptance statistics across the current user's generations."""
    service = GenerationService(db)
    return service.get_statistics(user_id)

@router.get("/{generation_id}/status", response_model=GenerationStatusResponse)
async def get_generation_status(
    generation_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    service = GenerationService(db)
    return service.get_status(user_id, str(generation_id))

@router.get("/{generation_id}/results", response_model=GenerationResultsResponse)
async def get_generation_results(
    generation_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Generated candidates and stats. Empty while the job is still running."""
    service = GenerationService(db)
    return service.get_results(user_id, str(generation_id))

@router.post("/{generation_id}/accept", response_model=AcceptAllResponse)
async def accept_all_cards(
    generation_id: UUID,
    request: Optional[AcceptAllRequest] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Accept every remaining candidate."""
    service = GenerationService(db)
    return service.accept_all(user_id, str(generation_id), request or AcceptAllRequest())

@router.post(
    "/{generation_id}/cards/{card_id}/accept",
    response_model=CardResponse,
    status_code=status.HTTP_201_CREATED
)
async def accept_card(
    generation_id: UUID,
    card_id: UUID,
    request: Optional[AcceptCardRequest] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Accept one candidate, optionally with edited content."""
    service = GenerationService(db)
    return service.accept_card(user_id, str(generation_id), str(card_id), request or AcceptCardRequest())

@router.post("/{generation_id}/cards/{card_id}/reject", status_code=status.HTTP_204_NO_CONTENT)
async def reject_card(
    generation_id: UUID,
    card_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    service = GenerationService(db)
    service.reject_card(user_id, str(generation_id), str(card_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/{generation_id}/finalize", response_model=FinalizeResponse, status_code=status.HTTP_201_CREATED)
async def finalize_generation(
    generation_id: UUID,
    request: FinalizeRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a card set from the accepted candidates."""
    service = GenerationService(db)
    return service.finalize(user_id, str(generation_id), request)
