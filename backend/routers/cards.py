from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
from database import get_db
from api.dependencies import get_current_user_id
from models.enums import SourceType
from services.card import CardService
from api.models.requests.card import CardCreate, CardUpdate
from api.models.responses.card import CardResponse, CardListResponse

router = APIRouter()

@router.get("", response_model=CardListResponse)
async def list_cards(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    source_type: Optional[SourceType] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List the current user's cards."""
    service = CardService(db)
    return service.list_cards(user_id, page, limit, source_type)

@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_card(
    card: CardCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a card, optionally adding it to a set."""
    service = CardService(db)
    return service.create_card(user_id, card)

@router.get("/{card_id}", response_model=CardResponse)
async def get_card(
    card_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    service = CardService(db)
    return service.get_card(user_id, str(card_id))

@router.put("/{card_id}", response_model=CardResponse)
async def update_card(
    card_id: UUID,
    card_update: CardUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    service = CardService(db)
    return service.update_card(user_id, str(card_id), card_update)

@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    card_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Soft delete a card."""
    service = CardService(db)
    service.delete_card(user_id, str(card_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
