from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from uuid import UUID
from database import get_db
from api.dependencies import get_current_user_id
from services.card_set import CardSetService
from api.models.requests.card_set import CardSetCreate, CardSetUpdate, CardsToSetAdd
from api.models.responses.card import CardListResponse
from api.models.responses.card_set import (
    CardSetResponse,
    CardSetListResponse,
    CardSetDetailResponse,
    AddCardsToSetResponse
)

router = APIRouter()

@router.get("", response_model=CardSetListResponse)
async def list_card_sets(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List the current user's card sets with card counts."""
    service = CardSetService(db)
    return service.list_card_sets(user_id, page, limit)

@router.post("", response_model=CardSetResponse, status_code=status.HTTP_201_CREATED)
async def create_card_set(
    card_set: CardSetCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    service = CardSetService(db)
    return service.create_card_set(user_id, card_set)

@router.get("/{set_id}", response_model=CardSetDetailResponse)
async def get_card_set(
    set_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get a card set with one page of its cards."""
    service = CardSetService(db)
    return service.get_card_set(user_id, str(set_id), page, limit)

@router.put("/{set_id}", response_model=CardSetResponse)
async def update_card_set(
    set_id: UUID,
    set_update: CardSetUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    service = CardSetService(db)
    return service.update_card_set(user_id, str(set_id), set_update)

@router.delete("/{set_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card_set(
    set_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Soft delete a card set. Its cards are kept."""
    service = CardSetService(db)
    service.delete_card_set(user_id, str(set_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/{set_id}/cards", response_model=AddCardsToSetResponse)
async def add_cards_to_set(
    set_id: UUID,
    payload: CardsToSetAdd,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Add existing cards to a set."""
    service = CardSetService(db)
    return service.add_cards_to_set(user_id, str(set_id), payload.card_ids)

@router.get("/{set_id}/available-cards", response_model=CardListResponse)
async def get_available_cards(
    set_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List cards that can still be added to the set."""
    service = CardSetService(db)
    return service.get_available_cards(user_id, str(set_id), page, limit)

@router.delete("/{set_id}/cards/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_card_from_set(
    set_id: UUID,
    card_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Remove a card from a set; a card left in no other set is deleted."""
    service = CardSetService(db)
    service.remove_card_from_set(user_id, str(set_id), str(card_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
