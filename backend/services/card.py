from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime, UTC
import logging

from models.card import Card, card_set_association
from models.set import CardSet
from models.enums import SourceType
from services.base import BaseService

from api.models.requests.card import CardCreate, CardUpdate
from api.models.responses.card import CardResponse

logger = logging.getLogger(__name__)

class CardService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def _active_cards(self, user_id: str):
        return self.db.query(Card).filter(
            Card.user_id == user_id,
            Card.is_deleted == False  # noqa: E712
        )

    def list_cards(self, user_id: str, page: int = 1, limit: int = 10,
                   source_type: Optional[SourceType] = None) -> dict:
        """List the user's cards, newest first."""
        with self.db_operation("List cards"):
            query = self._active_cards(user_id)
            if source_type is not None:
                query = query.filter(Card.source_type == SourceType(source_type).value)
            return self.paginate(
                query, page, limit,
                order_by=Card.created_at.desc(),
                serializer=CardResponse.model_validate
            )

    def get_card(self, user_id: str, card_id: str) -> CardResponse:
        """Get a single card owned by the user."""
        with self.db_operation("Get card"):
            card = self.get_owned(Card, card_id, user_id, "Card")
            return CardResponse.model_validate(card)

    def create_card(self, user_id: str, card_data: CardCreate) -> CardResponse:
        """Create a card, optionally linking it to one of the user's sets."""
        with self.db_operation("Create card"):
            card_set = None
            if card_data.set_id is not None:
                card_set = self.get_owned(CardSet, card_data.set_id, user_id, "Card set")

            card = Card(
                user_id=user_id,
                front_content=card_data.front_content,
                back_content=card_data.back_content,
                source_type=SourceType(card_data.source_type).value
            )
            self.db.add(card)
            self.db.flush()

            if card_set is not None:
                self.link_card_to_set(card.id, card_set.id)

            self.db.commit()
            self.db.refresh(card)
            logger.info(f"Created card {card.id} for user {user_id}")
            return CardResponse.model_validate(card)

    def update_card(self, user_id: str, card_id: str, card_update: CardUpdate) -> CardResponse:
        """Replace the content of a card."""
        with self.db_operation("Update card"):
            card = self.get_owned(Card, card_id, user_id, "Card")
            card.front_content = card_update.front_content
            card.back_content = card_update.back_content
            self.db.commit()
            self.db.refresh(card)
            return CardResponse.model_validate(card)

    def delete_card(self, user_id: str, card_id: str) -> None:
        """Soft delete a card."""
        with self.db_operation("Delete card"):
            card = self.get_owned(Card, card_id, user_id, "Card")
            card.soft_delete()
            self.db.commit()
            logger.info(f"Soft deleted card {card_id}")

    def link_card_to_set(self, card_id: str, set_id: str):
        """Create the card-set association row."""
        self.db.execute(
            card_set_association.insert().values(
                card_id=card_id,
                set_id=set_id,
                created_at=datetime.now(UTC)
            )
        )
