from sqlalchemy import func, select
from sqlalchemy.orm import Session
from typing import List
from datetime import datetime, UTC
import logging

from models.card import Card, card_set_association
from models.set import CardSet
from services.base import BaseService
from utils.errors import NotFoundError

from api.models.requests.card_set import CardSetCreate, CardSetUpdate
from api.models.responses.card import CardResponse
from api.models.responses.card_set import (
    CardSetResponse,
    CardSetSummaryResponse,
    CardSetDetailResponse,
    AddCardsToSetResponse
)

logger = logging.getLogger(__name__)

class CardSetService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def _active_card_count(self):
        """Correlated count of non-deleted cards in a set."""
        return (
            select(func.count(Card.id))
            .select_from(card_set_association.join(Card, Card.id == card_set_association.c.card_id))
            .where(
                card_set_association.c.set_id == CardSet.id,
                Card.is_deleted == False  # noqa: E712
            )
            .correlate(CardSet)
            .scalar_subquery()
        )

    def _cards_in_set(self, user_id: str, set_id: str):
        return self.db.query(Card).join(
            card_set_association, card_set_association.c.card_id == Card.id
        ).filter(
            card_set_association.c.set_id == set_id,
            Card.user_id == user_id,
            Card.is_deleted == False  # noqa: E712
        )

    def list_card_sets(self, user_id: str, page: int = 1, limit: int = 10) -> dict:
        """List the user's sets with their card counts, newest first."""
        with self.db_operation("List card sets"):
            query = self.db.query(CardSet, self._active_card_count().label("card_count")).filter(
                CardSet.user_id == user_id,
                CardSet.is_deleted == False  # noqa: E712
            )

            def serialize(row):
                card_set, card_count = row
                return CardSetSummaryResponse(
                    **CardSetResponse.model_validate(card_set).model_dump(),
                    card_count=card_count or 0
                )

            return self.paginate(query, page, limit, order_by=CardSet.created_at.desc(), serializer=serialize)

    def create_card_set(self, user_id: str, set_data: CardSetCreate) -> CardSetResponse:
        """Create a new, empty card set."""
        with self.db_operation("Create card set"):
            card_set = CardSet(
                user_id=user_id,
                name=set_data.name,
                description=set_data.description
            )
            self.db.add(card_set)
            self.db.commit()
            self.db.refresh(card_set)
            logger.info(f"Created card set {card_set.id} for user {user_id}")
            return CardSetResponse.model_validate(card_set)

    def get_card_set(self, user_id: str, set_id: str, page: int = 1, limit: int = 10) -> CardSetDetailResponse:
        """Get a set together with one page of its cards."""
        with self.db_operation("Get card set"):
            card_set = self.get_owned(CardSet, set_id, user_id, "Card set")
            cards = self.paginate(
                self._cards_in_set(user_id, card_set.id), page, limit,
                order_by=Card.created_at.desc(),
                serializer=CardResponse.model_validate
            )
            return CardSetDetailResponse(
                **CardSetResponse.model_validate(card_set).model_dump(),
                cards=cards
            )

    def update_card_set(self, user_id: str, set_id: str, set_update: CardSetUpdate) -> CardSetResponse:
        """Update a set's name and description."""
        with self.db_operation("Update card set"):
            card_set = self.get_owned(CardSet, set_id, user_id, "Card set")
            card_set.name = set_update.name
            card_set.description = set_update.description
            self.db.commit()
            self.db.refresh(card_set)
            return CardSetResponse.model_validate(card_set)

    def delete_card_set(self, user_id: str, set_id: str) -> None:
        """Soft delete a set. Its cards are not touched."""
        with self.db_operation("Delete card set"):
            card_set = self.get_owned(CardSet, set_id, user_id, "Card set")
            card_set.soft_delete()
            self.db.commit()
            logger.info(f"Soft deleted card set {set_id}")

    def add_cards_to_set(self, user_id: str, set_id: str, card_ids: List[str]) -> AddCardsToSetResponse:
        """Link existing cards to a set, ignoring cards that are already linked."""
        with self.db_operation("Add cards to set"):
            card_set = self.get_owned(CardSet, set_id, user_id, "Card set")
            requested = list(dict.fromkeys(str(card_id) for card_id in card_ids))

            owned_ids = {
                row.id for row in self.db.query(Card.id).filter(
                    Card.id.in_(requested),
                    Card.user_id == user_id,
                    Card.is_deleted == False  # noqa: E712
                )
            }
            missing = [card_id for card_id in requested if card_id not in owned_ids]
            if missing:
                raise NotFoundError(
                    "Some cards were not found or do not belong to the user",
                    {"card_ids": missing}
                )

            linked_ids = {
                row.card_id for row in self.db.query(card_set_association.c.card_id).filter(
                    card_set_association.c.set_id == card_set.id,
                    card_set_association.c.card_id.in_(requested)
                )
            }
            to_add = [card_id for card_id in requested if card_id not in linked_ids]
            if to_add:
                now = datetime.now(UTC)
                self.db.execute(
                    card_set_association.insert(),
                    [{"card_id": card_id, "set_id": card_set.id, "created_at": now} for card_id in to_add]
                )
            self.db.commit()

            logger.info(f"Added {len(to_add)} cards to set {card_set.id}")
            return AddCardsToSetResponse(
                message="Cards added to set" if to_add else "All cards are already in the set",
                set_id=card_set.id,
                added_card_ids=to_add,
                added_count=len(to_add)
            )

    def get_available_cards(self, user_id: str, set_id: str, page: int = 1, limit: int = 10) -> dict:
        """List the user's cards that are not yet in the set."""
        with self.db_operation("Get available cards"):
            card_set = self.get_owned(CardSet, set_id, user_id, "Card set")
            in_set = select(card_set_association.c.card_id).where(
                card_set_association.c.set_id == card_set.id
            )
            query = self.db.query(Card).filter(
                Card.user_id == user_id,
                Card.is_deleted == False,  # noqa: E712
                Card.id.not_in(in_set)
            )
            return self.paginate(
                query, page, limit,
                order_by=Card.created_at.desc(),
                serializer=CardResponse.model_validate
            )

    def remove_card_from_set(self, user_id: str, set_id: str, card_id: str) -> None:
        """Remove a card from a set.

        A card left without membership in any other non-deleted set is soft
        deleted as well.
        """
        with self.db_operation("Remove card from set"):
            card_set = self.get_owned(CardSet, set_id, user_id, "Card set")
            card = self.get_owned(Card, card_id, user_id, "Card")

            removed = self.db.execute(
                card_set_association.delete().where(
                    card_set_association.c.set_id == card_set.id,
                    card_set_association.c.card_id == card.id
                )
            ).rowcount
            if not removed:
                raise NotFoundError("Card is not in this set")

            other_sets = self.db.query(func.count()).select_from(card_set_association).join(
                CardSet, CardSet.id == card_set_association.c.set_id
            ).filter(
                card_set_association.c.card_id == card.id,
                CardSet.is_deleted == False  # noqa: E712
            ).scalar()

            if not other_sets:
                card.soft_delete()
                logger.info(f"Card {card.id} has no remaining sets, soft deleted")

            self.db.commit()
