from datetime import datetime, UTC
from sqlalchemy import Column, String, DateTime, Text, Boolean
from sqlalchemy.orm import relationship

from .base import Base
from .card import card_set_association, generate_uuid

class CardSet(Base):
    __tablename__ = "card_sets"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(255), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    # Soft delete
    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    # Relationships
    cards = relationship(
        "Card",
        secondary=card_set_association,
        back_populates="card_sets"
    )

    def soft_delete(self):
        """Hide the set; its cards are left untouched."""
        self.is_deleted = True
        self.deleted_at = datetime.now(UTC)
