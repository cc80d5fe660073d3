from datetime import datetime, UTC
import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, Text, Float, Boolean, Index, Table
from sqlalchemy.orm import relationship

from .base import Base
from .enums import SourceType

def generate_uuid() -> str:
    return str(uuid.uuid4())

# Junction table for card-set membership
card_set_association = Table(
    'cards_to_sets',
    Base.metadata,
    Column('card_id', String(36), ForeignKey('cards.id', ondelete='CASCADE'), primary_key=True),
    Column('set_id', String(36), ForeignKey('card_sets.id', ondelete='CASCADE'), primary_key=True),
    Column('created_at', DateTime, default=lambda: datetime.now(UTC)),
    Index('ix_cards_to_sets_set_id', 'set_id')
)

class Card(Base):
    __tablename__ = "cards"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(255), nullable=False, index=True)
    front_content = Column(Text, nullable=False)
    back_content = Column(Text, nullable=False)
    source_type = Column(
        String(20),
        nullable=False,
        default=SourceType.MANUAL.value
    )
    readability_score = Column(Float, nullable=True)

    # Soft delete
    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    # Relationships
    card_sets = relationship(
        "CardSet",
        secondary=card_set_association,
        back_populates="cards"
    )

    def soft_delete(self):
        """Hide the card from every listing and detail query."""
        self.is_deleted = True
        self.deleted_at = datetime.now(UTC)
