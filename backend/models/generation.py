from datetime import datetime, UTC
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Float, Index
from sqlalchemy.orm import relationship

from .base import Base
from .card import generate_uuid
from .enums import GenerationStatus

class GenerationJob(Base):
    """One user's text-to-flashcards request. Rows are never deleted."""
    __tablename__ = "generation_logs"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(255), nullable=False, index=True)

    # Source text
    source_text = Column(Text, nullable=False)
    source_text_length = Column(Integer, nullable=False)
    source_text_hash = Column(String(64), nullable=False)

    target_count = Column(Integer, nullable=False)
    status = Column(
        String(20),
        nullable=False,
        default=GenerationStatus.PENDING.value
    )
    model = Column(String(100), nullable=True)
    estimated_time_seconds = Column(Integer, nullable=True)

    # Statistics
    generated_count = Column(Integer, nullable=False, default=0)
    accepted_edited_count = Column(Integer, nullable=False, default=0)
    accepted_unedited_count = Column(Integer, nullable=False, default=0)
    rejected_count = Column(Integer, nullable=False, default=0)
    generation_time_ms = Column(Integer, nullable=True)

    error_message = Column(Text, nullable=True)
    set_id = Column(String(36), ForeignKey('card_sets.id'), nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    # Relationships
    candidates = relationship(
        "GeneratedCardCandidate",
        back_populates="generation",
        order_by="GeneratedCardCandidate.position"
    )

class GeneratedCardCandidate(Base):
    """A proposed card awaiting accept or reject."""
    __tablename__ = "generation_results"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    generation_id = Column(String(36), ForeignKey('generation_logs.id'), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    front_content = Column(Text, nullable=False)
    back_content = Column(Text, nullable=False)
    readability_score = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))

    # Relationships
    generation = relationship("GenerationJob", back_populates="candidates")

    __table_args__ = (
        Index('ix_generation_results_generation_position', 'generation_id', 'position'),
    )
