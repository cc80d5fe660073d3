from .base import Base
from .enums import (
    SourceType,
    GenerationStatus,
    GenerationBackend
)
from .card import Card, card_set_association
from .set import CardSet
from .generation import GenerationJob, GeneratedCardCandidate

__all__ = [
    'Base',
    'SourceType',
    'GenerationStatus',
    'GenerationBackend',
    'Card',
    'card_set_association',
    'CardSet',
    'GenerationJob',
    'GeneratedCardCandidate',
]
