from .base import CandidateDraft, CardGenerator, get_card_generator

__all__ = [
    'CandidateDraft',
    'CardGenerator',
    'get_card_generator',
]
