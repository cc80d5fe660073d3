from dataclasses import dataclass
from typing import List, Protocol

from config.env import settings
from models.enums import GenerationBackend

FRONT_MAX_LENGTH = 200
BACK_MAX_LENGTH = 500

@dataclass
class CandidateDraft:
    """A generated card before it is stored as a candidate."""
    front_content: str
    back_content: str
    readability_score: float

class CardGenerator(Protocol):
    """Turns source text into at most ``target_count`` card drafts."""
    name: str

    def generate(self, text: str, target_count: int) -> List[CandidateDraft]:
        ...

def truncate(value: str, max_length: int) -> str:
    value = value.strip()
    if len(value) <= max_length:
        return value
    return value[:max_length - 3].rstrip() + "..."

def get_card_generator(backend: str = None) -> CardGenerator:
    """Build the configured card generation backend."""
    backend = GenerationBackend(backend or settings.generation.backend)
    if backend == GenerationBackend.OPENROUTER:
        from utils.card_generation.llm import OpenRouterCardGenerator
        return OpenRouterCardGenerator.from_settings(settings.openrouter)

    from utils.card_generation.heuristic import HeuristicCardGenerator
    return HeuristicCardGenerator()
