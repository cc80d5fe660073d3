import enum

class SourceType(str, enum.Enum):
    """How a card came into existence."""
    MANUAL = "manual"
    AI = "ai"
    AI_EDITED = "ai_edited"

class GenerationStatus(str, enum.Enum):
    """Lifecycle of a generation job."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def progress(self) -> int:
        """Progress percentage reported to polling clients."""
        return {
            GenerationStatus.PENDING: 0,
            GenerationStatus.PROCESSING: 50,
            GenerationStatus.COMPLETED: 100,
            GenerationStatus.FAILED: 100,
        }[self]

    @property
    def is_terminal(self) -> bool:
        return self in (GenerationStatus.COMPLETED, GenerationStatus.FAILED)

class GenerationBackend(str, enum.Enum):
    """Available card generation backends."""
    HEURISTIC = "heuristic"
    OPENROUTER = "openrouter"
