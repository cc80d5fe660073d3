from typing import Any, Callable, Dict, Optional, Tuple
import time

GENERATION_ID_KEY = "flashcard_generation_id"
GENERATION_STEP_KEY = "flashcard_generation_step"

class SessionStateStore:
    """Short-lived key/value store for resuming a workflow after a reload.

    Entries expire ``ttl_seconds`` after they were last written.
    """

    def __init__(self, ttl_seconds: float = 3600, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._items: Dict[str, Tuple[Any, float]] = {}

    def set(self, key: str, value: Any):
        self._items[key] = (value, self._clock() + self.ttl_seconds)

    def get(self, key: str, default: Any = None) -> Any:
        item = self._items.get(key)
        if item is None:
            return default
        value, expires_at = item
        if self._clock() >= expires_at:
            del self._items[key]
            return default
        return value

    def remove(self, key: str):
        self._items.pop(key, None)

    def clear(self):
        self._items.clear()

    def save_generation(self, generation_id: str, step: str):
        self.set(GENERATION_ID_KEY, generation_id)
        self.set(GENERATION_STEP_KEY, step)

    def load_generation(self) -> Tuple[Optional[str], Optional[str]]:
        return self.get(GENERATION_ID_KEY), self.get(GENERATION_STEP_KEY)

    def clear_generation(self):
        self.remove(GENERATION_ID_KEY)
        self.remove(GENERATION_STEP_KEY)
