from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
import enum
import logging
import time

import httpx

from client.state_store import SessionStateStore

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 100
MAX_TEXT_LENGTH = 10000
MIN_TARGET_COUNT = 1
MAX_TARGET_COUNT = 50
DEFAULT_POLL_INTERVAL = 2.0

class WorkflowStep(str, enum.Enum):
    INPUT = "input"
    PROCESSING = "processing"
    REVIEW = "review"
    COMPLETE = "complete"

class CardDecision(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

class WorkflowError(Exception):
    """Raised when a workflow step fails, locally or on the server."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR", status_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(message)

@dataclass
class ReviewCard:
    """A candidate as shown in the review step, with its local state."""
    id: str
    front_content: str
    back_content: str
    readability_score: float
    decision: CardDecision = CardDecision.PENDING
    edited_front: Optional[str] = None
    edited_back: Optional[str] = None
    accepted_card_id: Optional[str] = None

    @property
    def is_edited(self) -> bool:
        return self.edited_front is not None or self.edited_back is not None

    @property
    def current_front(self) -> str:
        return self.edited_front if self.edited_front is not None else self.front_content

    @property
    def current_back(self) -> str:
        return self.edited_back if self.edited_back is not None else self.back_content

class GenerationWorkflow:
    """Client for the text to flashcards workflow.

    Steps run ``input -> processing -> review -> complete``. A failed job sends
    the workflow back to ``input``. ``open_review`` jumps straight into review
    for a known job id, and the job id and step are kept in a short-lived
    state store so a new instance can ``restore`` them.
    """

    def __init__(
        self,
        http: httpx.Client,
        store: Optional[SessionStateStore] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        base_path: str = "/api/generation",
        headers: Optional[Dict[str, str]] = None
    ):
        self.http = http
        self.store = store or SessionStateStore()
        self.poll_interval = poll_interval
        self.sleep = sleep
        self.base_path = base_path.rstrip("/")
        self.headers = headers or {}
        self._reset_state()

    def _reset_state(self):
        self.step = WorkflowStep.INPUT
        self.generation_id: Optional[str] = None
        self.estimated_time_seconds: Optional[int] = None
        self.cards: List[ReviewCard] = []
        self.stats: Optional[Dict[str, Any]] = None
        self.error: Optional[str] = None
        self.loading = False
        self.result: Optional[Dict[str, Any]] = None

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> httpx.Response:
        response = self.http.request(method, f"{self.base_path}{path}", json=json, headers=self.headers)
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            raise WorkflowError(
                body.get("error") or f"Request failed with status {response.status_code}",
                code=body.get("code", "UNKNOWN_ERROR"),
                status_code=response.status_code,
                details=body.get("details")
            )
        return response

    def _persist(self):
        if self.generation_id:
            self.store.save_generation(self.generation_id, self.step.value)

    def _card(self, card_id: str) -> ReviewCard:
        for card in self.cards:
            if card.id == card_id:
                return card
        raise WorkflowError(f"Card {card_id} is not part of this review", code="NOT_FOUND")

    def _require_step(self, *steps: WorkflowStep):
        if self.step not in steps:
            raise WorkflowError(
                f"Operation not allowed in the {self.step.value} step",
                code="INVALID_STATE"
            )

    def submit(self, text: str, target_count: Optional[int] = None, set_id: Optional[str] = None) -> str:
        """Validate and submit source text. Moves the workflow to ``processing``."""
        self._require_step(WorkflowStep.INPUT)
        if len(text) < MIN_TEXT_LENGTH:
            raise WorkflowError(f"Text must be at least {MIN_TEXT_LENGTH} characters", code="VALIDATION_ERROR")
        if len(text) > MAX_TEXT_LENGTH:
            raise WorkflowError(f"Text must be at most {MAX_TEXT_LENGTH} characters", code="VALIDATION_ERROR")
        if target_count is not None and not MIN_TARGET_COUNT <= target_count <= MAX_TARGET_COUNT:
            raise WorkflowError(
                f"Target count must be between {MIN_TARGET_COUNT} and {MAX_TARGET_COUNT}",
                code="VALIDATION_ERROR"
            )

        payload: Dict[str, Any] = {"text": text}
        if target_count is not None:
            payload["target_count"] = target_count
        if set_id is not None:
            payload["set_id"] = set_id

        self.error = None
        body = self._request("POST", "/process-text", json=payload).json()
        self.generation_id = body["generation_id"]
        self.estimated_time_seconds = body.get("estimated_time_seconds")
        self.step = WorkflowStep.PROCESSING
        self._persist()
        logger.info(f"Submitted generation {self.generation_id}")
        return self.generation_id

    def poll_status(self) -> Dict[str, Any]:
        """Read the job status once."""
        return self._request("GET", f"/{self.generation_id}/status").json()

    def wait_for_completion(self, max_polls: Optional[int] = None) -> WorkflowStep:
        """Poll at a fixed interval until the job completes or fails.

        Returns the resulting step. With ``max_polls`` the workflow may still
        be ``processing`` when this returns; ``open_review`` remains available.
        """
        self._require_step(WorkflowStep.PROCESSING)
        polls = 0
        while True:
            status = self.poll_status()
            polls += 1
            if status["status"] == "completed":
                self.step = WorkflowStep.REVIEW
                self._persist()
                self.load_results()
                return self.step
            if status["status"] == "failed":
                self._fail(status.get("error"))
                return self.step
            if max_polls is not None and polls >= max_polls:
                return self.step
            self.sleep(self.poll_interval)

    def _fail(self, error: Optional[str]):
        """Record a failed job and return to ``input``."""
        message = error or "Generation failed"
        logger.warning(f"Generation {self.generation_id} failed: {message}")
        self.store.clear_generation()
        self._reset_state()
        self.error = message

    def load_results(self) -> List[ReviewCard]:
        """Fetch candidates for review.

        An empty list while the job is still running sets ``loading`` instead
        of failing. A failed job sends the workflow back to ``input`` with its
        error.
        """
        body = self._request("GET", f"/{self.generation_id}/results").json()
        self.stats = body.get("stats")
        self.cards = [
            ReviewCard(
                id=card["id"],
                front_content=card["front_content"],
                back_content=card["back_content"],
                readability_score=card["readability_score"]
            )
            for card in body.get("cards", [])
        ]
        self.loading = False
        if not self.cards:
            status = self.poll_status()
            if status["status"] == "failed":
                self._fail(status.get("error"))
            else:
                self.loading = status["status"] in ("pending", "processing")
        return self.cards

    def ensure_results(self) -> List[ReviewCard]:
        """Re-fetch results when the review list is empty."""
        if self.step == WorkflowStep.REVIEW and not self.cards:
            self.load_results()
        return self.cards

    def open_review(self, generation_id: str) -> List[ReviewCard]:
        """Go straight to the review step for a job, bypassing the wait."""
        self.generation_id = generation_id
        self.step = WorkflowStep.REVIEW
        self.error = None
        self._persist()
        return self.ensure_results()

    def restore(self) -> bool:
        """Rehydrate the job id and step from the state store."""
        generation_id, step = self.store.load_generation()
        if not generation_id or not step:
            return False
        self.generation_id = generation_id
        self.step = WorkflowStep(step)
        if self.step == WorkflowStep.REVIEW:
            self.ensure_results()
        return True

    def edit(self, card_id: str, front_content: Optional[str] = None, back_content: Optional[str] = None) -> ReviewCard:
        """Change a card's text locally. Applied only if the card is accepted later."""
        self._require_step(WorkflowStep.REVIEW)
        card = self._card(card_id)
        if front_content is not None:
            card.edited_front = front_content
        if back_content is not None:
            card.edited_back = back_content
        return card

    def accept(self, card_id: str, set_id: Optional[str] = None) -> Dict[str, Any]:
        """Accept a card, sending local edits as overrides."""
        self._require_step(WorkflowStep.REVIEW)
        card = self._card(card_id)
        payload: Dict[str, Any] = {}
        if set_id is not None:
            payload["set_id"] = set_id
        if card.edited_front is not None:
            payload["front_content"] = card.edited_front
        if card.edited_back is not None:
            payload["back_content"] = card.edited_back

        created = self._request("POST", f"/{self.generation_id}/cards/{card_id}/accept", json=payload).json()
        card.decision = CardDecision.ACCEPTED
        card.accepted_card_id = created["id"]
        return created

    def reject(self, card_id: str):
        self._require_step(WorkflowStep.REVIEW)
        card = self._card(card_id)
        self._request("POST", f"/{self.generation_id}/cards/{card_id}/reject")
        card.decision = CardDecision.REJECTED

    def accept_all(self, set_id: Optional[str] = None) -> Dict[str, Any]:
        """Accept every remaining candidate on the server."""
        self._require_step(WorkflowStep.REVIEW)
        payload = {"set_id": set_id} if set_id is not None else {}
        body = self._request("POST", f"/{self.generation_id}/accept", json=payload).json()
        for card in self.cards:
            if card.decision == CardDecision.PENDING:
                card.decision = CardDecision.ACCEPTED
        return body

    @property
    def accepted_ids(self) -> List[str]:
        return [card.id for card in self.cards if card.decision == CardDecision.ACCEPTED]

    def finalize(self, name: str, description: Optional[str] = None) -> Dict[str, Any]:
        """Create a set from the accepted cards. Moves the workflow to ``complete``."""
        self._require_step(WorkflowStep.REVIEW)
        accepted = self.accepted_ids
        if not accepted:
            raise WorkflowError("Accept at least one card before finalizing", code="VALIDATION_ERROR")

        payload: Dict[str, Any] = {"name": name, "accepted_cards": accepted}
        if description is not None:
            payload["description"] = description
        self.result = self._request("POST", f"/{self.generation_id}/finalize", json=payload).json()
        self.step = WorkflowStep.COMPLETE
        self.store.clear_generation()
        logger.info(f"Finalized generation {self.generation_id} into set {self.result['set_id']}")
        return self.result

    def reset(self):
        """Start over from the input step."""
        self.store.clear_generation()
        self._reset_state()
