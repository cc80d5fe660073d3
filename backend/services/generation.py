from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from collections import OrderedDict
import hashlib
import logging
import math

from config.env import settings
from models.card import Card
from models.set import CardSet
from models.enums import GenerationStatus, SourceType
from models.generation import GenerationJob, GeneratedCardCandidate
from services.base import BaseService
from services.card import CardService
from utils.errors import AccessDeniedError, NotFoundError, InvalidCardsError
from utils.sentence_processing import count_words

from api.models.requests.generation import (
    ProcessTextRequest,
    AcceptAllRequest,
    AcceptCardRequest,
    FinalizeRequest
)
from api.models.responses.card import CardResponse
from api.models.responses.generation import (
    ProcessTextResponse,
    GenerationStatusResponse,
    CandidateCardResponse,
    GenerationResultsResponse,
    GenerationStats,
    AcceptAllResponse,
    FinalizeResponse,
    GenerationStatisticsResponse,
    GenerationHistoryEntry
)

logger = logging.getLogger(__name__)

def estimate_processing_time(text: str) -> int:
    """Estimated seconds to process the text, between 3 and 30."""
    return max(3, min(30, math.ceil(len(text) / 500)))

def default_target_count(text: str) -> int:
    """Roughly one card per hundred words, between 3 and 20."""
    return min(20, max(3, count_words(text) // 100))

class GenerationService(BaseService):
    """Server side of the text to flashcards workflow.

    Reads of a job owned by someone else report NOT_FOUND; mutations report
    FORBIDDEN. Counters on the job row are updated with atomic increments.
    """

    def __init__(self, db: Session):
        super().__init__(db)
        self.card_service = CardService(db)

    def _get_visible_job(self, user_id: str, generation_id: str) -> GenerationJob:
        job = self.db.query(GenerationJob).filter(
            GenerationJob.id == str(generation_id),
            GenerationJob.user_id == user_id
        ).first()
        if not job:
            raise NotFoundError("Generation not found")
        return job

    def _get_owned_job(self, user_id: str, generation_id: str) -> GenerationJob:
        return self.get_for_mutation(GenerationJob, generation_id, user_id, "Generation")

    def _get_candidate(self, job: GenerationJob, candidate_id: str) -> GeneratedCardCandidate:
        candidate = self.db.query(GeneratedCardCandidate).filter(
            GeneratedCardCandidate.id == str(candidate_id),
            GeneratedCardCandidate.generation_id == job.id
        ).first()
        if not candidate:
            raise NotFoundError("Generated card not found")
        return candidate

    def _get_destination_set(self, user_id: str, set_id) -> Optional[CardSet]:
        if set_id is None:
            return None
        card_set = self.db.query(CardSet).filter(
            CardSet.id == str(set_id),
            CardSet.user_id == user_id,
            CardSet.is_deleted == False  # noqa: E712
        ).first()
        if not card_set:
            raise AccessDeniedError("Card set not found or access denied")
        return card_set

    def _increment(self, job_id: str, **increments: int):
        """Atomically add to counter columns of a job row."""
        values = {
            getattr(GenerationJob, column): getattr(GenerationJob, column) + amount
            for column, amount in increments.items()
        }
        self.db.query(GenerationJob).filter(GenerationJob.id == job_id).update(
            values, synchronize_session=False
        )

    def _new_card(self, user_id: str, front: str, back: str, source_type: SourceType,
                  readability_score: Optional[float]) -> Card:
        card = Card(
            user_id=user_id,
            front_content=front,
            back_content=back,
            source_type=source_type.value,
            readability_score=readability_score
        )
        self.db.add(card)
        self.db.flush()
        return card

    def start_generation(self, user_id: str, request: ProcessTextRequest) -> GenerationJob:
        """Create a pending generation job for the submitted text."""
        with self.db_operation("Start generation"):
            card_set = self._get_destination_set(user_id, request.set_id)
            text = request.text
            job = GenerationJob(
                user_id=user_id,
                source_text=text,
                source_text_length=len(text),
                source_text_hash=hashlib.sha256(text.encode('utf-8')).hexdigest(),
                target_count=request.target_count or default_target_count(text),
                status=GenerationStatus.PENDING.value,
                model=settings.generation.backend,
                estimated_time_seconds=estimate_processing_time(text),
                set_id=card_set.id if card_set else None
            )
            self.db.add(job)
            self.db.commit()
            self.db.refresh(job)
            logger.info(
                f"Created generation {job.id} for user {user_id}: "
                f"{job.source_text_length} chars, target {job.target_count} cards"
            )
            return job

    def to_process_response(self, job: GenerationJob) -> ProcessTextResponse:
        return ProcessTextResponse(
            generation_id=job.id,
            estimated_time_seconds=job.estimated_time_seconds
        )

    def get_status(self, user_id: str, generation_id: str) -> GenerationStatusResponse:
        """Report the job's status and progress."""
        with self.db_operation("Get generation status"):
            job = self._get_visible_job(user_id, generation_id)
            status = GenerationStatus(job.status)
            return GenerationStatusResponse(
                status=status,
                progress=status.progress,
                error=job.error_message if status == GenerationStatus.FAILED else None
            )

    def get_results(self, user_id: str, generation_id: str) -> GenerationResultsResponse:
        """Return the remaining candidates, or an empty list while the job is still running."""
        with self.db_operation("Get generation results"):
            job = self._get_visible_job(user_id, generation_id)
            cards: List[CandidateCardResponse] = []
            if job.status == GenerationStatus.COMPLETED.value:
                candidates = self.db.query(GeneratedCardCandidate).filter(
                    GeneratedCardCandidate.generation_id == job.id
                ).order_by(GeneratedCardCandidate.position).all()
                cards = [CandidateCardResponse.model_validate(c) for c in candidates]
            return GenerationResultsResponse(
                cards=cards,
                stats=GenerationStats(
                    text_length=job.source_text_length,
                    generated_count=job.generated_count or 0,
                    generation_time_ms=job.generation_time_ms or 0
                )
            )

    def accept_all(self, user_id: str, generation_id: str, request: AcceptAllRequest) -> AcceptAllResponse:
        """Turn every remaining candidate into an ai card."""
        with self.db_operation("Accept all generated cards"):
            job = self._get_owned_job(user_id, generation_id)
            card_set = self._get_destination_set(user_id, request.set_id)
            candidates = self.db.query(GeneratedCardCandidate).filter(
                GeneratedCardCandidate.generation_id == job.id
            ).order_by(GeneratedCardCandidate.position).all()

            card_ids = []
            for candidate in candidates:
                card = self._new_card(
                    user_id, candidate.front_content, candidate.back_content,
                    SourceType.AI, candidate.readability_score
                )
                if card_set is not None:
                    self.card_service.link_card_to_set(card.id, card_set.id)
                card_ids.append(card.id)

            if card_ids:
                self._increment(job.id, accepted_unedited_count=len(card_ids))
            self.db.commit()

            logger.info(f"Accepted {len(card_ids)} cards from generation {job.id}")
            return AcceptAllResponse(accepted_count=len(card_ids), card_ids=card_ids)

    def accept_card(self, user_id: str, generation_id: str, candidate_id: str,
                    request: AcceptCardRequest) -> CardResponse:
        """Copy one candidate into a card, applying any edited content."""
        with self.db_operation("Accept generated card"):
            job = self._get_owned_job(user_id, generation_id)
            candidate = self._get_candidate(job, candidate_id)
            card_set = self._get_destination_set(user_id, request.set_id)

            front = request.front_content if request.front_content is not None else candidate.front_content
            back = request.back_content if request.back_content is not None else candidate.back_content
            edited = front != candidate.front_content or back != candidate.back_content
            source_type = SourceType.AI_EDITED if edited else SourceType.AI

            card = self._new_card(user_id, front, back, source_type, candidate.readability_score)
            if card_set is not None:
                self.card_service.link_card_to_set(card.id, card_set.id)

            if edited:
                self._increment(job.id, accepted_edited_count=1)
            else:
                self._increment(job.id, accepted_unedited_count=1)
            self.db.commit()
            self.db.refresh(card)

            logger.info(f"Accepted candidate {candidate.id} of generation {job.id} as {source_type.value}")
            return CardResponse.model_validate(card)

    def reject_card(self, user_id: str, generation_id: str, candidate_id: str) -> None:
        """Delete a candidate permanently and count the rejection."""
        with self.db_operation("Reject generated card"):
            job = self._get_owned_job(user_id, generation_id)
            candidate = self._get_candidate(job, candidate_id)
            self.db.delete(candidate)
            self._increment(job.id, rejected_count=1)
            self.db.commit()
            logger.info(f"Rejected candidate {candidate_id} of generation {job.id}")

    def finalize(self, user_id: str, generation_id: str, request: FinalizeRequest) -> FinalizeResponse:
        """Create a set from the accepted candidates in a single transaction.

        Every id is validated before anything is written; any failure rolls
        back the set, the cards and the statistics together.
        """
        with self.db_operation("Finalize generation"):
            job = self._get_owned_job(user_id, generation_id)
            accepted_ids = list(dict.fromkeys(str(card_id) for card_id in request.accepted_cards))

            candidates = self.db.query(GeneratedCardCandidate).filter(
                GeneratedCardCandidate.generation_id == job.id,
                GeneratedCardCandidate.id.in_(accepted_ids)
            ).all()
            by_id = {candidate.id: candidate for candidate in candidates}
            invalid = [card_id for card_id in accepted_ids if card_id not in by_id]
            if invalid:
                logger.warning(f"Finalize of generation {job.id} rejected: {len(invalid)} foreign card ids")
                raise InvalidCardsError(details={"card_ids": invalid})

            card_set = CardSet(
                user_id=user_id,
                name=request.name,
                description=request.description
            )
            self.db.add(card_set)
            self.db.flush()

            for card_id in accepted_ids:
                candidate = by_id[card_id]
                card = self._new_card(
                    user_id, candidate.front_content, candidate.back_content,
                    SourceType.AI, candidate.readability_score
                )
                self.card_service.link_card_to_set(card.id, card_set.id)

            self._increment(job.id, accepted_unedited_count=len(accepted_ids))
            job.set_id = card_set.id
            self.db.commit()

            logger.info(f"Finalized generation {job.id} into set {card_set.id} with {len(accepted_ids)} cards")
            return FinalizeResponse(set_id=card_set.id, name=card_set.name, card_count=len(accepted_ids))

    def get_statistics(self, user_id: str) -> GenerationStatisticsResponse:
        """Aggregate acceptance statistics across the user's generations."""
        with self.db_operation("Get generation statistics"):
            jobs = self.db.query(GenerationJob).filter(
                GenerationJob.user_id == user_id
            ).order_by(GenerationJob.created_at.desc()).all()

            total_generated = sum(job.generated_count or 0 for job in jobs)
            accepted_unedited = sum(job.accepted_unedited_count or 0 for job in jobs)
            accepted_edited = sum(job.accepted_edited_count or 0 for job in jobs)
            rejected = sum(job.rejected_count or 0 for job in jobs)

            timings = [
                job.generation_time_ms for job in jobs
                if job.status == GenerationStatus.COMPLETED.value and job.generation_time_ms is not None
            ]

            history: Dict[str, Dict[str, int]] = OrderedDict()
            for job in jobs:
                day = job.created_at.date().isoformat()
                entry = history.setdefault(day, {"generated": 0, "accepted": 0})
                entry["generated"] += job.generated_count or 0
                entry["accepted"] += (job.accepted_unedited_count or 0) + (job.accepted_edited_count or 0)

            accepted = accepted_unedited + accepted_edited
            return GenerationStatisticsResponse(
                total_generated=total_generated,
                accepted_unedited=accepted_unedited,
                accepted_edited=accepted_edited,
                rejected=rejected,
                acceptance_rate=round(accepted / total_generated, 4) if total_generated else 0.0,
                average_generation_time=round(sum(timings) / len(timings), 2) if timings else 0.0,
                history=[
                    GenerationHistoryEntry(date=day, **counts)
                    for day, counts in history.items()
                ]
            )
