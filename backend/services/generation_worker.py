from datetime import datetime, UTC
from typing import Callable, Optional
import logging
import time

import database
from config.env import settings
from models.enums import GenerationStatus
from models.generation import GenerationJob, GeneratedCardCandidate
from utils.card_generation import CardGenerator, get_card_generator
from utils.errors import AppError

logger = logging.getLogger(__name__)

def simulated_delay_seconds(text_length: int) -> float:
    """Processing delay proportional to the text length, within the configured bounds."""
    config = settings.generation
    delay_ms = min(config.max_delay_ms, max(config.min_delay_ms, text_length / 100))
    return delay_ms / 1000

def run_generation_job(
    generation_id: str,
    generator: Optional[CardGenerator] = None,
    sleep: Callable[[float], None] = time.sleep
):
    """Background task: generate candidates for a pending job.

    Runs after the HTTP response has been sent, so it opens its own session.
    Any failure is recorded on the job row as ``failed`` with its message.
    """
    db = database.SessionLocal()
    try:
        job = db.query(GenerationJob).filter(GenerationJob.id == generation_id).first()
        if not job:
            logger.error(f"Generation {generation_id} disappeared before processing")
            return
        if job.status != GenerationStatus.PENDING.value:
            logger.warning(f"Generation {generation_id} is {job.status}, skipping")
            return

        started = time.perf_counter()
        try:
            job.status = GenerationStatus.PROCESSING.value
            db.commit()
            logger.info(f"Processing generation {generation_id}")

            if settings.generation.simulate_delay:
                sleep(simulated_delay_seconds(job.source_text_length))

            generator = generator or get_card_generator()
            drafts = generator.generate(job.source_text, job.target_count)

            for position, draft in enumerate(drafts):
                db.add(GeneratedCardCandidate(
                    generation_id=job.id,
                    position=position,
                    front_content=draft.front_content,
                    back_content=draft.back_content,
                    readability_score=draft.readability_score
                ))

            job.model = generator.name
            job.generated_count = len(drafts)
            job.generation_time_ms = int((time.perf_counter() - started) * 1000)
            job.status = GenerationStatus.COMPLETED.value
            job.updated_at = datetime.now(UTC)
            db.commit()
            logger.info(f"Generation {generation_id} completed with {len(drafts)} cards")

        except Exception as e:
            db.rollback()
            message = e.message if isinstance(e, AppError) else str(e)
            logger.error(f"Generation {generation_id} failed: {message}", exc_info=True)
            job = db.query(GenerationJob).filter(GenerationJob.id == generation_id).first()
            job.status = GenerationStatus.FAILED.value
            job.error_message = message or type(e).__name__
            job.generation_time_ms = int((time.perf_counter() - started) * 1000)
            db.commit()
    finally:
        db.close()
