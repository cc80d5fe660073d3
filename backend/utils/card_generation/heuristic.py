from typing import List
import logging
import re

from utils.card_generation.base import CandidateDraft, truncate, FRONT_MAX_LENGTH, BACK_MAX_LENGTH
from utils.readability import calculate_readability
from utils.sentence_processing import split_into_sentences

logger = logging.getLogger(__name__)

MIN_SENTENCE_LENGTH = 10
MIN_TERM_LENGTH = 5

QUESTION_STEMS = [
    "What is {term}?",
    "Why is {term} important?",
    "How does {term} work?",
    "Explain {term}.",
    "Define {term}.",
]

_PUNCTUATION = re.compile(r"^[^\w]+|[^\w]+$")

class HeuristicCardGenerator:
    """Deterministic generator built on sentence splitting.

    Sentences are paired up: the first of each pair supplies the key term for
    the question and the second becomes the answer.
    """
    name = "heuristic"

    def generate(self, text: str, target_count: int) -> List[CandidateDraft]:
        sentences = [
            s for s in split_into_sentences(text)
            if len(s) > MIN_SENTENCE_LENGTH
        ]
        count = min(target_count, len(sentences) // 2)
        logger.info(f"Heuristic generation: {len(sentences)} sentences, {count} cards")

        drafts = []
        for index in range(count):
            front_sentence = sentences[index * 2]
            back_sentence = sentences[index * 2 + 1]
            drafts.append(CandidateDraft(
                front_content=truncate(self._question(front_sentence, index), FRONT_MAX_LENGTH),
                back_content=truncate(back_sentence, BACK_MAX_LENGTH),
                readability_score=calculate_readability(f"{front_sentence} {back_sentence}")
            ))
        return drafts

    def _question(self, sentence: str, index: int) -> str:
        words = [_PUNCTUATION.sub("", word) for word in sentence.split()]
        words = [word for word in words if word]
        term = next((word for word in words if len(word) > MIN_TERM_LENGTH), None)
        if term is None:
            term = words[len(words) // 2] if words else sentence
        return QUESTION_STEMS[index % len(QUESTION_STEMS)].format(term=term)
