from typing import Any, Callable, Dict, List, Optional
import json
import logging
import re
import time

import openai
from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI

from config.env import OpenRouterConfig
from utils.card_generation.base import CandidateDraft, truncate, FRONT_MAX_LENGTH, BACK_MAX_LENGTH
from utils.errors import (
    ExternalServiceError,
    ExternalAuthenticationError,
    ExternalRateLimitError,
    InvalidModelError,
    ContextLengthError,
    ResponseParseError,
)
from utils.readability import calculate_readability

# Get logger for this module
logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {500, 502, 503, 504}

SYSTEM_PROMPT = (
    "You are an expert at writing effective study flashcards. "
    "Analyse the text you are given and write the {count} most important flashcards. "
    "Every flashcard has a question and an answer. "
    "Questions must be clear and specific; answers concise but complete. "
    "Keep questions under 200 characters and answers under 500 characters. "
    "Add short helper notes only where they aid understanding."
)

FLASHCARD_SCHEMA = {
    "type": "object",
    "properties": {
        "cards": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "question": {"type": "string", "description": "Question on the front of the card"},
                    "answer": {"type": "string", "description": "Answer on the back of the card"},
                    "notes": {"type": "string", "description": "Optional helper notes"},
                },
                "required": ["question", "answer"],
            },
        },
    },
    "required": ["cards"],
}

RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": "flashcards",
        "strict": False,
        "schema": FLASHCARD_SCHEMA,
    },
}

def _error_types(error: openai.APIStatusError) -> set:
    """Collect the provider's error type and code values from an API error."""
    values = {getattr(error, attr, None) for attr in ('type', 'code')}
    body = error.body
    if isinstance(body, dict):
        inner = body.get('error', body)
        if isinstance(inner, dict):
            values.update((inner.get('type'), inner.get('code')))
    return {value for value in values if isinstance(value, str)}

def classify_api_error(error: Exception) -> ExternalServiceError:
    """Map an OpenAI-compatible client error onto the external service errors."""
    if isinstance(error, ExternalServiceError):
        return error
    if isinstance(error, openai.APIConnectionError):
        return ExternalServiceError(f"Network error: {str(error)}", retryable=True)
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return ExternalAuthenticationError(details={"status": error.status_code})
    if isinstance(error, openai.RateLimitError):
        return ExternalRateLimitError(details={"status": error.status_code})
    if isinstance(error, openai.APIStatusError):
        error_types = _error_types(error)
        if 'invalid_model' in error_types:
            return InvalidModelError(details={"status": error.status_code})
        if 'context_length_exceeded' in error_types:
            return ContextLengthError(details={"status": error.status_code})
        return ExternalServiceError(
            f"API error {error.status_code}: {error.message}",
            details={"status": error.status_code},
            retryable=error.status_code in RETRYABLE_STATUS_CODES
        )
    return ExternalServiceError(f"Unexpected error calling the completion API: {str(error)}")

def parse_ai_response(content: str) -> List[Dict[str, Any]]:
    """Parse and validate the model's response into a list of question/answer dicts."""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    content = content.strip()

    # Control characters break json.loads
    content = re.sub(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]', '', content)

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI response: {str(e)}")
        logger.error(f"Content causing error: {content[:500]}...")
        raise ResponseParseError(f"Failed to parse JSON response: {str(e)}")

    # Unwrap {"cards": [...]}, {"flashcards": [...]} or {"response": {...}}
    if isinstance(parsed, dict) and 'response' in parsed and isinstance(parsed['response'], (dict, list)):
        parsed = parsed['response']
    if isinstance(parsed, dict):
        parsed = parsed.get('cards', parsed.get('flashcards'))
    if not isinstance(parsed, list):
        raise ResponseParseError("Expected a list of cards in the model response")

    cards = []
    for i, card in enumerate(parsed):
        if not isinstance(card, dict):
            raise ResponseParseError(f"Card {i + 1} is not an object")
        question = card.get('question', card.get('front'))
        answer = card.get('answer', card.get('back'))
        if not question or not answer:
            logger.warning(f"Skipping card {i + 1} without question or answer")
            continue
        cards.append({"question": str(question), "answer": str(answer), "notes": card.get('notes')})

    logger.info(f"Parsed {len(cards)} cards from model response")
    return cards

class OpenRouterCardGenerator:
    """Card generator backed by one JSON-schema constrained chat completion.

    Retryable failures (network, 429, 5xx) are retried with exponential
    backoff; authentication and other client errors fail immediately.
    """
    name = "openrouter"

    def __init__(
        self,
        llm: Any,
        model: str,
        max_retries: int = 3,
        backoff_base_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.llm = llm
        self.model = model
        self.max_retries = max(1, max_retries)
        self.backoff_base_seconds = backoff_base_seconds
        self.sleep = sleep
        self.prompt = ChatPromptTemplate.from_messages([
            ("system", SYSTEM_PROMPT),
            ("human", "{text}"),
        ])
        self.name = f"openrouter/{model}"

    @classmethod
    def from_settings(cls, config: OpenRouterConfig) -> "OpenRouterCardGenerator":
        if not config.api_key:
            raise ExternalAuthenticationError("OpenRouter API key is not configured")
        llm = ChatOpenAI(
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            api_key=config.api_key,
            base_url=config.base_url,
            max_retries=0,
            default_headers={"HTTP-Referer": config.referer, "X-Title": "10xCards"},
        ).bind(response_format=RESPONSE_FORMAT)
        return cls(
            llm=llm,
            model=config.model,
            max_retries=config.max_retries,
            backoff_base_seconds=config.backoff_base_seconds
        )

    def _complete(self, text: str, target_count: int) -> str:
        messages = self.prompt.format_messages(count=target_count, text=text)
        last_error: Optional[ExternalServiceError] = None

        for attempt in range(self.max_retries):
            if attempt > 0:
                delay = (2 ** attempt) * self.backoff_base_seconds
                logger.info(f"Retrying completion in {delay:.1f}s (attempt {attempt + 1}/{self.max_retries})")
                self.sleep(delay)
            try:
                response = self.llm.invoke(messages)
                return response.content if hasattr(response, 'content') else str(response)
            except Exception as e:
                last_error = classify_api_error(e)
                logger.warning(
                    f"Completion attempt {attempt + 1}/{self.max_retries} failed: "
                    f"{last_error.reason} {last_error.message}"
                )
                if not last_error.retryable:
                    raise last_error from e

        raise last_error

    def generate(self, text: str, target_count: int) -> List[CandidateDraft]:
        content = self._complete(text, target_count)
        cards = parse_ai_response(content)[:target_count]
        return [
            CandidateDraft(
                front_content=truncate(card["question"], FRONT_MAX_LENGTH),
                back_content=truncate(card["answer"], BACK_MAX_LENGTH),
                readability_score=calculate_readability(f"{card['question']} {card['answer']}")
            )
            for card in cards
        ]
