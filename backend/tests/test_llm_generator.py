import json
import httpx
import openai
import pytest
from unittest.mock import MagicMock

from utils.card_generation.llm import OpenRouterCardGenerator, parse_ai_response, classify_api_error
from utils.errors import (
    ExternalServiceError,
    ExternalAuthenticationError,
    ExternalRateLimitError,
    InvalidModelError,
    ContextLengthError,
    ResponseParseError,
)

REQUEST = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")

def status_error(cls, status_code, body=None):
    response = httpx.Response(status_code, request=REQUEST)
    return cls(f"Error code: {status_code}", response=response, body=body)

def completion(cards):
    message = MagicMock()
    message.content = json.dumps({"cards": cards})
    return message

def make_generator(side_effect, max_retries=3):
    llm = MagicMock()
    llm.invoke.side_effect = side_effect
    sleep = MagicMock()
    generator = OpenRouterCardGenerator(
        llm=llm,
        model="test/model",
        max_retries=max_retries,
        backoff_base_seconds=1.0,
        sleep=sleep
    )
    return generator, llm, sleep

GOOD_CARDS = [
    {"question": "What is osmosis?", "answer": "Movement of water across a membrane.", "notes": "Passive"},
    {"question": "What do ribosomes do?", "answer": "They assemble proteins."},
]

def test_generate_parses_cards():
    generator, llm, sleep = make_generator([completion(GOOD_CARDS)])
    drafts = generator.generate("Some source text", 5)

    assert [d.front_content for d in drafts] == ["What is osmosis?", "What do ribosomes do?"]
    assert drafts[1].back_content == "They assemble proteins."
    assert all(0.5 <= d.readability_score <= 1.0 for d in drafts)
    sleep.assert_not_called()

    messages = llm.invoke.call_args[0][0]
    assert "5 most important flashcards" in messages[0].content
    assert messages[1].content == "Some source text"

def test_generate_caps_at_target_count():
    generator, _, _ = make_generator([completion(GOOD_CARDS)])
    assert len(generator.generate("text", 1)) == 1

def test_retries_rate_limit_then_succeeds():
    generator, llm, sleep = make_generator([
        status_error(openai.RateLimitError, 429),
        status_error(openai.InternalServerError, 503),
        completion(GOOD_CARDS),
    ])
    drafts = generator.generate("text", 5)
    assert len(drafts) == 2
    assert llm.invoke.call_count == 3
    assert [c.args[0] for c in sleep.call_args_list] == [2.0, 4.0]

def test_retries_network_errors_until_exhausted():
    generator, llm, _ = make_generator([openai.APIConnectionError(request=REQUEST)] * 3)
    with pytest.raises(ExternalServiceError) as exc_info:
        generator.generate("text", 5)
    assert exc_info.value.retryable is True
    assert llm.invoke.call_count == 3

def test_authentication_error_is_not_retried():
    generator, llm, sleep = make_generator([status_error(openai.AuthenticationError, 401)])
    with pytest.raises(ExternalAuthenticationError):
        generator.generate("text", 5)
    assert llm.invoke.call_count == 1
    sleep.assert_not_called()

def test_bad_request_is_not_retried():
    generator, llm, _ = make_generator([status_error(openai.BadRequestError, 400)])
    with pytest.raises(ExternalServiceError) as exc_info:
        generator.generate("text", 5)
    assert exc_info.value.retryable is False
    assert llm.invoke.call_count == 1

def test_invalid_json_is_not_retried():
    bad = MagicMock()
    bad.content = "not json"
    generator, llm, _ = make_generator([bad])
    with pytest.raises(ResponseParseError):
        generator.generate("text", 5)
    assert llm.invoke.call_count == 1

@pytest.mark.parametrize("error,expected", [
    (status_error(openai.PermissionDeniedError, 403), ExternalAuthenticationError),
    (status_error(openai.RateLimitError, 429), ExternalRateLimitError),
    (status_error(openai.BadRequestError, 400, {"type": "invalid_model"}), InvalidModelError),
    (status_error(openai.BadRequestError, 400, {"error": {"code": "context_length_exceeded"}}), ContextLengthError),
])
def test_classify_api_error(error, expected):
    assert isinstance(classify_api_error(error), expected)

def test_classify_server_errors_are_retryable():
    for status_code in (500, 502, 503, 504):
        error = status_error(openai.APIStatusError, status_code)
        assert classify_api_error(error).retryable is True
    assert classify_api_error(status_error(openai.APIStatusError, 418)).retryable is False

def test_parse_ai_response_strips_code_fences():
    content = "```json\n" + json.dumps({"cards": GOOD_CARDS}) + "\n```"
    cards = parse_ai_response(content)
    assert cards[0]["question"] == "What is osmosis?"

def test_parse_ai_response_accepts_front_back_lists():
    content = json.dumps([{"front": "F", "back": "B"}, {"front": "", "back": "skipped"}])
    assert parse_ai_response(content) == [{"question": "F", "answer": "B", "notes": None}]

def test_parse_ai_response_unwraps_response_key():
    content = json.dumps({"response": {"cards": GOOD_CARDS}})
    assert len(parse_ai_response(content)) == 2

def test_parse_ai_response_rejects_wrong_shape():
    with pytest.raises(ResponseParseError):
        parse_ai_response(json.dumps({"something": "else"}))
